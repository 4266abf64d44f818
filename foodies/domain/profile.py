"""SQLAlchemy ORM model for user profiles."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from foodies.db.base import Base
from foodies.domain.enums import ProfileStatus
from foodies.domain.mixins import TimestampMixin


class Profile(Base, TimestampMixin):
    """Platform view of a user.

    The id equals the identity-service user id once an account exists. Profiles
    created by the invite_token approval path exist before that account does.
    """

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email: Mapped[Optional[str]] = mapped_column(String(255), index=True, nullable=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # "superadmin" | "admin" | "vendor" | "deliverer" | "customer"
    role: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    organization: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    organization_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    # "pending" | "approved" | "declined" | "active"
    status: Mapped[str] = mapped_column(
        String(20), default=ProfileStatus.PENDING.value, nullable=False, index=True
    )

    profile_picture_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    header_image_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    invite_token: Mapped[Optional[str]] = mapped_column(
        String(128), unique=True, index=True, nullable=True
    )
    invite_token_expires: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    delivery_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    vendor: Mapped[Optional["Vendor"]] = relationship(back_populates="profile", lazy="noload")
