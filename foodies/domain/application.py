"""SQLAlchemy ORM model for join applications (admin / vendor / deliverer)."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from foodies.db.base import Base
from foodies.domain.enums import ApplicationStatus
from foodies.domain.mixins import TimestampMixin


class Application(Base, TimestampMixin):
    __tablename__ = "applications"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # Identity user (identity_invite) or profile (invite_token) created on approval
    user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    # "admin" | "vendor" | "deliverer"
    role: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    organization: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)

    business_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    business_address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    menu_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    vehicle_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    availability: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # Free text; admin applications keep the school email domain here
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    document_urls: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20), default=ApplicationStatus.PENDING.value, nullable=False, index=True
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
