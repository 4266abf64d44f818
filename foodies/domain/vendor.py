"""SQLAlchemy ORM model for Vendors.

A vendor row shares its primary key with the owning profile and is only
materialized once the vendor finishes account setup.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from foodies.db.base import Base
from foodies.domain.mixins import TimestampMixin


class Vendor(Base, TimestampMixin):
    __tablename__ = "vendors"

    id: Mapped[str] = mapped_column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    business_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    business_address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    menu_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    profile: Mapped["Profile"] = relationship(back_populates="vendor", lazy="joined")
