"""SQLAlchemy ORM models for organizations (schools) and the read-only orders table."""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import JSON, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from foodies.db.base import Base
from foodies.domain.mixins import TimestampMixin


class Organization(Base, TimestampMixin):
    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    email_domains: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    # "active" | "inactive"
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)


class Order(Base, TimestampMixin):
    """Orders are placed elsewhere; this service only aggregates them."""

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    customer_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    vendor_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    deliverer_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    # "pending" | "accepted" | "on_the_way" | "delivered" | "completed" | "cancelled"
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)
    total: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
