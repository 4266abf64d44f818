"""Schools report schemas.

Field names stay snake_case: dashboards consume this report as-is.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class AdminSummary(BaseModel):
    id: str
    full_name: str | None = None
    email: str | None = None
    status: str | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class SchoolSummary(BaseModel):
    school_name: str
    admin_email: str
    admin_name: str
    admin_id: str
    status: str
    date_created: datetime | None = None
    admin_count: int
    vendor_count: int
    deliverer_count: int
    all_admins: list[AdminSummary] = Field(default_factory=list)


class SchoolsResponse(BaseModel):
    schools: list[SchoolSummary]
