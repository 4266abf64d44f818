"""Application and review-decision schemas (request DTOs and response models)."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from foodies.domain.enums import APPLICANT_ROLES, Role
from foodies.schemas.common import CamelModel


class ApplicationCreate(CamelModel):
    full_name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    role: str = Field(min_length=1)
    organization: str | None = None
    business_name: str | None = None
    business_address: str | None = None
    menu_summary: str | None = None
    vehicle_type: str | None = None
    availability: str | None = None
    notes: str | None = None
    document_urls: list[str] = Field(default_factory=list)

    @field_validator("full_name", "email", "role")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Missing required fields")
        return value

    @field_validator("role")
    @classmethod
    def _applicant_role(cls, value: str) -> str:
        value = value.lower()
        if value not in {r.value for r in APPLICANT_ROLES}:
            raise ValueError(f"Role must be one of: admin, deliverer, vendor (got '{value}')")
        return value

    @field_validator("document_urls", mode="before")
    @classmethod
    def _as_list(cls, value):
        if value is None or value == "":
            return []
        if isinstance(value, str):
            return [value]
        return value


class AdminApplicationCreate(CamelModel):
    """School sign-up: the organization name doubles as the applicant name."""

    organization: str = Field(min_length=1)
    email: str = Field(min_length=1)
    full_name: str | None = None
    school_domain: str | None = None
    document_urls: list[str] = Field(default_factory=list)

    def to_application(self) -> ApplicationCreate:
        return ApplicationCreate(
            full_name=self.full_name or self.organization,
            email=self.email,
            role=Role.ADMIN.value,
            organization=self.organization,
            notes=self.school_domain,
            document_urls=self.document_urls,
        )


class ApplicationOut(CamelModel):
    id: str
    user_id: str | None = None
    full_name: str
    email: str
    role: str
    organization: str | None = None
    business_name: str | None = None
    business_address: str | None = None
    menu_summary: str | None = None
    vehicle_type: str | None = None
    availability: str | None = None
    notes: str | None = None
    document_urls: list[str] = Field(default_factory=list)
    status: str
    created_at: datetime
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None


class ApplicationCreated(CamelModel):
    success: bool = True
    data: ApplicationOut


# ---------------------------------------------------------------------------
# Review decisions
# ---------------------------------------------------------------------------

class ApproveRequest(CamelModel):
    # The reviewer is the authenticated caller; a legacy adminId in the body is ignored
    application_id: str = Field(min_length=1)


class DeclineRequest(CamelModel):
    application_id: str = Field(min_length=1)
    reason: str | None = None


class ProvisionedUser(CamelModel):
    id: str
    email: str
    role: str
    organization: str | None = None
    organization_id: str | None = None


class ApprovalResult(CamelModel):
    success: bool = True
    message: str
    user: ProvisionedUser
    magic_link: str | None = None
    email_note: str | None = None


class DecisionResult(CamelModel):
    success: bool = True
    message: str
    application: ApplicationOut
