"""Profile, user-lifecycle, and admin-settings schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from foodies.domain.enums import UserAction
from foodies.schemas.common import CamelModel


class ProfileOut(CamelModel):
    id: str
    email: str | None = None
    full_name: str | None = None
    role: str
    organization: str | None = None
    organization_id: str | None = None
    status: str
    profile_picture_url: str | None = None
    header_image_url: str | None = None
    phone: str | None = None
    delivery_address: str | None = None
    created_at: datetime


class UserActionRequest(CamelModel):
    action: UserAction


class UserStatus(CamelModel):
    id: str
    status: str


class UserActionResult(CamelModel):
    success: bool = True
    message: str
    user: UserStatus
    # False when the identity-service ban/unban failed; the profile change still stands
    identity_synced: bool = True


class SettingsOut(CamelModel):
    organization: str | None = None
    profile_picture_url: str | None = None
    header_image_url: str | None = None
    full_name: str | None = None
    email: str | None = None


class SettingsUpdate(CamelModel):
    profile_picture_url: str | None = None
    header_image_url: str | None = None


class SettingsUpdated(CamelModel):
    success: bool = True
    profile: SettingsOut


class ResetPasswordRequest(CamelModel):
    admin_id: str = Field(min_length=1)


class ResetPasswordResult(CamelModel):
    success: bool = True
    new_password: str
    email: str | None = None
