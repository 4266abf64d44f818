"""Account-setup schemas (invite acceptance, password setup, setup completion)."""

from __future__ import annotations

from pydantic import Field

from foodies.schemas.common import CamelModel
from foodies.schemas.profile import ProfileOut


class AcceptInviteRequest(CamelModel):
    token: str | None = None


class SessionTokens(CamelModel):
    success: bool = True
    message: str = "Invitation accepted successfully"
    access_token: str = Field(alias="access_token")
    refresh_token: str = Field(alias="refresh_token")


class SetPasswordRequest(CamelModel):
    # Presence and strength are checked in the service so the messages match the form
    token: str | None = None
    password: str | None = None
    confirm_password: str | None = None


class AccountUser(CamelModel):
    id: str
    email: str | None = None
    role: str


class SetPasswordResult(CamelModel):
    success: bool = True
    message: str = "Password set successfully. You can now log in."
    user: AccountUser


class SetupCompleted(CamelModel):
    success: bool = True
    profile: ProfileOut
