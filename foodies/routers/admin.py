"""School admin routes: users of the caller's organization and profile settings."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from foodies.db.base import get_db
from foodies.domain.profile import Profile
from foodies.routers.deps import get_identity, require_admin, require_staff
from foodies.schemas.profile import (
    ProfileOut,
    SettingsOut,
    SettingsUpdate,
    SettingsUpdated,
    UserActionRequest,
    UserActionResult,
    UserStatus,
)
from foodies.services.identity import IdentityClient
from foodies.services.users import StatusChange, UserService

router = APIRouter(prefix="/admin", tags=["Admin"])


def status_change_result(change: StatusChange) -> UserActionResult:
    return UserActionResult(
        message=f"User {change.action.value}d successfully",
        user=UserStatus(id=change.profile.id, status=change.profile.status),
        identity_synced=change.identity_synced,
    )


@router.get("/users", response_model=list[ProfileOut])
async def list_users(
    caller: Profile = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    identity: IdentityClient = Depends(get_identity),
):
    """Customers, vendors, and deliverers of the admin's school."""
    users = await UserService(session, identity).list_org_users(caller)
    return [ProfileOut.model_validate(u) for u in users]


@router.patch("/users/{user_id}", response_model=UserActionResult)
async def change_user_status(
    user_id: str,
    body: UserActionRequest,
    caller: Profile = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    identity: IdentityClient = Depends(get_identity),
):
    change = await UserService(session, identity).change_status(caller, user_id, body.action)
    return status_change_result(change)


@router.get("/settings", response_model=SettingsOut)
async def get_settings(caller: Profile = Depends(require_staff)):
    return SettingsOut.model_validate(caller)


@router.patch("/settings", response_model=SettingsUpdated)
async def update_settings(
    body: SettingsUpdate,
    caller: Profile = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
    identity: IdentityClient = Depends(get_identity),
):
    """Update branding image URLs; only fields present in the body change."""
    profile = await UserService(session, identity).update_settings(
        caller, **body.model_dump(exclude_unset=True)
    )
    return SettingsUpdated(profile=SettingsOut.model_validate(profile))
