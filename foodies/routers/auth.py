"""Account setup routes for approved applicants."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from foodies.db.base import get_db
from foodies.routers.deps import get_current_user, get_identity
from foodies.schemas.auth import (
    AcceptInviteRequest,
    AccountUser,
    SessionTokens,
    SetPasswordRequest,
    SetPasswordResult,
    SetupCompleted,
)
from foodies.schemas.profile import ProfileOut
from foodies.services.accounts import AccountSetupService
from foodies.services.identity import IdentityClient, IdentityUser

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/set-password", response_model=SetPasswordResult)
async def set_password(
    body: SetPasswordRequest,
    session: AsyncSession = Depends(get_db),
    identity: IdentityClient = Depends(get_identity),
):
    profile = await AccountSetupService(session, identity).set_password(
        body.token or "", body.password or "", body.confirm_password or ""
    )
    return SetPasswordResult(user=AccountUser.model_validate(profile))


@router.post("/accept-invite", response_model=SessionTokens)
async def accept_invite(
    body: AcceptInviteRequest,
    session: AsyncSession = Depends(get_db),
    identity: IdentityClient = Depends(get_identity),
):
    """Trade an invite token for a signed-in session."""
    access, refresh = await AccountSetupService(session, identity).accept_invite(body.token or "")
    return SessionTokens(access_token=access, refresh_token=refresh)


@router.post("/complete-setup", response_model=SetupCompleted)
async def complete_setup(
    user: IdentityUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
    identity: IdentityClient = Depends(get_identity),
):
    profile = await AccountSetupService(session, identity).complete_setup(user)
    return SetupCompleted(profile=ProfileOut.model_validate(profile))
