"""Application intake and review routes.

Submission is public. Listing and review need an admin or superadmin bearer
token; the reviewer is always the authenticated caller.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from foodies.db.base import get_db
from foodies.domain.enums import ApprovalStrategy, Role
from foodies.domain.profile import Profile
from foodies.routers.deps import get_identity, require_staff, require_superadmin
from foodies.schemas.application import (
    AdminApplicationCreate,
    ApplicationCreate,
    ApplicationCreated,
    ApplicationOut,
    ApprovalResult,
    ApproveRequest,
    DecisionResult,
    DeclineRequest,
)
from foodies.services.applications import ApplicationService
from foodies.services.approval import ApprovalService
from foodies.services.identity import IdentityClient

router = APIRouter(tags=["Applications"])


# ------------------------------------------------------------------
# Intake
# ------------------------------------------------------------------

@router.post("/applications", response_model=ApplicationCreated)
async def submit_application(
    body: ApplicationCreate,
    session: AsyncSession = Depends(get_db),
):
    """Submit a vendor, deliverer, or admin application (stored as pending)."""
    application = await ApplicationService(session).submit(body)
    return ApplicationCreated(data=ApplicationOut.model_validate(application))


@router.post("/submit-admin-application", response_model=ApplicationCreated)
async def submit_admin_application(
    body: AdminApplicationCreate,
    session: AsyncSession = Depends(get_db),
):
    """School sign-up form: an admin application keyed by school domain."""
    application = await ApplicationService(session).submit(body.to_application())
    return ApplicationCreated(data=ApplicationOut.model_validate(application))


@router.get("/applications", response_model=list[ApplicationOut])
async def list_applications(
    role: Optional[str] = Query(default=None, description="Filter by applicant role"),
    caller: Profile = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    items = await ApplicationService(session).list_pending(caller, role=role)
    return [ApplicationOut.model_validate(a) for a in items]


# ------------------------------------------------------------------
# Review
# ------------------------------------------------------------------

@router.post("/approve-application", response_model=ApprovalResult)
async def approve_application(
    body: ApproveRequest,
    caller: Profile = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
    identity: IdentityClient = Depends(get_identity),
):
    return await ApprovalService(session, identity).approve(body.application_id, caller)


@router.post("/approve-admin-application", response_model=ApprovalResult)
async def approve_admin_application(
    body: ApproveRequest,
    caller: Profile = Depends(require_superadmin),
    session: AsyncSession = Depends(get_db),
    identity: IdentityClient = Depends(get_identity),
):
    """Approve a school admin and hand back a single-use set-password link."""
    return await ApprovalService(session, identity).approve(
        body.application_id,
        caller,
        strategy=ApprovalStrategy.INVITE_TOKEN,
        required_role=Role.ADMIN,
    )


@router.post("/decline-application", response_model=DecisionResult)
async def decline_application(
    body: DeclineRequest,
    caller: Profile = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
    identity: IdentityClient = Depends(get_identity),
):
    application = await ApprovalService(session, identity).decline(
        body.application_id, caller, body.reason
    )
    return DecisionResult(
        message="Application declined",
        application=ApplicationOut.model_validate(application),
    )
