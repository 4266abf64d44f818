"""Platform-wide routes for superadmins."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from foodies.core.pagination import PaginationParams
from foodies.core.response import ListResponse, paginated
from foodies.db.base import get_db
from foodies.domain.enums import Role
from foodies.domain.profile import Profile
from foodies.routers.admin import status_change_result
from foodies.routers.deps import get_identity, require_superadmin
from foodies.schemas.common import SuccessResponse
from foodies.schemas.profile import (
    ProfileOut,
    ResetPasswordRequest,
    ResetPasswordResult,
    UserActionRequest,
    UserActionResult,
)
from foodies.schemas.vendor import VendorDeactivate, VendorList, VendorOut
from foodies.services.identity import IdentityClient
from foodies.services.users import UserService
from foodies.services.vendors import VendorService

router = APIRouter(tags=["Superadmin"])

_ALL_USER_ROLES = (Role.CUSTOMER, Role.VENDOR, Role.DELIVERER, Role.ADMIN)


@router.get("/superadmin/users", response_model=ListResponse[ProfileOut])
async def list_users(
    organization: Optional[str] = Query(default=None),
    pagination: PaginationParams = Depends(),
    _: Profile = Depends(require_superadmin),
    session: AsyncSession = Depends(get_db),
    identity: IdentityClient = Depends(get_identity),
):
    items, total = await UserService(session, identity).list_users(
        pagination, _ALL_USER_ROLES, organization
    )
    return paginated(
        [ProfileOut.model_validate(p) for p in items],
        total, pagination.page, pagination.limit,
    )


@router.get("/superadmin/customers", response_model=ListResponse[ProfileOut])
async def list_customers(
    organization: Optional[str] = Query(default=None),
    pagination: PaginationParams = Depends(),
    _: Profile = Depends(require_superadmin),
    session: AsyncSession = Depends(get_db),
    identity: IdentityClient = Depends(get_identity),
):
    items, total = await UserService(session, identity).list_users(
        pagination, (Role.CUSTOMER,), organization
    )
    return paginated(
        [ProfileOut.model_validate(p) for p in items],
        total, pagination.page, pagination.limit,
    )


@router.patch("/superadmin/users/{user_id}", response_model=UserActionResult)
async def change_user_status(
    user_id: str,
    body: UserActionRequest,
    caller: Profile = Depends(require_superadmin),
    session: AsyncSession = Depends(get_db),
    identity: IdentityClient = Depends(get_identity),
):
    change = await UserService(session, identity).change_status(caller, user_id, body.action)
    return status_change_result(change)


@router.get("/superadmin/vendors", response_model=VendorList)
async def list_vendors(
    organization: Optional[str] = Query(default=None, description="Only vendors of this school"),
    _: Profile = Depends(require_superadmin),
    session: AsyncSession = Depends(get_db),
):
    vendors = await VendorService(session).list_vendors(organization)
    return VendorList(vendors=[VendorOut.model_validate(v) for v in vendors])


@router.delete("/superadmin/vendors", response_model=SuccessResponse)
async def deactivate_vendor(
    body: VendorDeactivate,
    caller: Profile = Depends(require_superadmin),
    session: AsyncSession = Depends(get_db),
):
    await VendorService(session).deactivate(body.vendor_id, caller)
    return SuccessResponse(message="Vendor deactivated")


@router.post("/reset-admin-password", response_model=ResetPasswordResult)
async def reset_admin_password(
    body: ResetPasswordRequest,
    _: Profile = Depends(require_superadmin),
    session: AsyncSession = Depends(get_db),
    identity: IdentityClient = Depends(get_identity),
):
    """Set a fresh random password on an admin account and return it once."""
    password, email = await UserService(session, identity).reset_password(body.admin_id)
    return ResetPasswordResult(new_password=password, email=email)
