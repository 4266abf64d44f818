"""Vendor and deliverer management routes for school admins and superadmins."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from foodies.db.base import get_db
from foodies.domain.enums import Role
from foodies.domain.profile import Profile
from foodies.routers.deps import require_staff
from foodies.schemas.common import SuccessResponse
from foodies.schemas.vendor import ActiveToggle, DelivererOut, DelivererStatusOut, VendorOut
from foodies.services.vendors import DelivererService, VendorService

router = APIRouter(tags=["Vendors"])


def _scope(caller: Profile) -> str | None:
    """Organization filter for listings: superadmins see every school."""
    if caller.role == Role.SUPERADMIN.value:
        return None
    # An admin without a school matches no rows rather than every row
    return caller.organization or ""


# ------------------------------------------------------------------
# Vendors
# ------------------------------------------------------------------

@router.get("/vendors", response_model=list[VendorOut])
async def list_vendors(
    caller: Profile = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    vendors = await VendorService(session).list_vendors(_scope(caller))
    return [VendorOut.model_validate(v) for v in vendors]


@router.patch("/vendors/{vendor_id}", response_model=VendorOut)
async def set_vendor_active(
    vendor_id: str,
    body: ActiveToggle,
    caller: Profile = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    vendor = await VendorService(session).set_active(vendor_id, body.is_active, caller)
    return VendorOut.model_validate(vendor)


@router.delete("/vendors/{vendor_id}", response_model=SuccessResponse)
async def deactivate_vendor(
    vendor_id: str,
    caller: Profile = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    await VendorService(session).deactivate(vendor_id, caller)
    return SuccessResponse(message="Vendor deactivated")


# ------------------------------------------------------------------
# Deliverers
# ------------------------------------------------------------------

@router.get("/deliverers", response_model=list[DelivererOut])
async def list_deliverers(
    caller: Profile = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    """Approved deliverers with vehicle details and delivery counts."""
    deliverers = await DelivererService(session).list_deliverers(_scope(caller))
    return [DelivererOut.model_validate(d) for d in deliverers]


@router.patch("/deliverers/{deliverer_id}", response_model=DelivererStatusOut)
async def set_deliverer_active(
    deliverer_id: str,
    body: ActiveToggle,
    caller: Profile = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
):
    profile = await DelivererService(session).set_active(deliverer_id, body.is_active, caller)
    return DelivererStatusOut.model_validate(profile)
