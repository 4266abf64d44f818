"""Vendor and deliverer management for admins and superadmins."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from foodies.core.exceptions import ForbiddenError, NotFoundError
from foodies.domain.enums import ProfileStatus, Role
from foodies.domain.profile import Profile
from foodies.domain.vendor import Vendor
from foodies.repositories.application import ApplicationRepository
from foodies.repositories.organization import OrderRepository
from foodies.repositories.profile import ProfileRepository
from foodies.repositories.vendor import VendorRepository

logger = logging.getLogger(__name__)

NOT_SPECIFIED = "Not specified"
_COMPLETED = {"completed", "delivered"}
_IN_FLIGHT = {"accepted", "on_the_way"}


def status_for(is_active: bool) -> ProfileStatus:
    return ProfileStatus.APPROVED if is_active else ProfileStatus.DECLINED


def ensure_same_school(caller: Profile | None, owner: Profile | None) -> None:
    """Admins may only manage vendors and deliverers of their own organization."""
    if caller is None or caller.role != Role.ADMIN.value:
        return
    if owner is None or owner.organization != caller.organization:
        raise ForbiddenError("Forbidden: Cannot manage users outside your organization")


class VendorService:
    def __init__(self, session: AsyncSession):
        self._vendors = VendorRepository(session)
        self._profiles = ProfileRepository(session)

    async def list_vendors(self, organization: str | None = None) -> list[Vendor]:
        return await self._vendors.list_with_profiles(organization=organization)

    async def set_active(self, vendor_id: str, is_active: bool, caller: Profile | None = None) -> Vendor:
        """Toggle a vendor and mirror the flag into its profile status."""
        vendor = await self._vendors.get_by_id(vendor_id)
        if vendor is None:
            raise NotFoundError("Vendor", vendor_id)
        ensure_same_school(caller, vendor.profile)
        await self._vendors.update_where(vendor_id, is_active=is_active)
        await self._profiles.update_where(vendor_id, status=status_for(is_active).value)
        logger.info("Vendor %s is_active=%s", vendor_id, is_active)
        return await self._vendors.get_by_id(vendor_id)  # type: ignore[return-value]

    async def deactivate(self, vendor_id: str, caller: Profile | None = None) -> None:
        """Soft delete: the vendor row stays, flagged inactive."""
        vendor = await self._vendors.get_by_id(vendor_id)
        if vendor is None:
            raise NotFoundError("Vendor", vendor_id)
        ensure_same_school(caller, vendor.profile)
        await self._vendors.update_where(vendor_id, is_active=False)
        logger.info("Deactivated vendor %s", vendor_id)


@dataclass
class DelivererSummary:
    id: str
    full_name: str | None
    email: str | None
    vehicle_type: str
    availability: str
    is_active: bool
    total_deliveries: int
    active_deliveries: int


class DelivererService:
    def __init__(self, session: AsyncSession):
        self._profiles = ProfileRepository(session)
        self._applications = ApplicationRepository(session)
        self._orders = OrderRepository(session)

    async def list_deliverers(self, organization: str | None) -> list[DelivererSummary]:
        """Approved deliverers of ``organization`` with vehicle info and order stats."""
        deliverers = await self._profiles.find_all(
            role=Role.DELIVERER,
            organization=organization,
            status=ProfileStatus.APPROVED,
        )
        if not deliverers:
            return []

        vehicles = {}
        for profile in deliverers:
            if profile.email and profile.email not in vehicles:
                vehicles[profile.email] = await self._applications.latest_approved_for(
                    profile.email, Role.DELIVERER.value
                )

        stats: dict[str, list[int]] = {}
        for order in await self._orders.for_deliverers([d.id for d in deliverers]):
            counts = stats.setdefault(order.deliverer_id, [0, 0])
            if order.status in _COMPLETED:
                counts[0] += 1
            elif order.status in _IN_FLIGHT:
                counts[1] += 1

        return [self._summarize(p, vehicles.get(p.email), stats.get(p.id, [0, 0])) for p in deliverers]

    @staticmethod
    def _summarize(profile: Profile, application, counts: list[int]) -> DelivererSummary:
        return DelivererSummary(
            id=profile.id,
            full_name=profile.full_name,
            email=profile.email,
            vehicle_type=(application.vehicle_type if application else None) or NOT_SPECIFIED,
            availability=(application.availability if application else None) or NOT_SPECIFIED,
            is_active=profile.status == ProfileStatus.APPROVED.value,
            total_deliveries=counts[0],
            active_deliveries=counts[1],
        )

    async def set_active(self, deliverer_id: str, is_active: bool, caller: Profile | None = None) -> Profile:
        deliverer = await self._profiles.get_by_id(deliverer_id)
        if deliverer is None or deliverer.role != Role.DELIVERER.value:
            raise NotFoundError("Deliverer", deliverer_id)
        ensure_same_school(caller, deliverer)
        changed = await self._profiles.update_where(
            deliverer_id,
            expected={"role": Role.DELIVERER.value},
            status=status_for(is_active).value,
        )
        if not changed:
            raise NotFoundError("Deliverer", deliverer_id)
        logger.info("Deliverer %s is_active=%s", deliverer_id, is_active)
        return await self._profiles.get_by_id(deliverer_id)  # type: ignore[return-value]
