"""Vendor repository; joins through profiles for organization scoping."""

from sqlalchemy import select

from foodies.domain.profile import Profile
from foodies.domain.vendor import Vendor
from foodies.repositories.base import BaseRepository


class VendorRepository(BaseRepository[Vendor]):
    model = Vendor

    async def list_with_profiles(
        self, *, organization: str | None = None, active_only: bool = True
    ) -> list[Vendor]:
        """Vendors inner-joined to their profile, newest first."""
        q = select(Vendor).join(Profile, Profile.id == Vendor.id)
        if active_only:
            q = q.where(Vendor.is_active.is_(True))
        if organization is not None:
            q = q.where(Profile.organization == organization)
        q = q.order_by(Vendor.created_at.desc())
        return list((await self._session.execute(q)).scalars().unique().all())

    async def active_organizations(self) -> list[str | None]:
        """One organization value per active vendor (for per-school counts)."""
        q = (
            select(Profile.organization)
            .select_from(Vendor)
            .join(Profile, Profile.id == Vendor.id)
            .where(Vendor.is_active.is_(True))
        )
        return list((await self._session.execute(q)).scalars().all())
