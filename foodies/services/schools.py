"""Per-school report: admins grouped by organization with vendor / deliverer counts.

Recomputed from scratch on every call; nothing is cached or paginated.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from foodies.domain.enums import ProfileStatus, Role
from foodies.domain.mixins import as_utc
from foodies.domain.profile import Profile
from foodies.repositories.profile import ProfileRepository
from foodies.repositories.vendor import VendorRepository
from foodies.schemas.school import AdminSummary, SchoolSummary

UNKNOWN_ORGANIZATION = "Unknown Organization"


def _school_key(organization: str | None) -> str:
    return organization or UNKNOWN_ORGANIZATION


def aggregate_schools(
    admins: Iterable[Profile],
    vendor_organizations: Iterable[str | None],
    deliverer_organizations: Iterable[str | None],
) -> list[SchoolSummary]:
    """Group ``admins`` by organization string.

    The first admin seen is the school's primary contact until an approved
    admin turns up; the first approved admin then wins. ``date_created`` is
    the earliest admin ``created_at`` in the group.
    """
    vendor_counts = Counter(_school_key(o) for o in vendor_organizations)
    deliverer_counts = Counter(_school_key(o) for o in deliverer_organizations)

    schools: dict[str, SchoolSummary] = {}
    for admin in admins:
        name = _school_key(admin.organization)
        summary = AdminSummary.model_validate(admin)
        school = schools.get(name)
        if school is None:
            schools[name] = SchoolSummary(
                school_name=name,
                admin_email=admin.email or "N/A",
                admin_name=admin.full_name or "N/A",
                admin_id=admin.id,
                status=admin.status or ProfileStatus.PENDING.value,
                date_created=as_utc(admin.created_at),
                admin_count=1,
                vendor_count=vendor_counts.get(name, 0),
                deliverer_count=deliverer_counts.get(name, 0),
                all_admins=[summary],
            )
            continue

        school.admin_count += 1
        school.all_admins.append(summary)
        created = as_utc(admin.created_at)
        if created and (school.date_created is None or created < school.date_created):
            school.date_created = created
        if school.status != ProfileStatus.APPROVED.value and admin.status == ProfileStatus.APPROVED.value:
            school.admin_email = admin.email or school.admin_email
            school.admin_name = admin.full_name or school.admin_name
            school.admin_id = admin.id
            school.status = admin.status

    return list(schools.values())


class SchoolService:
    def __init__(self, session: AsyncSession):
        self._profiles = ProfileRepository(session)
        self._vendors = VendorRepository(session)

    async def report(self) -> list[SchoolSummary]:
        admins = await self._profiles.find_all(
            role=Role.ADMIN, order_by=("organization", "created_at"), descending=False
        )
        vendor_orgs = await self._vendors.active_organizations()
        deliverers = await self._profiles.find_all(role=Role.DELIVERER)
        return aggregate_schools(admins, vendor_orgs, [d.organization for d in deliverers])

