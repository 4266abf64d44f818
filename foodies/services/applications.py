"""Application intake and the reviewer's pending queue."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from foodies.core.exceptions import ForbiddenError
from foodies.domain.application import Application
from foodies.domain.enums import APPLICANT_ROLES, ApplicationStatus, Role
from foodies.domain.mixins import utcnow
from foodies.domain.profile import Profile
from foodies.repositories.application import ApplicationRepository
from foodies.schemas.application import ApplicationCreate

logger = logging.getLogger(__name__)


class ApplicationService:
    def __init__(self, session: AsyncSession):
        self._repo = ApplicationRepository(session)

    async def submit(self, data: ApplicationCreate) -> Application:
        # No duplicate detection: re-applying creates another pending row.
        application = await self._repo.create(
            **data.model_dump(),
            status=ApplicationStatus.PENDING.value,
            created_at=utcnow(),
        )
        logger.info("New %s application %s from %s", application.role, application.id, application.email)
        return application

    async def list_pending(self, reviewer: Profile, role: str | None = None) -> list[Application]:
        """Pending applications visible to ``reviewer``, newest first.

        Admins only see vendor and deliverer applications of their own
        organization; superadmins see everything.
        """
        if reviewer.role == Role.SUPERADMIN.value:
            return await self._repo.list_pending(role=role)
        if reviewer.role == Role.ADMIN.value:
            # Admin applications are reviewed by superadmins only
            reviewable = tuple(r.value for r in APPLICANT_ROLES if r != Role.ADMIN)
            if not reviewer.organization or (role and role not in reviewable):
                return []
            return await self._repo.list_pending(
                organization=reviewer.organization, role=role or reviewable
            )
        raise ForbiddenError("Forbidden: Admin access required")
