"""Application repository."""

from sqlalchemy import update

from foodies.domain.application import Application
from foodies.domain.enums import ApplicationStatus
from foodies.repositories.base import BaseRepository


class ApplicationRepository(BaseRepository[Application]):
    model = Application

    async def list_pending(
        self, *, organization: str | None = None, role: str | tuple[str, ...] | None = None
    ) -> list[Application]:
        return await self.find_all(
            status=ApplicationStatus.PENDING,
            organization=organization,
            role=role,
        )

    async def decide(self, application_id: str, status: ApplicationStatus, **values) -> bool:
        """Move a pending application to ``status``; False if it was no longer pending."""
        changed = await self.update_where(
            application_id,
            expected={"status": ApplicationStatus.PENDING.value},
            status=status.value,
            **values,
        )
        return changed > 0

    async def latest_approved_for(self, email: str, role: str) -> Application | None:
        rows = await self.find_all(
            email=email, role=role, status=ApplicationStatus.APPROVED
        )
        return rows[0] if rows else None

    async def latest_for(self, email: str, role: str) -> Application | None:
        """Most recent approved application for ``email``/``role``, else the newest pending one."""
        approved = await self.latest_approved_for(email, role)
        if approved is not None:
            return approved
        pending = await self.find_all(email=email, role=role, status=ApplicationStatus.PENDING)
        return pending[0] if pending else None

    async def relink_user(self, old_user_id: str, new_user_id: str) -> int:
        """Point applications provisioned for ``old_user_id`` at ``new_user_id``."""
        result = await self._session.execute(
            update(Application)
            .where(Application.user_id == old_user_id)
            .values(user_id=new_user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
