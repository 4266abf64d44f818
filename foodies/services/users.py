"""User lifecycle (deactivate / reactivate), user listings, and admin settings.

Profile status is the source of truth. The identity-service ban is a mirror:
the row update runs first and its failure aborts the request, while a failed
ban call is logged and reported back as ``identity_synced=False`` so callers
can see that the two have drifted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from foodies.core.exceptions import BadRequestError, ForbiddenError, IdentityServiceError, NotFoundError
from foodies.core.pagination import PaginationParams
from foodies.core.security import generate_temporary_password
from foodies.domain.enums import ORG_MANAGED_ROLES, ProfileStatus, Role, UserAction
from foodies.domain.profile import Profile
from foodies.repositories.profile import ProfileRepository
from foodies.services.identity import BAN_FOREVER, BAN_NONE, IdentityClient

logger = logging.getLogger(__name__)

_ACTION_STATUS = {
    UserAction.DEACTIVATE: ProfileStatus.DECLINED,
    UserAction.REACTIVATE: ProfileStatus.APPROVED,
}
_ACTION_BAN = {
    UserAction.DEACTIVATE: BAN_FOREVER,
    UserAction.REACTIVATE: BAN_NONE,
}


@dataclass
class StatusChange:
    profile: Profile
    action: UserAction
    identity_synced: bool


class UserService:
    def __init__(self, session: AsyncSession, identity: IdentityClient):
        self._profiles = ProfileRepository(session)
        self._identity = identity

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def change_status(
        self, caller: Profile, target_id: str, action: UserAction
    ) -> StatusChange:
        """Deactivate or reactivate ``target_id`` on behalf of ``caller``.

        Superadmins may act on anyone. Admins may only act on non-admin users
        of their own organization. All checks run before any write.
        """
        target = await self._profiles.get_by_id(target_id)
        if target is None:
            raise NotFoundError("User", target_id)
        self._authorize(caller, target)

        new_status = _ACTION_STATUS[action]
        target = await self._profiles.update(target.id, status=new_status.value)

        synced = True
        try:
            await self._identity.set_ban(target.id, _ACTION_BAN[action])
        except IdentityServiceError as exc:
            synced = False
            logger.warning(
                "Profile %s is %s but the identity account was not updated: %s",
                target.id, new_status.value, exc,
            )

        logger.info("%s %s user %s", caller.id, action.value, target.id)
        return StatusChange(profile=target, action=action, identity_synced=synced)

    @staticmethod
    def _authorize(caller: Profile, target: Profile) -> None:
        if caller.role == Role.SUPERADMIN.value:
            return
        if caller.role != Role.ADMIN.value:
            raise ForbiddenError("Forbidden: Admin access required")
        if target.organization != caller.organization:
            raise ForbiddenError("Forbidden: Cannot manage users outside your organization")
        if target.role in (Role.ADMIN.value, Role.SUPERADMIN.value):
            raise ForbiddenError("Forbidden: Cannot deactivate admin users")

    async def reset_password(self, user_id: str) -> tuple[str, str | None]:
        """Give an admin a fresh random password; returns (password, email)."""
        password = generate_temporary_password()
        user = await self._identity.update_user_by_id(user_id, password=password)
        logger.info("Password reset for identity user %s", user_id)
        return password, user.email

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def list_org_users(self, caller: Profile) -> list[Profile]:
        """Customers, vendors, and deliverers of the caller's organization."""
        if not caller.organization:
            return []
        return await self._profiles.find_all(
            organization=caller.organization,
            role=ORG_MANAGED_ROLES,
        )

    async def list_users(
        self, pagination: PaginationParams, roles: tuple[Role, ...], organization: str | None = None
    ) -> tuple[list[Profile], int]:
        return await self._profiles.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={"role": roles, "organization": organization},
        )

    # ------------------------------------------------------------------
    # Settings (branding images on the admin profile)
    # ------------------------------------------------------------------

    async def update_settings(self, caller: Profile, **changes: str | None) -> Profile:
        if not changes:
            raise BadRequestError("No fields to update")
        return await self._profiles.update(caller.id, **changes)  # type: ignore[return-value]
