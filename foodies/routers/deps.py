"""Shared router dependencies: backend clients and bearer-token authentication."""

from __future__ import annotations

from collections.abc import Callable

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from foodies.core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from foodies.core.security import parse_bearer
from foodies.db.base import get_db
from foodies.domain.enums import Role
from foodies.domain.profile import Profile
from foodies.repositories.profile import ProfileRepository
from foodies.services.identity import IdentityClient, IdentityUser
from foodies.services.storage import StorageClient


def get_identity(request: Request) -> IdentityClient:
    return request.app.state.identity


def get_storage(request: Request) -> StorageClient:
    return request.app.state.storage


async def get_current_user(
    request: Request,
    authorization: str | None = Header(default=None),
    identity: IdentityClient = Depends(get_identity),
) -> IdentityUser:
    """Resolve ``Authorization: Bearer <token>`` to an identity user (401 otherwise)."""
    token = parse_bearer(authorization)
    if token is None:
        raise UnauthorizedError("Unauthorized")
    user = await identity.get_user(token)
    if user is None:
        raise UnauthorizedError("Not authenticated")
    request.state.user_id = user.id  # picked up by the audit middleware
    return user


async def get_current_profile(
    user: IdentityUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> Profile:
    profile = await ProfileRepository(session).get_by_id(user.id)
    if profile is None:
        raise NotFoundError("Profile")
    return profile


def require_roles(*roles: Role) -> Callable:
    """Dependency factory: the caller's profile must hold one of ``roles``."""
    allowed = {r.value for r in roles}
    label = " or ".join(sorted(allowed))

    async def _checker(profile: Profile = Depends(get_current_profile)) -> Profile:
        if profile.role not in allowed:
            raise ForbiddenError(f"Forbidden: {label} access required")
        return profile

    return _checker


require_admin = require_roles(Role.ADMIN)
require_superadmin = require_roles(Role.SUPERADMIN)
require_staff = require_roles(Role.ADMIN, Role.SUPERADMIN)
