"""Account setup completion for approved applicants.

Two ways in:

* **Invite token** (``set_password`` / ``accept_invite``): the applicant holds
  the single-use token stored on their Profile by the ``invite_token``
  approval strategy. Expiry is an absolute timestamp and fails closed.
* **Metadata completion** (``complete_setup``): the applicant followed an
  identity-service invite and is already signed in; their Profile (and Vendor
  row, for vendors) is materialized from the identity user's metadata.

Tokens are cleared with an UPDATE guarded on the token value, so only one
request can consume a given token.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from foodies.core.config import settings
from foodies.core.exceptions import (
    AppException,
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
)
from foodies.core.security import PASSWORD_RULE, is_strong_password
from foodies.domain.enums import ProfileStatus, Role
from foodies.domain.mixins import as_utc, utcnow
from foodies.domain.profile import Profile
from foodies.domain.vendor import Vendor
from foodies.repositories.application import ApplicationRepository
from foodies.repositories.profile import ProfileRepository
from foodies.repositories.vendor import VendorRepository
from foodies.services.identity import IdentityClient, IdentityUser, extract_session_tokens

logger = logging.getLogger(__name__)


class AccountSetupService:
    def __init__(self, session: AsyncSession, identity: IdentityClient):
        self._profiles = ProfileRepository(session)
        self._vendors = VendorRepository(session)
        self._applications = ApplicationRepository(session)
        self._identity = identity

    # ------------------------------------------------------------------
    # Invite-token flow
    # ------------------------------------------------------------------

    async def set_password(self, token: str, password: str, confirm_password: str) -> Profile:
        if not token:
            raise BadRequestError("Invite token is required")
        if not password or not confirm_password:
            raise BadRequestError("Password and confirmation are required")
        if password != confirm_password:
            raise BadRequestError("Passwords do not match")
        if not is_strong_password(password):
            raise BadRequestError(PASSWORD_RULE)

        profile = await self._redeemable_profile(token)

        existing = await self._identity.find_user_by_email(profile.email)
        if existing is not None:
            await self._identity.update_user_by_id(existing.id, password=password, email_confirm=True)
            account_id = existing.id
        else:
            created = await self._identity.create_user(
                profile.email,
                password,
                user_metadata={
                    "full_name": profile.full_name,
                    "role": profile.role,
                    "organization": profile.organization,
                },
            )
            account_id = created.id

        # Link the profile to the identity account it now owns.
        new_id = profile.id
        if account_id != profile.id and await self._profiles.get_by_id(account_id) is None:
            new_id = account_id

        consumed = await self._profiles.update_where(
            profile.id,
            expected={"invite_token": token},
            id=new_id,
            invite_token=None,
            invite_token_expires=None,
            status=ProfileStatus.ACTIVE.value,
        )
        if not consumed:
            raise ConflictError("This invitation link has already been used.")
        if new_id != profile.id:
            await self._applications.relink_user(profile.id, new_id)

        activated = await self._profiles.get_by_id(new_id)
        if activated.role == Role.VENDOR.value:
            await self.materialize_vendor(activated)
        logger.info("Password set for %s (profile %s)", activated.email, activated.id)
        return activated

    async def accept_invite(self, token: str) -> tuple[str, str]:
        """Exchange an invite token for a session; returns (access_token, refresh_token)."""
        if not token:
            raise BadRequestError("Invite token required")
        profile = await self._redeemable_profile(token)

        link = await self._identity.generate_link(
            "magiclink", profile.email, redirect_to=settings.set_password_url
        )
        tokens = extract_session_tokens(link)
        if tokens is None:
            raise AppException("Failed to generate session tokens", status_code=500)

        consumed = await self._profiles.update_where(
            profile.id,
            expected={"invite_token": token},
            invite_token=None,
            invite_token_expires=None,
        )
        if not consumed:
            raise ConflictError("This invitation link has already been used.")
        return tokens

    async def _redeemable_profile(self, token: str) -> Profile:
        profile = await self._profiles.get_by_invite_token(token)
        if profile is None or not profile.email:
            raise NotFoundError("Invitation")
        expires = as_utc(profile.invite_token_expires)
        if expires is None or utcnow() > expires:
            raise BadRequestError("This invitation link has expired. Please contact support.")
        return profile

    # ------------------------------------------------------------------
    # Metadata-completion flow
    # ------------------------------------------------------------------

    async def complete_setup(self, user: IdentityUser) -> Profile:
        profile = await self._profiles.get_by_id(user.id)
        if profile is not None:
            if profile.status == ProfileStatus.DECLINED.value:
                raise ForbiddenError("This account has been deactivated")
            if profile.status not in (ProfileStatus.APPROVED.value, ProfileStatus.ACTIVE.value):
                profile = await self._profiles.update(profile.id, status=ProfileStatus.APPROVED.value)
            if profile.role == Role.VENDOR.value:
                await self.materialize_vendor(profile, user.user_metadata)
            return profile

        metadata = user.user_metadata
        role = metadata.get("role") or Role.ADMIN.value
        if role not in {r.value for r in Role} or role == Role.SUPERADMIN.value:
            raise ForbiddenError(f"Role '{role}' cannot complete setup")

        profile = await self._profiles.create(
            id=user.id,
            email=user.email,
            full_name=metadata.get("full_name") or "",
            role=role,
            organization=metadata.get("organization") or "global",
            organization_id=metadata.get("organization_id"),
            status=ProfileStatus.APPROVED.value,
        )
        if role == Role.VENDOR.value:
            await self.materialize_vendor(profile, metadata)
        logger.info("Materialized %s profile %s for %s", role, profile.id, profile.email)
        return profile

    # ------------------------------------------------------------------
    # Vendor rows
    # ------------------------------------------------------------------

    async def materialize_vendor(
        self, profile: Profile, metadata: dict[str, Any] | None = None
    ) -> Vendor:
        """Create the Vendor row for ``profile`` once; later calls return the existing row."""
        vendor = await self._vendors.get_by_id(profile.id)
        if vendor is not None:
            return vendor

        fields = {
            key: (metadata or {}).get(key)
            for key in ("business_name", "business_address", "menu_summary")
        }
        if not fields["business_name"] and profile.email:
            application = await self._applications.latest_for(profile.email, Role.VENDOR.value)
            if application is not None:
                fields = {
                    "business_name": application.business_name,
                    "business_address": application.business_address,
                    "menu_summary": application.menu_summary,
                }

        vendor = await self._vendors.create(
            id=profile.id,
            business_name=fields["business_name"] or profile.full_name or profile.email,
            business_address=fields["business_address"],
            menu_summary=fields["menu_summary"],
            is_active=True,
        )
        logger.info("Vendor %s materialized (%s)", vendor.id, vendor.business_name)
        return vendor
