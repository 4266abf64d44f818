"""Application review: the provisioning state machine.

An application moves ``pending -> approved`` or ``pending -> declined`` exactly
once. Approval is one transition parameterized by two things:

* the applicant **role**, which decides where the organization comes from
  (admins resolve or create an Organization by school email domain; vendors
  and deliverers inherit the reviewer's organization), and
* the credential **strategy**:

  - ``identity_invite``: the identity service creates the user and sends its
    own invite email; a magic link is generated as a manual fallback. The
    Profile (and Vendor) rows are materialized later by complete-setup.
  - ``invite_token``: a Profile is created now with a single-use, expiring
    invite token, and a set-password link is returned for manual delivery.

Identity-service calls run before any row is written, so a failed call leaves
the application pending. The final status write is guarded on
``status = 'pending'`` and shares the request transaction with the Profile
insert; losing that race raises :class:`ConflictError` and rolls everything
back.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from foodies.core.config import settings
from foodies.core.exceptions import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    IdentityServiceError,
    NotFoundError,
)
from foodies.core.security import generate_invite_token
from foodies.domain.application import Application
from foodies.domain.enums import ApplicationStatus, ApprovalStrategy, ProfileStatus, Role
from foodies.domain.mixins import utcnow
from foodies.domain.profile import Profile
from foodies.repositories.application import ApplicationRepository
from foodies.repositories.organization import OrganizationRepository
from foodies.repositories.profile import ProfileRepository
from foodies.schemas.application import ApprovalResult, ProvisionedUser
from foodies.services import mailer
from foodies.services.identity import IdentityClient

logger = logging.getLogger(__name__)

_DOMAIN_RE = re.compile(r"^[a-z0-9-]+(\.[a-z0-9-]+)*\.[a-z]{2,}$")


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def school_domain_for(application: Application) -> str | None:
    """Domain used to match an admin applicant to an Organization.

    Admin applications carry the school domain in ``notes``; fall back to the
    domain of the applicant's email.
    """
    candidate = (application.notes or "").strip().lower().lstrip("@")
    if _DOMAIN_RE.match(candidate):
        return candidate
    _, _, domain = (application.email or "").rpartition("@")
    return domain.lower() or None


@dataclass
class _Placement:
    organization: str | None
    organization_id: str | None = None


@dataclass
class _Credential:
    user_id: str
    link: str | None
    email_note: str


class ApprovalService:
    def __init__(self, session: AsyncSession, identity: IdentityClient):
        self._applications = ApplicationRepository(session)
        self._profiles = ProfileRepository(session)
        self._organizations = OrganizationRepository(session)
        self._identity = identity

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def approve(
        self,
        application_id: str,
        reviewer: Profile | None = None,
        *,
        strategy: ApprovalStrategy | str | None = None,
        required_role: Role | None = None,
    ) -> ApprovalResult:
        application = await self._load_pending(application_id, required_role)
        self._authorize(application, reviewer)
        reviewer_id = reviewer.id if reviewer else None
        try:
            role = Role(application.role)
        except ValueError:
            raise BadRequestError(f"Unsupported application role '{application.role}'") from None

        place = self._PLACEMENT.get(role)
        if place is None:
            raise BadRequestError(f"Role '{role.value}' cannot be approved through an application")
        placement = await place(self, application, reviewer)

        strategy = ApprovalStrategy(strategy or settings.approval_strategy)
        issue = self._ISSUERS[strategy]
        credential = await issue(self, application, role, placement)

        approved = await self._applications.decide(
            application.id,
            ApplicationStatus.APPROVED,
            user_id=credential.user_id,
            reviewed_at=utcnow(),
            reviewed_by=reviewer_id,
        )
        if not approved:
            raise ConflictError("Application was already reviewed")

        logger.info(
            "Approved %s application %s for %s (%s)",
            role.value, application.id, application.email, strategy.value,
        )
        return ApprovalResult(
            message=f"{role.value.capitalize()} application approved.",
            user=ProvisionedUser(
                id=credential.user_id,
                email=application.email,
                role=role.value,
                organization=placement.organization,
                organization_id=placement.organization_id,
            ),
            magic_link=credential.link,
            email_note=credential.email_note,
        )

    async def decline(
        self, application_id: str, reviewer: Profile | None = None, reason: str | None = None
    ) -> Application:
        application = await self._load_pending(application_id)
        self._authorize(application, reviewer)
        values = {"reviewed_at": utcnow(), "reviewed_by": reviewer.id if reviewer else None}
        if reason:
            values["notes"] = reason
        if not await self._applications.decide(application.id, ApplicationStatus.DECLINED, **values):
            raise ConflictError("Application was already reviewed")
        logger.info("Declined application %s (%s)", application.id, application.email)
        return await self._applications.get_by_id(application.id)  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load_pending(self, application_id: str, required_role: Role | None = None) -> Application:
        application = await self._applications.get_by_id(application_id)
        if application is None or (required_role and application.role != required_role.value):
            label = f"{required_role.value.capitalize()} application" if required_role else "Application"
            raise NotFoundError(label, application_id)
        if application.status != ApplicationStatus.PENDING.value:
            raise ConflictError(f"Application is already {application.status}")
        return application

    @staticmethod
    def _authorize(application: Application, reviewer: Profile | None) -> None:
        """Superadmins review anything; admins review staff of their own school.

        ``reviewer=None`` is an internal call with no caller to check.
        """
        if reviewer is None or reviewer.role == Role.SUPERADMIN.value:
            return
        if reviewer.role != Role.ADMIN.value:
            raise ForbiddenError("Forbidden: Admin access required")
        if application.role == Role.ADMIN.value:
            raise ForbiddenError("Forbidden: Only a superadmin can review admin applications")
        if not reviewer.organization or application.organization != reviewer.organization:
            raise ForbiddenError("Forbidden: Cannot review applications outside your organization")

    # -- placement (by role) -------------------------------------------

    async def _place_admin(self, application: Application, reviewer: Profile | None) -> _Placement:
        name = (application.organization or "").strip()
        domain = school_domain_for(application)
        if not name or not domain:
            raise BadRequestError("Admin application missing organization or domain")

        org = await self._organizations.find_by_domain(domain)
        if org is None:
            slug = base = slugify(name) or "school"
            suffix = 1
            while await self._organizations.find_one(slug=slug) is not None:
                suffix += 1
                slug = f"{base}-{suffix}"
            org = await self._organizations.create(
                name=name, slug=slug, email_domains=[domain], status="active"
            )
            logger.info("Created organization %s (%s) for domain %s", org.name, org.id, domain)
        return _Placement(organization=org.name, organization_id=org.id)

    async def _place_staff(self, application: Application, reviewer: Profile | None) -> _Placement:
        if reviewer is not None and reviewer.role == Role.ADMIN.value and reviewer.organization:
            return _Placement(organization=reviewer.organization)
        return _Placement(organization=application.organization)

    _PLACEMENT = {
        Role.ADMIN: _place_admin,
        Role.VENDOR: _place_staff,
        Role.DELIVERER: _place_staff,
    }

    # -- credential issuance (by strategy) ---------------------------------

    async def _issue_identity_invite(
        self, application: Application, role: Role, placement: _Placement
    ) -> _Credential:
        metadata = {
            "full_name": application.full_name,
            "role": role.value,
            "organization": placement.organization,
            "organization_id": placement.organization_id,
            "business_name": application.business_name,
            "business_address": application.business_address,
            "menu_summary": application.menu_summary,
            "vehicle_type": application.vehicle_type,
            "availability": application.availability,
        }
        user = await self._identity.invite_user_by_email(
            application.email,
            data={k: v for k, v in metadata.items() if v is not None},
            redirect_to=settings.auth_callback_url,
        )

        # Invite emails are unreliable; keep a link an operator can resend.
        link = None
        try:
            link = await self._identity.generate_link(
                "magiclink", application.email, redirect_to=settings.auth_callback_url
            )
            mailer.send_magic_link(application.email, link)
        except IdentityServiceError as exc:
            logger.warning("Fallback magic link for %s unavailable: %s", application.email, exc)

        return _Credential(
            user_id=user.id,
            link=link,
            email_note=(
                "An invitation email was sent by the identity service. "
                "If it does not arrive, share the magic link manually."
            ),
        )

    async def _issue_invite_token(
        self, application: Application, role: Role, placement: _Placement
    ) -> _Credential:
        token = generate_invite_token()
        profile = await self._profiles.create(
            email=application.email,
            full_name=application.full_name,
            role=role.value,
            organization=placement.organization,
            organization_id=placement.organization_id,
            status=ProfileStatus.APPROVED.value,
            invite_token=token,
            invite_token_expires=utcnow() + timedelta(hours=settings.invite_token_ttl_hours),
        )
        link = f"{settings.set_password_url}?token={token}"
        mailer.send_set_password_link(application.email, application.full_name, link)
        return _Credential(
            user_id=profile.id,
            link=link,
            email_note=(
                "Share the set-password link with the applicant. "
                f"It expires in {settings.invite_token_ttl_hours} hours and works once."
            ),
        )

    _ISSUERS = {
        ApprovalStrategy.IDENTITY_INVITE: _issue_identity_invite,
        ApprovalStrategy.INVITE_TOKEN: _issue_invite_token,
    }
