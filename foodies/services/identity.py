"""Identity service client: async httpx wrapper around the GoTrue admin REST API.

Covers exactly the calls the provisioning workflow needs:

1. **Session verification**: resolve a bearer access token to a user.
2. **Invitations**: ``invite`` (the service emails the user) and
   ``generate_link`` (a magic link we can hand out manually).
3. **Account administration**: create / update users, look users up by email,
   and ban / unban them.

Every transport or HTTP failure is re-raised as :class:`IdentityServiceError`
so callers never see raw ``httpx`` exceptions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs, urlparse

import httpx

from foodies.core.config import settings
from foodies.core.exceptions import IdentityServiceError

logger = logging.getLogger(__name__)

# ~100 years; the identity service has no "forever" ban
BAN_FOREVER = "876000h"
BAN_NONE = "none"

_USERS_PAGE_SIZE = 200


@dataclass
class IdentityUser:
    id: str
    email: str | None = None
    user_metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "IdentityUser":
        user = payload.get("user", payload) if isinstance(payload, dict) else {}
        if not user or not user.get("id"):
            raise IdentityServiceError("Identity service returned no user")
        return cls(
            id=str(user["id"]),
            email=user.get("email"),
            user_metadata=dict(user.get("user_metadata") or {}),
        )


def extract_session_tokens(action_link: str) -> tuple[str, str] | None:
    """Pull ``access_token`` / ``refresh_token`` out of a link's query or fragment."""
    parsed = urlparse(action_link)
    for part in (parsed.query, parsed.fragment):
        params = parse_qs(part)
        access = (params.get("access_token") or [None])[0]
        refresh = (params.get("refresh_token") or [None])[0]
        if access and refresh:
            return access, refresh
    return None


class IdentityClient:
    def __init__(
        self,
        base_url: str | None = None,
        service_key: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._service_key = service_key if service_key is not None else settings.identity_service_key
        self._client = httpx.AsyncClient(
            base_url=f"{(base_url or settings.identity_url).rstrip('/')}/auth/v1",
            timeout=timeout or settings.identity_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _headers(self, bearer: str | None = None) -> dict[str, str]:
        key = self._service_key or ""
        return {"apikey": key, "Authorization": f"Bearer {bearer or key}"}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        bearer: str | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method, path, json=json, params=params, headers=self._headers(bearer)
            )
        except httpx.HTTPError as exc:
            logger.error("Identity service %s %s unreachable: %s", method, path, exc)
            raise IdentityServiceError(f"Identity service unavailable: {exc}") from exc
        return response

    @staticmethod
    def _raise_for_status(response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        try:
            body = response.json()
            detail = body.get("msg") or body.get("message") or body.get("error_description") or body.get("error")
        except ValueError:
            detail = response.text
        logger.error("Identity service failed to %s: %s %s", action, response.status_code, detail)
        raise IdentityServiceError(f"Failed to {action}: {detail or response.status_code}")

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def get_user(self, access_token: str) -> IdentityUser | None:
        """Return the user owning ``access_token``, or None when the token is rejected."""
        response = await self._request("GET", "/user", bearer=access_token)
        if response.status_code in (401, 403):
            return None
        self._raise_for_status(response, "verify session")
        return IdentityUser.from_payload(response.json())

    # ------------------------------------------------------------------
    # Invitations
    # ------------------------------------------------------------------

    async def invite_user_by_email(
        self, email: str, *, data: dict[str, Any], redirect_to: str
    ) -> IdentityUser:
        response = await self._request(
            "POST", "/invite", json={"email": email, "data": data},
            params={"redirect_to": redirect_to},
        )
        self._raise_for_status(response, "invite user")
        return IdentityUser.from_payload(response.json())

    async def generate_link(self, link_type: str, email: str, *, redirect_to: str) -> str:
        """Return the ``action_link`` of a freshly generated magic / invite link."""
        response = await self._request(
            "POST", "/admin/generate_link",
            json={"type": link_type, "email": email, "redirect_to": redirect_to},
        )
        self._raise_for_status(response, "generate link")
        body = response.json()
        link = body.get("action_link") or (body.get("properties") or {}).get("action_link")
        if not link:
            raise IdentityServiceError("Identity service returned no action link")
        return link

    # ------------------------------------------------------------------
    # Account administration
    # ------------------------------------------------------------------

    async def create_user(
        self,
        email: str,
        password: str,
        *,
        user_metadata: dict[str, Any] | None = None,
        email_confirm: bool = True,
    ) -> IdentityUser:
        response = await self._request(
            "POST", "/admin/users",
            json={
                "email": email,
                "password": password,
                "email_confirm": email_confirm,
                "user_metadata": user_metadata or {},
            },
        )
        self._raise_for_status(response, "create account")
        return IdentityUser.from_payload(response.json())

    async def update_user_by_id(self, user_id: str, **attributes: Any) -> IdentityUser:
        response = await self._request("PUT", f"/admin/users/{user_id}", json=attributes)
        self._raise_for_status(response, "update account")
        return IdentityUser.from_payload(response.json())

    async def find_user_by_email(self, email: str) -> IdentityUser | None:
        wanted = email.lower()
        page = 1
        while True:
            response = await self._request(
                "GET", "/admin/users", params={"page": page, "per_page": _USERS_PAGE_SIZE}
            )
            self._raise_for_status(response, "list users")
            users = response.json().get("users") or []
            for user in users:
                if (user.get("email") or "").lower() == wanted:
                    return IdentityUser.from_payload(user)
            if len(users) < _USERS_PAGE_SIZE:
                return None
            page += 1

    async def set_ban(self, user_id: str, ban_duration: str) -> None:
        await self.update_user_by_id(user_id, ban_duration=ban_duration)
