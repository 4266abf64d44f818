import asyncio
import json

import httpx
import pytest

from foodies.core.exceptions import IdentityServiceError
from foodies.services.identity import BAN_FOREVER, IdentityClient, extract_session_tokens


def _client(handler) -> IdentityClient:
    return IdentityClient("http://identity.test", "service-key", transport=httpx.MockTransport(handler))


def _run(coro):
    return asyncio.run(coro)


def test_get_user_uses_caller_token():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers["Authorization"]
        seen["apikey"] = request.headers["apikey"]
        return httpx.Response(200, json={"id": "u1", "email": "a@b.com", "user_metadata": {"role": "admin"}})

    user = _run(_client(handler).get_user("caller-jwt"))
    assert user.id == "u1"
    assert user.user_metadata == {"role": "admin"}
    assert seen == {"path": "/auth/v1/user", "auth": "Bearer caller-jwt", "apikey": "service-key"}


def test_get_user_rejected_token_returns_none():
    user = _run(_client(lambda request: httpx.Response(401, json={"msg": "invalid JWT"})).get_user("bad"))
    assert user is None


def test_invite_sends_metadata_and_redirect():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["redirect_to"] = request.url.params["redirect_to"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "u2", "email": "v@x.com"})

    user = _run(_client(handler).invite_user_by_email(
        "v@x.com", data={"role": "vendor"}, redirect_to="http://app.test/auth/callback"
    ))
    assert user.id == "u2"
    assert seen["path"] == "/auth/v1/invite"
    assert seen["redirect_to"] == "http://app.test/auth/callback"
    assert seen["body"] == {"email": "v@x.com", "data": {"role": "vendor"}}


def test_error_payload_becomes_identity_error():
    handler = lambda request: httpx.Response(422, json={"msg": "A user with this email address has already been registered"})
    with pytest.raises(IdentityServiceError) as exc:
        _run(_client(handler).invite_user_by_email("v@x.com", data={}, redirect_to="http://app.test"))
    assert "already been registered" in exc.value.message
    assert exc.value.status_code == 502


def test_transport_failure_becomes_identity_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(IdentityServiceError):
        _run(_client(handler).get_user("token"))


def test_generate_link_reads_nested_action_link():
    handler = lambda request: httpx.Response(
        200, json={"properties": {"action_link": "http://identity.test/verify?token=abc"}}
    )
    link = _run(_client(handler).generate_link("magiclink", "v@x.com", redirect_to="http://app.test"))
    assert link == "http://identity.test/verify?token=abc"


def test_find_user_by_email_pages_through_users():
    pages = {
        "1": {"users": [{"id": f"u{i}", "email": f"user{i}@x.com"} for i in range(200)]},
        "2": {"users": [{"id": "target", "email": "Head@Lincoln.edu"}]},
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=pages[request.url.params["page"]])

    user = _run(_client(handler).find_user_by_email("head@lincoln.edu"))
    assert user.id == "target"
    assert _run(_client(handler).find_user_by_email("nobody@x.com")) is None


def test_set_ban_updates_user():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "u1"})

    _run(_client(handler).set_ban("u1", BAN_FOREVER))
    assert seen == {"method": "PUT", "path": "/auth/v1/admin/users/u1", "body": {"ban_duration": "876000h"}}


@pytest.mark.parametrize(
    "link",
    [
        "http://identity.test/verify?access_token=a&refresh_token=r",
        "http://identity.test/verify?type=magiclink#access_token=a&refresh_token=r&expires_in=3600",
    ],
)
def test_extract_session_tokens(link):
    assert extract_session_tokens(link) == ("a", "r")


def test_extract_session_tokens_missing():
    assert extract_session_tokens("http://identity.test/verify?token=abc") is None
