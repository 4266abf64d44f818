import pytest

from foodies.core.security import (
    generate_invite_token,
    generate_temporary_password,
    is_strong_password,
    parse_bearer,
)


@pytest.mark.parametrize(
    "password, ok",
    [
        ("abcdefgh", False),
        ("ABCDEFG1", False),
        ("Abcdefgh", False),
        ("Abc1", False),
        ("Abcdefg1", True),
        ("correct Horse 9", True),
    ],
)
def test_password_policy(password, ok):
    assert is_strong_password(password) is ok


def test_generated_credentials():
    assert is_strong_password(generate_temporary_password())
    assert generate_invite_token() != generate_invite_token()
    assert len(generate_invite_token()) >= 43


@pytest.mark.parametrize(
    "header, token",
    [(None, None), ("", None), ("Basic abc", None), ("Bearer ", None), ("Bearer abc", "abc"), ("bearer  abc ", "abc")],
)
def test_parse_bearer(header, token):
    assert parse_bearer(header) == token


def test_health_and_error_envelope(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

    r = client.get("/api/nope")
    assert r.status_code == 404
    assert r.json() == {"error": {"code": "NOT_FOUND", "message": "Resource not found"}}
