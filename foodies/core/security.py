"""Password policy, random credential generation, and bearer header parsing."""

import re
import secrets
import string

PASSWORD_RULE = (
    "Password must contain at least 8 characters, one uppercase letter, "
    "one lowercase letter, and one number"
)

_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).{8,}$", re.DOTALL)


def is_strong_password(password: str) -> bool:
    return bool(_PASSWORD_RE.match(password or ""))


def generate_invite_token() -> str:
    return secrets.token_urlsafe(32)


def generate_temporary_password(length: int = 16) -> str:
    """Random password that always satisfies :func:`is_strong_password`."""
    alphabet = string.ascii_letters + string.digits
    while True:
        candidate = "".join(secrets.choice(alphabet) for _ in range(length))
        if is_strong_password(candidate):
            return candidate


def parse_bearer(header: str | None) -> str | None:
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
