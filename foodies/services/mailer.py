"""Outbound email stub: messages are logged, not sent."""

import logging

logger = logging.getLogger(__name__)


def send_set_password_link(email: str, full_name: str | None, link: str) -> None:
    logger.info("Set-password email for %s <%s>: %s", full_name or "applicant", email, link)


def send_magic_link(email: str, link: str) -> None:
    logger.info("Fallback magic link for %s: %s", email, link)
