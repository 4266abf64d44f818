"""Audit logging middleware: records every state-changing request to audit_trail."""


import asyncio
import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from foodies.db.base import session_factory_for
from foodies.domain.audit import AuditTrail

logger = logging.getLogger(__name__)

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def describe_path(path: str) -> tuple[str, str | None]:
    """Infer ``(entity_type, entity_id)`` from a request path.

    ``/api/admin/users/<uuid>`` gives ``("user", "<uuid>")``; action paths such
    as ``/api/approve-application`` give ``("approve-application", None)``.
    """
    parts = [p for p in path.strip("/").split("/") if p and p != "api"]
    if not parts:
        return "unknown", None
    if len(parts) >= 2 and len(parts[-1]) == 36:
        return parts[-2].rstrip("s"), parts[-1]
    return parts[-1], None


class AuditMiddleware(BaseHTTPMiddleware):
    """Logs all write operations.

    Each audit row is written in a separate task AFTER the response is
    produced, in its own session. Failures are logged and never reach the
    caller.
    """

    def __init__(self, app):
        super().__init__(app)
        self._pending: set[asyncio.Task] = set()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if request.method in _WRITE_METHODS:
            task = asyncio.create_task(self._record(request, response.status_code, duration_ms))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        return response

    async def _record(self, request: Request, status_code: int, duration_ms: int) -> None:
        entity_type, entity_id = describe_path(request.url.path)
        try:
            async with session_factory_for(request)() as session:
                session.add(
                    AuditTrail(
                        user_id=getattr(request.state, "user_id", None),
                        ip_address=request.client.host if request.client else None,
                        user_agent=request.headers.get("user-agent"),
                        action=f"{request.method}:{status_code}",
                        entity_type=entity_type,
                        entity_id=entity_id,
                        description=f"{request.method} {request.url.path} -> {status_code} ({duration_ms}ms)",
                    )
                )
                await session.commit()
        except Exception as exc:  # pragma: no cover
            logger.warning("Audit row for %s %s not written: %s", request.method, request.url.path, exc)
