"""Audit logging middleware — records every state-changing request to audit_trail."""


import asyncio
import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from compliance_api.core.config import settings
from compliance_api.db.base import get_session_factory
from compliance_api.domain.audit import AuditTrail

logger = logging.getLogger(__name__)

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

# Audit writes still in flight; kept referenced until done
_pending: set[asyncio.Task] = set()


async def drain_pending() -> None:
    """Wait for every queued audit row to be written (used on shutdown)."""
    if _pending:
        await asyncio.gather(*list(_pending), return_exceptions=True)


class AuditMiddleware(BaseHTTPMiddleware):
    """Logs all write operations.

    Each audit row is written asynchronously AFTER the response is sent so it
    never adds latency to the request. Failures in audit logging are caught and
    logged — they never raise to the caller.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if request.method in _WRITE_METHODS:
            # Fire-and-forget: don't await here so the response is not delayed
            task = asyncio.create_task(
                self._record(request, response.status_code, duration_ms)
            )
            _pending.add(task)
            task.add_done_callback(_pending.discard)

        return response

    async def _record(
        self, request: Request, status_code: int, duration_ms: int
    ) -> None:
        """Persist an audit row. Swallows all errors to avoid cascading failures."""
        try:
            tenant_id = request.headers.get("x-tenant-id") or settings.default_tenant_id
            actor_id = request.headers.get("x-actor-id")

            # Infer entity from path  e.g. /api/v1/requirements/<uuid> → ("requirement", "<uuid>")
            parts = [p for p in request.url.path.strip("/").split("/") if p]
            entity_id = parts[-1] if parts and len(parts[-1]) == 36 else None
            named = parts[:-1] if entity_id else parts
            entity_type = named[-1] if named else "unknown"

            factory_dep = request.app.dependency_overrides.get(
                get_session_factory, get_session_factory
            )
            async with factory_dep()() as session:
                session.add(
                    AuditTrail(
                        tenant_id=tenant_id,
                        actor_id=actor_id,
                        ip_address=request.client.host if request.client else None,
                        user_agent=request.headers.get("user-agent"),
                        action=f"{request.method}:{status_code}",
                        entity_type=entity_type.rstrip("s"),  # simple singularize
                        entity_id=entity_id,
                        description=f"{request.method} {request.url.path} → {status_code} ({duration_ms}ms)",
                    )
                )
                await session.commit()
        except Exception as exc:  # pragma: no cover
            logger.error("Audit trail write failed: %s", exc)
