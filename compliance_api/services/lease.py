"""Per-tenant advisory lease for audit runs.

The lease is advisory: a run that cannot get it still proceeds and only
reports ``concurrent_run_detected``. Each acquire/release commits in its own
short session so other runs see the lease while this one is in flight.
"""


import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from compliance_api.core.clock import Clock
from compliance_api.core.config import settings
from compliance_api.repositories.lease import LeaseRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaseHandle:
    token: str | None
    concurrent_run_detected: bool = False

    @property
    def acquired(self) -> bool:
        return self.token is not None


class AuditLeaseManager:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        tenant_id: str,
        clock: Clock,
        ttl_seconds: int | None = None,
    ):
        self._session_factory = session_factory
        self._tenant_id = tenant_id
        self._clock = clock
        self._ttl = timedelta(
            seconds=ttl_seconds if ttl_seconds is not None else settings.audit_lease_ttl_seconds
        )

    async def acquire(self, holder: str | None = None) -> LeaseHandle:
        now = self._clock.now_utc()
        try:
            async with self._session_factory() as session:
                repo = LeaseRepository(session, self._tenant_id)
                if await repo.is_held(now):
                    logger.warning(
                        "Audit lease for tenant %s is held by another run", self._tenant_id
                    )
                    return LeaseHandle(None, concurrent_run_detected=True)
                token = str(uuid.uuid4())
                await repo.replace(token, holder, now, now + self._ttl)
                await session.commit()
                return LeaseHandle(token)
        except IntegrityError:
            # Another run inserted its lease between our check and our write.
            logger.warning("Lost audit lease race for tenant %s", self._tenant_id)
            return LeaseHandle(None, concurrent_run_detected=True)
        except SQLAlchemyError as exc:
            logger.error("Could not acquire audit lease for tenant %s: %s", self._tenant_id, exc)
            return LeaseHandle(None)

    async def release(self, handle: LeaseHandle) -> None:
        if not handle.acquired:
            return
        try:
            async with self._session_factory() as session:
                await LeaseRepository(session, self._tenant_id).remove(handle.token)
                await session.commit()
        except SQLAlchemyError as exc:
            # The lease expires on its own after the TTL.
            logger.error("Could not release audit lease for tenant %s: %s", self._tenant_id, exc)
