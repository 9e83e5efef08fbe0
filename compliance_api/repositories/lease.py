"""Audit lease repository.

Leases are not tenant-filtered rows like the rest of the catalog: the tenant id
is the primary key, so this repository does not extend BaseRepository.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from compliance_api.domain.lease import AuditLease


class LeaseRepository:
    def __init__(self, session: AsyncSession, tenant_id: str):
        self._session = session
        self._tenant_id = tenant_id

    async def is_held(self, now: datetime) -> bool:
        """True when an unexpired lease exists for the tenant."""
        result = await self._session.execute(
            select(AuditLease.token)
            .where(AuditLease.tenant_id == self._tenant_id)
            .where(AuditLease.expires_at > now)
        )
        return result.first() is not None

    async def replace(
        self, token: str, holder: str | None, acquired_at: datetime, expires_at: datetime
    ) -> AuditLease:
        await self._session.execute(
            delete(AuditLease).where(AuditLease.tenant_id == self._tenant_id)
        )
        lease = AuditLease(
            tenant_id=self._tenant_id,
            token=token,
            holder=holder,
            acquired_at=acquired_at,
            expires_at=expires_at,
        )
        self._session.add(lease)
        await self._session.flush()
        return lease

    async def remove(self, token: str) -> bool:
        result = await self._session.execute(
            delete(AuditLease)
            .where(AuditLease.tenant_id == self._tenant_id)
            .where(AuditLease.token == token)
        )
        await self._session.flush()
        return result.rowcount > 0
