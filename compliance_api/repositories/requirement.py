"""Compliance requirement repository."""

from __future__ import annotations

from datetime import date

from sqlalchemy import func, select

from compliance_api.domain.requirement import ComplianceRequirement
from compliance_api.repositories.base import BaseRepository


class RequirementRepository(BaseRepository[ComplianceRequirement]):
    model = ComplianceRequirement

    async def in_scope(self, site_id: str | None = None) -> list[ComplianceRequirement]:
        """All live requirements of the tenant, optionally for one site."""
        return await self.find(filters={"site_id": site_id})

    async def due_before(
        self, day: date, site_id: str | None = None
    ) -> list[ComplianceRequirement]:
        """Requirements whose next inspection is strictly before *day*, oldest first."""
        return await self.find(
            ComplianceRequirement.next_inspection_date < day,
            filters={"site_id": site_id},
            order_by=ComplianceRequirement.next_inspection_date.asc(),
        )

    async def due_between(
        self, start: date, end: date, site_id: str | None = None
    ) -> list[ComplianceRequirement]:
        """Requirements due within [start, end] inclusive, soonest first."""
        return await self.find(
            ComplianceRequirement.next_inspection_date >= start,
            ComplianceRequirement.next_inspection_date <= end,
            filters={"site_id": site_id},
            order_by=ComplianceRequirement.next_inspection_date.asc(),
        )

    async def latest_audit_date(self, site_id: str | None = None) -> date | None:
        q = self._apply_filters(self._base_query(), {"site_id": site_id}).subquery()
        result = await self._session.execute(select(func.max(q.c.last_audit_date)))
        return result.scalar_one_or_none()
