"""Equipment compliance repository."""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import func, select, update

from compliance_api.domain.equipment import EquipmentCompliance
from compliance_api.domain.requirement import ComplianceRequirement
from compliance_api.repositories.base import BaseRepository


class EquipmentRepository(BaseRepository[EquipmentCompliance]):
    model = EquipmentCompliance

    async def for_requirement(self, requirement_id: str) -> list[EquipmentCompliance]:
        return await self.find(
            EquipmentCompliance.requirement_id == requirement_id,
            order_by=EquipmentCompliance.created_at.asc(),
        )

    async def soft_delete_for_requirement(self, requirement_id: str) -> int:
        """Soft-delete every live child of *requirement_id*; returns the row count."""
        now = self._clock.now_utc()
        result = await self._session.execute(
            update(EquipmentCompliance)
            .where(EquipmentCompliance.requirement_id == requirement_id)
            .where(EquipmentCompliance.tenant_id == self._tenant_id)
            .where(EquipmentCompliance.is_deleted.is_(False))
            .values(is_deleted=True, deleted_at=now, updated_at=now)
        )
        await self._session.flush()
        return result.rowcount

    async def count_certifications_expiring(
        self, start: date, end: date, *requirement_criteria: Any, site_id: str | None = None
    ) -> int:
        """Count live children whose certification expires in [start, end].

        Scoped through the parent requirement: *site_id* and *requirement_criteria*
        apply to ComplianceRequirement, and children of deleted parents are skipped.
        """
        q = (
            self._base_query()
            .join(
                ComplianceRequirement,
                ComplianceRequirement.id == EquipmentCompliance.requirement_id,
            )
            .where(ComplianceRequirement.tenant_id == self._tenant_id)
            .where(ComplianceRequirement.is_deleted.is_(False))
            .where(EquipmentCompliance.certification_expiry >= start)
            .where(EquipmentCompliance.certification_expiry <= end)
        )
        if site_id:
            q = q.where(ComplianceRequirement.site_id == site_id)
        if requirement_criteria:
            q = q.where(*requirement_criteria)
        result = await self._session.execute(select(func.count()).select_from(q.subquery()))
        return result.scalar_one()
