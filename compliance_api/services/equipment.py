"""Equipment linkage — child rows for equipment-category requirements."""


import logging

from sqlalchemy.ext.asyncio import AsyncSession

from compliance_api.core.clock import Clock
from compliance_api.domain.enums import EquipmentStatus, EquipmentType
from compliance_api.domain.equipment import EquipmentCompliance
from compliance_api.domain.requirement import ComplianceRequirement
from compliance_api.repositories.equipment import EquipmentRepository

logger = logging.getLogger(__name__)


class EquipmentLinkageService:
    def __init__(self, session: AsyncSession, tenant_id: str, clock: Clock | None = None):
        self._repo = EquipmentRepository(session, tenant_id, clock)

    async def create_for_requirement(
        self, requirement: ComplianceRequirement
    ) -> EquipmentCompliance:
        """Create the pending equipment row that mirrors *requirement*'s schedule."""
        equipment = await self._repo.create(
            requirement_id=requirement.id,
            equipment_type=EquipmentType.OTHER.value,
            status=EquipmentStatus.PENDING.value,
            next_inspection_date=requirement.next_inspection_date,
            next_maintenance_date=requirement.next_inspection_date,
        )
        logger.debug("Linked equipment %s to requirement %s", equipment.id, requirement.id)
        return equipment

    async def list_for_requirement(self, requirement_id: str) -> list[EquipmentCompliance]:
        return await self._repo.for_requirement(requirement_id)

    async def soft_delete_for_requirement(self, requirement_id: str) -> int:
        return await self._repo.soft_delete_for_requirement(requirement_id)
