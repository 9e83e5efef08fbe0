"""Requirement catalog service — create, read, update and soft-delete requirements.

Rule: No FastAPI here. Database access goes through the repositories.
"""


import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from compliance_api.core.clock import Clock, SystemClock
from compliance_api.core.exceptions import LinkageFailure, NotFoundError, ValidationError
from compliance_api.core.pagination import PaginationParams
from compliance_api.domain.enums import Category, ComplianceStatus, InspectionResult
from compliance_api.domain.equipment import EquipmentCompliance
from compliance_api.domain.requirement import ComplianceRequirement
from compliance_api.repositories.requirement import RequirementRepository
from compliance_api.schemas.requirement import (
    RequirementCreate,
    RequirementFilters,
    RequirementUpdate,
)
from compliance_api.services.equipment import EquipmentLinkageService
from compliance_api.services.frequency import next_due_date

logger = logging.getLogger(__name__)

_INSPECTION_STATUS = {
    InspectionResult.PASSED: ComplianceStatus.COMPLIANT,
    InspectionResult.FAILED: ComplianceStatus.NON_COMPLIANT,
}


@dataclass
class RequirementCreateResult:
    """A created requirement and, for equipment requirements, any linkage failure.

    The requirement exists even when ``linkage_error`` is set; its equipment
    row does not.
    """

    requirement: ComplianceRequirement
    linkage_error: LinkageFailure | None = None


def _column_values(values: dict[str, Any]) -> dict[str, Any]:
    """Unwrap enum members so the String columns receive plain values."""
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in values.items()}


class RequirementService:
    def __init__(self, session: AsyncSession, tenant_id: str, clock: Clock | None = None):
        self._session = session
        self._tenant_id = tenant_id
        self._clock = clock or SystemClock()
        self._repo = RequirementRepository(session, tenant_id, self._clock)
        self._equipment = EquipmentLinkageService(session, tenant_id, self._clock)

    async def list_requirements(
        self, pagination: PaginationParams, filters: RequirementFilters | None = None
    ) -> tuple[list[ComplianceRequirement], int]:
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters=_column_values(filters.model_dump(exclude_none=True)) if filters else None,
        )

    async def get_requirement(self, requirement_id: str) -> ComplianceRequirement:
        requirement = await self._repo.get_by_id(requirement_id)
        if not requirement:
            raise NotFoundError("Compliance requirement", requirement_id)
        return requirement

    async def create_requirement(self, data: RequirementCreate) -> RequirementCreateResult:
        if not self._tenant_id:
            raise ValidationError("tenant_id is required")
        if not data.title.strip():
            raise ValidationError("title must not be blank")

        values = data.model_dump(exclude_none=True)
        if "next_inspection_date" not in values:
            values["next_inspection_date"] = next_due_date(data.frequency, self._clock.today())
        values["status"] = ComplianceStatus.PENDING

        requirement = await self._repo.create(**_column_values(values))
        logger.info(
            "Created requirement %s (%s, %s) due %s",
            requirement.id, requirement.category, requirement.frequency,
            requirement.next_inspection_date,
        )

        linkage_error = None
        if data.category == Category.EQUIPMENT:
            linkage_error = await self._link_equipment(requirement)
        return RequirementCreateResult(requirement, linkage_error)

    async def _link_equipment(self, requirement: ComplianceRequirement) -> LinkageFailure | None:
        """Best-effort child creation; a failure never undoes the requirement."""
        try:
            async with self._session.begin_nested():
                await self._equipment.create_for_requirement(requirement)
        except Exception as exc:
            logger.error(
                "Error creating equipment compliance for requirement %s: %s",
                requirement.id, exc, exc_info=True,
            )
            return LinkageFailure(requirement.id, exc)
        return None

    async def update_requirement(
        self, requirement_id: str, data: RequirementUpdate
    ) -> ComplianceRequirement:
        current = await self.get_requirement(requirement_id)  # raises 404 if missing
        values = data.model_dump(exclude_none=True, exclude_unset=True)
        if not values:
            return current

        frequency = values.get("frequency")
        if (
            frequency is not None
            and frequency != current.frequency
            and "next_inspection_date" not in values
        ):
            values["next_inspection_date"] = next_due_date(frequency, self._clock.today())

        updated = await self._repo.update(requirement_id, **_column_values(values))
        if not updated:
            raise NotFoundError("Compliance requirement", requirement_id)
        return updated

    async def record_inspection(
        self,
        requirement_id: str,
        result: InspectionResult,
        inspection_date: date | None = None,
        next_inspection_date: date | None = None,
    ) -> ComplianceRequirement:
        """Apply a completed inspection and roll the schedule forward.

        passed → compliant, failed → non_compliant, conditional keeps the
        current status. Without an explicit ``next_inspection_date`` the next
        due date is one frequency step after the inspection.
        """
        current = await self.get_requirement(requirement_id)
        today = self._clock.today()
        inspected_on = inspection_date or today
        if inspected_on > today:
            raise ValidationError("inspectionDate must not be in the future")
        if next_inspection_date and next_inspection_date <= inspected_on:
            raise ValidationError("nextInspectionDate must be after inspectionDate")

        values: dict[str, Any] = {
            "last_inspection_date": inspected_on,
            "next_inspection_date": next_inspection_date
            or next_due_date(current.frequency, inspected_on),
        }
        status = _INSPECTION_STATUS.get(InspectionResult(result))
        if status:
            values["status"] = status

        updated = await self._repo.update(requirement_id, **_column_values(values))
        if not updated:
            raise NotFoundError("Compliance requirement", requirement_id)
        logger.info(
            "Recorded %s inspection for requirement %s on %s; next due %s",
            InspectionResult(result).value, requirement_id, inspected_on,
            updated.next_inspection_date,
        )
        return updated

    async def delete_requirement(self, requirement_id: str) -> None:
        deleted = await self._repo.soft_delete(requirement_id)
        if not deleted:
            raise NotFoundError("Compliance requirement", requirement_id)
        cascaded = await self._equipment.soft_delete_for_requirement(requirement_id)
        logger.info(
            "Deleted requirement %s (%d equipment rows)", requirement_id, cascaded
        )

    async def list_equipment(self, requirement_id: str) -> list[EquipmentCompliance]:
        await self.get_requirement(requirement_id)
        return await self._equipment.list_for_requirement(requirement_id)
