"""Compliance requirement CRUD router.

Pattern:
  1. Inject DB session, tenant and clock via Depends
  2. Instantiate the service with (session, tenant_id, clock)
  3. Call service methods and wrap the result in a response envelope
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from compliance_api.core.clock import Clock, get_clock
from compliance_api.core.context import get_tenant_id
from compliance_api.core.pagination import PaginationParams
from compliance_api.core.response import DataResponse, ListResponse, paginated
from compliance_api.db.base import get_db
from compliance_api.domain.enums import Category, ComplianceStatus, Priority
from compliance_api.schemas.requirement import (
    EquipmentOut,
    InspectionRecord,
    RequirementCreate,
    RequirementCreatedOut,
    RequirementFilters,
    RequirementListItem,
    RequirementOut,
    RequirementUpdate,
)
from compliance_api.services.requirement import RequirementService

router = APIRouter(prefix="/requirements", tags=["Compliance Requirements"])


# ------------------------------------------------------------------
# Helper — instantiate service for the calling tenant
# ------------------------------------------------------------------

def _svc(
    session: AsyncSession = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    clock: Clock = Depends(get_clock),
) -> RequirementService:
    return RequirementService(session, tenant_id, clock)


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("", response_model=ListResponse[RequirementListItem])
async def list_requirements(
    site_id: Optional[str] = Query(default=None, alias="siteId"),
    category: Optional[Category] = Query(default=None),
    compliance_type: Optional[str] = Query(default=None, alias="complianceType"),
    priority: Optional[Priority] = Query(default=None),
    filter_status: Optional[ComplianceStatus] = Query(default=None, alias="status"),
    assigned_to: Optional[str] = Query(default=None, alias="assignedTo"),
    pagination: PaginationParams = Depends(),
    svc: RequirementService = Depends(_svc),
):
    """List requirements (paginated). Filter by site, category, type, priority, status, assignee."""
    filters = RequirementFilters(
        site_id=site_id,
        category=category,
        compliance_type=compliance_type,
        priority=priority,
        status=filter_status,
        assigned_to=assigned_to,
    )
    items, total = await svc.list_requirements(pagination, filters)
    return paginated(
        [RequirementListItem.model_validate(r) for r in items],
        total, pagination.page, pagination.limit,
    )


@router.post(
    "", response_model=DataResponse[RequirementCreatedOut], status_code=status.HTTP_201_CREATED
)
async def create_requirement(
    body: RequirementCreate,
    svc: RequirementService = Depends(_svc),
):
    """Create a requirement. Equipment requirements also get a linked equipment row."""
    result = await svc.create_requirement(body)
    out = RequirementCreatedOut.model_validate(result.requirement)
    if result.linkage_error:
        out.linkage_error = result.linkage_error.message
    return {"data": out}


@router.get("/{requirement_id}", response_model=DataResponse[RequirementOut])
async def get_requirement(
    requirement_id: str,
    svc: RequirementService = Depends(_svc),
):
    requirement = await svc.get_requirement(requirement_id)
    return {"data": RequirementOut.model_validate(requirement)}


@router.put("/{requirement_id}", response_model=DataResponse[RequirementOut])
async def update_requirement(
    requirement_id: str,
    body: RequirementUpdate,
    svc: RequirementService = Depends(_svc),
):
    requirement = await svc.update_requirement(requirement_id, body)
    return {"data": RequirementOut.model_validate(requirement)}


@router.post("/{requirement_id}/inspections", response_model=DataResponse[RequirementOut])
async def record_inspection(
    requirement_id: str,
    body: InspectionRecord,
    svc: RequirementService = Depends(_svc),
):
    """Record a completed inspection: sets status from the result and rolls the due date forward."""
    requirement = await svc.record_inspection(
        requirement_id,
        body.result,
        inspection_date=body.inspection_date,
        next_inspection_date=body.next_inspection_date,
    )
    return {"data": RequirementOut.model_validate(requirement)}


@router.delete("/{requirement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_requirement(
    requirement_id: str,
    svc: RequirementService = Depends(_svc),
):
    await svc.delete_requirement(requirement_id)


@router.get("/{requirement_id}/equipment", response_model=DataResponse[list[EquipmentOut]])
async def list_requirement_equipment(
    requirement_id: str,
    svc: RequirementService = Depends(_svc),
):
    equipment = await svc.list_equipment(requirement_id)
    return {"data": [EquipmentOut.model_validate(e) for e in equipment]}
