"""Audit run and task dashboards router (/api/v1/audit/*)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from compliance_api.core.clock import Clock, get_clock
from compliance_api.core.config import settings
from compliance_api.core.context import get_actor_id, get_tenant_id
from compliance_api.core.response import DataResponse
from compliance_api.db.base import get_db, get_session_factory
from compliance_api.schemas.reports import (
    AuditRunRequest,
    AuditRunResult,
    OverdueReport,
    UpcomingReport,
)
from compliance_api.services.audit_run import AuditRunService
from compliance_api.services.reports import ReportService

router = APIRouter(prefix="/audit", tags=["Audit & Tasks"])


def _reports(
    session: AsyncSession = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    clock: Clock = Depends(get_clock),
) -> ReportService:
    return ReportService(session, tenant_id, clock)


@router.post("", response_model=DataResponse[AuditRunResult])
async def run_audit(
    body: AuditRunRequest | None = None,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    tenant_id: str = Depends(get_tenant_id),
    actor_id: Optional[str] = Depends(get_actor_id),
    clock: Clock = Depends(get_clock),
):
    """Re-evaluate every requirement in scope against today and return run statistics."""
    svc = AuditRunService(session_factory, tenant_id, clock)
    result = await svc.run_audit(site_id=body.site_id if body else None, actor_id=actor_id)
    return {"data": result}


@router.get("/overdue-inspections", response_model=DataResponse[OverdueReport])
async def overdue_inspections(
    site_id: Optional[str] = Query(default=None, alias="siteId"),
    svc: ReportService = Depends(_reports),
):
    return {"data": await svc.overdue_inspections(site_id)}


@router.get("/upcoming-tasks", response_model=DataResponse[UpcomingReport])
async def upcoming_tasks(
    site_id: Optional[str] = Query(default=None, alias="siteId"),
    days: int = Query(
        default=settings.upcoming_horizon_days, ge=0, le=366,
        description="Number of days to look ahead",
    ),
    svc: ReportService = Depends(_reports),
):
    return {"data": await svc.upcoming_tasks(site_id, days)}
