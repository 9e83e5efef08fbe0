"""Compliance statistics router (/api/v1/stats/*)."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from compliance_api.core.clock import Clock, get_clock
from compliance_api.core.context import get_tenant_id
from compliance_api.core.response import DataResponse
from compliance_api.db.base import get_db
from compliance_api.schemas.reports import StatisticsReport, SummaryReport, TrendReport
from compliance_api.services.reports import ReportService

router = APIRouter(prefix="/stats", tags=["Compliance Statistics"])


def _svc(
    session: AsyncSession = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    clock: Clock = Depends(get_clock),
) -> ReportService:
    return ReportService(session, tenant_id, clock)


@router.get("", response_model=DataResponse[StatisticsReport])
async def get_statistics(
    site_id: Optional[str] = Query(default=None, alias="siteId"),
    date_from: Optional[date] = Query(default=None, alias="dateFrom"),
    date_to: Optional[date] = Query(default=None, alias="dateTo"),
    svc: ReportService = Depends(_svc),
):
    """Breakdown by category, status and priority plus live overdue counts."""
    return {"data": await svc.statistics(site_id, date_from, date_to)}


@router.get("/summary", response_model=DataResponse[SummaryReport])
async def get_summary(
    site_id: Optional[str] = Query(default=None, alias="siteId"),
    svc: ReportService = Depends(_svc),
):
    return {"data": await svc.summary(site_id)}


@router.get("/trends", response_model=DataResponse[TrendReport])
async def get_trends(
    period: str = Query(default="30d", pattern="^(30d|90d|1y)$"),
    site_id: Optional[str] = Query(default=None, alias="siteId"),
    svc: ReportService = Depends(_svc),
):
    return {"data": await svc.trends(period, site_id)}
