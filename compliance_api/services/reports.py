"""Dashboard reports computed live from the requirement catalog.

None of these views depend on a prior audit run: overdue and upcoming
classification comes from the stored ``next_inspection_date`` compared with
the clock's current date. Only the persisted ``status`` breakdown reflects
the last audit.
"""


import logging
from datetime import date, datetime, time, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from compliance_api.core.clock import Clock, SystemClock
from compliance_api.core.config import settings
from compliance_api.core.exceptions import ValidationError
from compliance_api.domain.enums import Category, ComplianceStatus, Priority
from compliance_api.domain.requirement import ComplianceRequirement
from compliance_api.repositories.equipment import EquipmentRepository
from compliance_api.repositories.requirement import RequirementRepository
from compliance_api.schemas.reports import (
    OverdueItem,
    OverdueReport,
    StatisticsReport,
    SummaryReport,
    TrendPoint,
    TrendReport,
    UpcomingItem,
    UpcomingReport,
)
from compliance_api.services.frequency import add_months

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Thresholds
# ---------------------------------------------------------------------------

OVERDUE_CRITICAL_DAYS = 30  # overdue by more than this is critical
UPCOMING_URGENT_DAYS = 7
UPCOMING_CRITICAL_DAYS = 3

SUMMARY_CRITICAL_ISSUES = 5
SUMMARY_CRITICAL_RATE = 70
SUMMARY_WARNING_RATE = 85

TREND_PERIODS = ("30d", "90d", "1y")

# ---------------------------------------------------------------------------
# Arithmetic helpers
# ---------------------------------------------------------------------------

def round_half_up(value: float) -> int:
    """Round .5 away from zero (``round()`` would round half to even)."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def compliance_rate(compliant: int, total: int) -> int:
    """Percentage of *total* that is compliant, 0 for an empty scope."""
    if total <= 0:
        return 0
    return round_half_up(compliant / total * 100)

def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)

# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class ReportService:
    def __init__(self, session: AsyncSession, tenant_id: str, clock: Clock | None = None):
        self._clock = clock or SystemClock()
        self._requirements = RequirementRepository(session, tenant_id, self._clock)
        self._equipment = EquipmentRepository(session, tenant_id, self._clock)

    async def overdue_inspections(self, site_id: str | None = None) -> OverdueReport:
        today = self._clock.today()
        rows = await self._requirements.due_before(today, site_id)

        items = []
        for row in rows:
            days_overdue = (today - row.next_inspection_date).days
            items.append(
                OverdueItem(
                    id=row.id,
                    title=row.title,
                    category=row.category,
                    priority=row.priority,
                    status=row.status,
                    site_id=row.site_id,
                    assigned_to=row.assigned_to,
                    next_inspection_date=row.next_inspection_date,
                    days_overdue=days_overdue,
                    is_critical=(
                        days_overdue > OVERDUE_CRITICAL_DAYS or row.priority == Priority.HIGH
                    ),
                )
            )

        average = round_half_up(sum(i.days_overdue for i in items) / len(items)) if items else 0
        return OverdueReport(
            inspections=items,
            total_overdue=len(items),
            critical_overdue=sum(1 for i in items if i.is_critical),
            average_days_overdue=average,
        )

    async def upcoming_tasks(
        self, site_id: str | None = None, horizon_days: int | None = None
    ) -> UpcomingReport:
        if horizon_days is None:
            horizon_days = settings.upcoming_horizon_days
        if horizon_days < 0:
            raise ValidationError("horizon_days must not be negative")

        today = self._clock.today()
        rows = await self._requirements.due_between(
            today, today + timedelta(days=horizon_days), site_id
        )

        tasks = []
        for row in rows:
            days_until_due = (row.next_inspection_date - today).days
            tasks.append(
                UpcomingItem(
                    id=row.id,
                    title=row.title,
                    category=row.category,
                    priority=row.priority,
                    status=row.status,
                    site_id=row.site_id,
                    assigned_to=row.assigned_to,
                    next_inspection_date=row.next_inspection_date,
                    days_until_due=days_until_due,
                    is_urgent=days_until_due <= UPCOMING_URGENT_DAYS,
                    is_critical=days_until_due <= UPCOMING_CRITICAL_DAYS,
                )
            )

        return UpcomingReport(
            tasks=tasks,
            total_tasks=len(tasks),
            urgent_tasks=sum(1 for t in tasks if t.is_urgent),
            critical_tasks=sum(1 for t in tasks if t.is_critical),
            horizon_days=horizon_days,
        )

    async def statistics(
        self,
        site_id: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> StatisticsReport:
        if date_from and date_to and date_from > date_to:
            raise ValidationError("dateFrom must not be after dateTo")

        today = self._clock.today()
        scope = {"site_id": site_id}
        created = []
        if date_from:
            created.append(ComplianceRequirement.created_at >= _start_of_day(date_from))
        if date_to:
            created.append(
                ComplianceRequirement.created_at < _start_of_day(date_to + timedelta(days=1))
            )

        total = await self._requirements.count(*created, filters=scope)
        by_status = {s.value: 0 for s in ComplianceStatus}
        by_status.update(await self._requirements.count_by("status", *created, filters=scope))
        by_priority = {p.value: 0 for p in Priority}
        by_priority.update(await self._requirements.count_by("priority", *created, filters=scope))
        by_category = {c.value: 0 for c in Category}
        by_category.update(await self._requirements.count_by("category", *created, filters=scope))

        overdue = await self._requirements.count(
            ComplianceRequirement.next_inspection_date < today, *created, filters=scope
        )
        due_soon = await self._requirements.count(
            ComplianceRequirement.next_inspection_date >= today,
            ComplianceRequirement.next_inspection_date
            <= today + timedelta(days=settings.upcoming_horizon_days),
            *created,
            filters=scope,
        )
        expiring = await self._equipment.count_certifications_expiring(
            today,
            today + timedelta(days=settings.certification_expiry_window_days),
            *created,
            site_id=site_id,
        )
        last_audit = await self._requirements.latest_audit_date(site_id)

        return StatisticsReport(
            total_requirements=total,
            compliance_rate=compliance_rate(by_status[ComplianceStatus.COMPLIANT.value], total),
            overdue_inspections=overdue,
            inspections_due=due_soon,
            last_audit_days_ago=(today - last_audit).days if last_audit else None,
            equipment_certifications_expiring=expiring,
            by_category=by_category,
            by_status=by_status,
            by_priority=by_priority,
            generated_at=self._clock.now_utc(),
        )

    async def summary(self, site_id: str | None = None) -> SummaryReport:
        stats = await self.statistics(site_id)
        critical_issues = stats.overdue_inspections

        status = "good"
        if critical_issues > SUMMARY_CRITICAL_ISSUES or stats.compliance_rate < SUMMARY_CRITICAL_RATE:
            status = "critical"
        elif critical_issues > 0 or stats.compliance_rate < SUMMARY_WARNING_RATE:
            status = "warning"

        return SummaryReport(
            overall_compliance=stats.compliance_rate,
            critical_issues=critical_issues,
            upcoming_inspections=stats.inspections_due,
            status=status,
        )

    async def trends(self, period: str = "30d", site_id: str | None = None) -> TrendReport:
        """Compliance rate of requirements created per day (30d) or per week (90d, 1y)."""
        today = self._clock.today()
        if period == "30d":
            start, step = today - timedelta(days=30), timedelta(days=1)
        elif period == "90d":
            start, step = today - timedelta(days=90), timedelta(days=7)
        elif period == "1y":
            start, step = add_months(today, -12), timedelta(days=7)
        else:
            raise ValidationError(f"period must be one of {', '.join(TREND_PERIODS)}")

        rows = await self._requirements.find(
            ComplianceRequirement.created_at >= _start_of_day(start),
            filters={"site_id": site_id},
            order_by=ComplianceRequirement.created_at.asc(),
        )

        points = []
        current = start
        while current <= today:
            following = current + step
            bucket = [r for r in rows if current <= r.created_at.date() < following]
            compliant = sum(1 for r in bucket if r.status == ComplianceStatus.COMPLIANT)
            points.append(
                TrendPoint(
                    start_date=current,
                    compliance_rate=compliance_rate(compliant, len(bucket)),
                    requirements_created=len(bucket),
                )
            )
            current = following

        return TrendReport(period=period, compliance_trend=points)
