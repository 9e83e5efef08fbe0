"""Audit run and dashboard report schemas."""


from datetime import date, datetime

from pydantic import Field

from compliance_api.schemas.common import CamelModel

# ---------------------------------------------------------------------------
# Audit run
# ---------------------------------------------------------------------------

class AuditRunRequest(CamelModel):
    site_id: str | None = None

class AuditRunResult(CamelModel):
    total_requirements: int
    compliant_requirements: int
    non_compliant_requirements: int
    overdue_inspections: int
    critical_violations: int
    new_compliance_rate: int
    requirements_eligible: int
    requirements_updated: int
    failed_requirements: list[str] = Field(default_factory=list)
    updated_requirements: list[str] = Field(
        default_factory=list,
        description="Human-readable status changes made by this run.",
    )
    concurrent_run_detected: bool = False
    audit_date: date

# ---------------------------------------------------------------------------
# Overdue / upcoming
# ---------------------------------------------------------------------------

class OverdueItem(CamelModel):
    id: str
    title: str
    category: str
    priority: str
    status: str
    site_id: str | None = None
    assigned_to: str | None = None
    next_inspection_date: date
    days_overdue: int
    is_critical: bool

class OverdueReport(CamelModel):
    inspections: list[OverdueItem]
    total_overdue: int
    critical_overdue: int
    average_days_overdue: int

class UpcomingItem(CamelModel):
    id: str
    title: str
    category: str
    priority: str
    status: str
    site_id: str | None = None
    assigned_to: str | None = None
    next_inspection_date: date
    days_until_due: int
    is_urgent: bool
    is_critical: bool

class UpcomingReport(CamelModel):
    tasks: list[UpcomingItem]
    total_tasks: int
    urgent_tasks: int
    critical_tasks: int
    horizon_days: int

# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

class StatisticsReport(CamelModel):
    total_requirements: int
    compliance_rate: int
    overdue_inspections: int
    inspections_due: int
    last_audit_days_ago: int | None = None
    equipment_certifications_expiring: int
    by_category: dict[str, int]
    by_status: dict[str, int]
    by_priority: dict[str, int]
    generated_at: datetime

class SummaryReport(CamelModel):
    overall_compliance: int
    critical_issues: int
    upcoming_inspections: int
    status: str  # good | warning | critical

class TrendPoint(CamelModel):
    start_date: date
    compliance_rate: int
    requirements_created: int

class TrendReport(CamelModel):
    period: str
    compliance_trend: list[TrendPoint]
