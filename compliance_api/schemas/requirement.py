"""Compliance requirement Pydantic schemas (request DTOs and response models)."""


from datetime import date, datetime

from pydantic import Field, field_validator

from compliance_api.domain.enums import (
    Category,
    ComplianceStatus,
    Frequency,
    InspectionResult,
    Priority,
)
from compliance_api.schemas.common import CamelModel

class RequirementCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    category: Category
    frequency: Frequency
    site_id: str | None = None
    description: str | None = None
    compliance_type: str | None = None
    priority: Priority = Priority.MEDIUM
    regulation_reference: str | None = None
    last_inspection_date: date | None = None
    next_inspection_date: date | None = None
    assigned_to: str | None = None
    requirements: list[str] = Field(default_factory=list)
    required_actions: list[str] = Field(default_factory=list)
    documentation_links: list[str] = Field(default_factory=list)
    notes: str | None = None
    is_active: bool = True

class RequirementUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    category: Category | None = None
    frequency: Frequency | None = None
    site_id: str | None = None
    description: str | None = None
    compliance_type: str | None = None
    priority: Priority | None = None
    status: ComplianceStatus | None = None
    regulation_reference: str | None = None
    last_inspection_date: date | None = None
    next_inspection_date: date | None = None
    assigned_to: str | None = None
    requirements: list[str] | None = None
    required_actions: list[str] | None = None
    documentation_links: list[str] | None = None
    notes: str | None = None
    is_active: bool | None = None

class InspectionRecord(CamelModel):
    """A completed inspection of a requirement.

    Dates default to today and to the next due date for the requirement's frequency.
    """

    result: InspectionResult
    inspection_date: date | None = None
    next_inspection_date: date | None = None

class RequirementFilters(CamelModel):
    site_id: str | None = None
    category: Category | None = None
    compliance_type: str | None = None
    priority: Priority | None = None
    status: ComplianceStatus | None = None
    assigned_to: str | None = None

class RequirementOut(CamelModel):
    id: str
    tenant_id: str
    site_id: str | None = None
    title: str
    description: str | None = None
    category: str
    compliance_type: str | None = None
    priority: str
    status: str
    frequency: str
    regulation_reference: str | None = None
    last_inspection_date: date | None = None
    next_inspection_date: date
    last_audit_date: date | None = None
    last_audited_by: str | None = None
    assigned_to: str | None = None
    requirements: list[str] = Field(default_factory=list)
    required_actions: list[str] = Field(default_factory=list)
    documentation_links: list[str] = Field(default_factory=list)
    notes: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

class RequirementListItem(RequirementOut):
    """List rows show calendar dates only; timestamps are truncated for display."""

    created_at: date  # type: ignore[assignment]
    updated_at: date  # type: ignore[assignment]

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _to_date(cls, value):
        if isinstance(value, datetime):
            return value.date()
        return value

class RequirementCreatedOut(RequirementOut):
    """Create response: the requirement plus any equipment linkage failure."""

    linkage_error: str | None = None

class EquipmentOut(CamelModel):
    id: str
    requirement_id: str
    equipment_type: str
    equipment_name: str | None = None
    serial_number: str | None = None
    certification_expiry: date | None = None
    status: str
    next_inspection_date: date | None = None
    next_maintenance_date: date | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
