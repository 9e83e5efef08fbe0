"""SQLAlchemy ORM model for compliance requirements.

A requirement is a recurring obligation (e.g. "Inspect scaffolding") owned by a
tenant and optionally scoped to one site. Its ``status`` is re-evaluated by
audit runs against ``next_inspection_date``.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import List, Optional

from sqlalchemy import Boolean, Date, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from compliance_api.db.base import Base
from compliance_api.domain.enums import ComplianceStatus, Priority
from compliance_api.domain.mixins import TenantMixin, TimestampMixin


class ComplianceRequirement(Base, TenantMixin, TimestampMixin):
    __tablename__ = "compliance_requirements"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    site_id: Mapped[Optional[str]] = mapped_column(String(36), index=True, nullable=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    regulation_reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Classification (see domain.enums)
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    compliance_type: Mapped[Optional[str]] = mapped_column(String(100), index=True, nullable=True)
    priority: Mapped[str] = mapped_column(
        String(20), default=Priority.MEDIUM.value, nullable=False, index=True
    )
    frequency: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # Schedule state
    last_inspection_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    next_inspection_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    # Written only by audit runs
    last_audit_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    last_audited_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    # "pending" | "compliant" | "non_compliant"
    status: Mapped[str] = mapped_column(
        String(20), default=ComplianceStatus.PENDING.value, nullable=False, index=True
    )

    assigned_to: Mapped[Optional[str]] = mapped_column(String(36), index=True, nullable=True)
    requirements: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    required_actions: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    documentation_links: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
