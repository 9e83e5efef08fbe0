"""SQLAlchemy ORM model for equipment compliance rows.

Child of a requirement whose category is ``equipment``. Rows are created with
their parent and soft-deleted with it; audit runs do not re-evaluate them.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from sqlalchemy import Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from compliance_api.db.base import Base
from compliance_api.domain.enums import EquipmentStatus, EquipmentType
from compliance_api.domain.mixins import TenantMixin, TimestampMixin


class EquipmentCompliance(Base, TenantMixin, TimestampMixin):
    __tablename__ = "equipment_compliance"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    requirement_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("compliance_requirements.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    equipment_type: Mapped[str] = mapped_column(
        String(50), default=EquipmentType.OTHER.value, nullable=False, index=True
    )
    equipment_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    serial_number: Mapped[Optional[str]] = mapped_column(String(100), index=True, nullable=True)
    certification_expiry: Mapped[Optional[date]] = mapped_column(Date, index=True, nullable=True)

    # "pending" | "compliant" | "non_compliant" | "out_of_service"
    status: Mapped[str] = mapped_column(
        String(20), default=EquipmentStatus.PENDING.value, nullable=False, index=True
    )
    next_inspection_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    next_maintenance_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
