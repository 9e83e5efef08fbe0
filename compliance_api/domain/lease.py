"""SQLAlchemy ORM model for per-tenant audit run leases."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from compliance_api.db.base import Base


class AuditLease(Base):
    """At most one row per tenant; a row whose expires_at has passed is free."""

    __tablename__ = "audit_leases"

    tenant_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    token: Mapped[str] = mapped_column(String(36), nullable=False)
    holder: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    acquired_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
