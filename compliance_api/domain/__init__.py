"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  requirement.py  — compliance requirements (the catalog)
  equipment.py    — equipment rows linked to equipment-category requirements
  lease.py        — per-tenant advisory leases held during audit runs
  audit.py        — immutable request audit trail (never updated or deleted)
  enums.py        — allowed values for frequency, category, priority, status
  mixins.py       — shared TimestampMixin, TenantMixin
"""

from compliance_api.domain.audit import AuditTrail
from compliance_api.domain.equipment import EquipmentCompliance
from compliance_api.domain.lease import AuditLease
from compliance_api.domain.requirement import ComplianceRequirement

__all__ = [
    "AuditLease",
    "AuditTrail",
    "ComplianceRequirement",
    "EquipmentCompliance",
]
