"""Enumerations shared by the ORM models, schemas and services.

Columns store the plain string values; these classes are the single source of
the allowed values.
"""

from enum import Enum


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"


class Category(str, Enum):
    EQUIPMENT = "equipment"
    SITE = "site"
    PROCESS = "process"
    ENVIRONMENTAL = "environmental"
    SAFETY = "safety"
    DOCUMENTATION = "documentation"
    TRAINING = "training"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ComplianceStatus(str, Enum):
    PENDING = "pending"
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non_compliant"


class EquipmentType(str, Enum):
    CRANE = "crane"
    SCAFFOLDING = "scaffolding"
    PPE = "ppe"
    VEHICLE = "vehicle"
    TOOLS = "tools"
    MACHINERY = "machinery"
    SAFETY_EQUIPMENT = "safety_equipment"
    LIFTING_EQUIPMENT = "lifting_equipment"
    ELECTRICAL_EQUIPMENT = "electrical_equipment"
    OTHER = "other"


class EquipmentStatus(str, Enum):
    PENDING = "pending"
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non_compliant"
    OUT_OF_SERVICE = "out_of_service"


class InspectionResult(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    CONDITIONAL = "conditional"
