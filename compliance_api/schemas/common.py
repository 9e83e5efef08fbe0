"""Base schema for the compliance API payloads.

Python attributes stay snake_case (``next_inspection_date``); the wire format
is camelCase (``nextInspectionDate``). Models are built straight from ORM rows.
"""

from __future__ import annotations

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
        "from_attributes": True,
    }


class HealthResponse(BaseModel):
    """``GET /health``: liveness plus the configured app name and environment."""

    status: str = "ok"
    app: str
    env: str
