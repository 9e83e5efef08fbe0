"""Shared fixtures: a throwaway SQLite database per test and a fixed clock."""

from __future__ import annotations

from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import compliance_api.domain  # noqa: F401  (register all models on Base.metadata)
from compliance_api.core.clock import FixedClock
from compliance_api.db.base import Base
from compliance_api.schemas.requirement import RequirementCreate, RequirementUpdate
from compliance_api.services.requirement import RequirementService

TENANT = "tenant-a"
OTHER_TENANT = "tenant-b"


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    """Clock pinned to 2024-01-15 (midnight UTC)."""
    return FixedClock.on(date(2024, 1, 15))


@pytest.fixture
def create_requirement(session_factory, clock):
    """Async helper that creates and commits a requirement.

    ``status`` is not accepted on create, so when given it is applied with a
    follow-up update, the way an operator would mark a requirement compliant.
    """

    async def _create(tenant_id: str = TENANT, **fields):
        status = fields.pop("status", None)
        payload = {
            "title": "Scaffold inspection",
            "category": "site",
            "frequency": "monthly",
            **fields,
        }
        async with session_factory() as session:
            svc = RequirementService(session, tenant_id, clock)
            result = await svc.create_requirement(RequirementCreate(**payload))
            requirement = result.requirement
            if status:
                requirement = await svc.update_requirement(
                    requirement.id, RequirementUpdate(status=status)
                )
            await session.commit()
        return requirement

    return _create


@pytest.fixture
def fetch_requirement(session_factory):
    """Read a requirement back through a fresh session (bypasses tenant scoping)."""
    from compliance_api.domain.requirement import ComplianceRequirement

    async def _fetch(requirement_id: str):
        async with session_factory() as session:
            return await session.get(ComplianceRequirement, requirement_id)

    return _fetch
