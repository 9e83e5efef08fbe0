"""Audit run engine: status re-evaluation, run statistics, partial failure, leases."""

from datetime import date, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from compliance_api.domain.enums import ComplianceStatus
from compliance_api.repositories.requirement import RequirementRepository
from compliance_api.services.audit_run import AuditRunService
from compliance_api.services.lease import AuditLeaseManager

from tests.conftest import OTHER_TENANT, TENANT


@pytest.fixture
def engine_for(session_factory, clock):
    def _make(tenant_id: str = TENANT) -> AuditRunService:
        return AuditRunService(session_factory, tenant_id, clock)

    return _make


class TestStatusReevaluation:
    @pytest.mark.asyncio
    async def test_overdue_requirement_becomes_non_compliant(
        self, clock, create_requirement, fetch_requirement, engine_for
    ):
        req = await create_requirement(frequency="monthly")  # due 2024-02-15
        clock.set(clock.now_utc().replace(month=3, day=1))

        result = await engine_for().run_audit(actor_id="auditor-1")

        stored = await fetch_requirement(req.id)
        assert stored.status == ComplianceStatus.NON_COMPLIANT
        assert stored.last_audit_date == date(2024, 3, 1)
        assert stored.last_audited_by == "auditor-1"

        assert result.audit_date == date(2024, 3, 1)
        assert result.total_requirements == 1
        assert result.non_compliant_requirements == 1
        assert result.overdue_inspections == 1
        assert result.requirements_updated == 1
        assert result.requirements_eligible == 1
        assert result.failed_requirements == []
        assert len(result.updated_requirements) == 1
        assert "overdue since 2024-02-15" in result.updated_requirements[0]

    @pytest.mark.asyncio
    async def test_due_today_is_not_overdue(
        self, clock, create_requirement, fetch_requirement, engine_for
    ):
        req = await create_requirement(status="compliant", next_inspection_date=clock.today())

        result = await engine_for().run_audit()

        assert (await fetch_requirement(req.id)).status == ComplianceStatus.COMPLIANT
        assert result.overdue_inspections == 0
        assert result.new_compliance_rate == 100

    @pytest.mark.asyncio
    async def test_non_compliant_stays_non_compliant_and_is_restamped(
        self, clock, create_requirement, fetch_requirement, engine_for
    ):
        req = await create_requirement(
            status="non_compliant", next_inspection_date=date(2024, 1, 1)
        )

        result = await engine_for().run_audit()

        stored = await fetch_requirement(req.id)
        assert stored.status == ComplianceStatus.NON_COMPLIANT
        assert stored.last_audit_date == clock.today()
        assert result.updated_requirements == []
        assert result.requirements_updated == 1


class TestRunStatistics:
    @pytest.mark.asyncio
    async def test_empty_tenant(self, engine_for):
        result = await engine_for().run_audit()

        assert result.total_requirements == 0
        assert result.new_compliance_rate == 0
        assert result.requirements_updated == 0

    @pytest.mark.asyncio
    async def test_compliance_rate_and_critical_violations(
        self, clock, create_requirement, engine_for
    ):
        past = clock.today() - timedelta(days=5)
        await create_requirement(title="Ok", status="compliant")
        await create_requirement(title="Late high", priority="high", next_inspection_date=past)
        await create_requirement(title="Late low", priority="low", next_inspection_date=past)

        result = await engine_for().run_audit()

        assert result.total_requirements == 3
        assert result.compliant_requirements == 1
        assert result.non_compliant_requirements == 2
        assert result.critical_violations == 1
        assert result.overdue_inspections == 2
        assert result.new_compliance_rate == 33

    @pytest.mark.asyncio
    async def test_rate_rounds_half_up(self, create_requirement, engine_for):
        # 1 of 8 compliant = 12.5% -> 13
        await create_requirement(status="compliant")
        for i in range(7):
            await create_requirement(title=f"Pending {i}")

        result = await engine_for().run_audit()
        assert result.new_compliance_rate == 13

    @pytest.mark.asyncio
    async def test_second_run_yields_same_rate(self, clock, create_requirement, engine_for):
        await create_requirement(status="compliant")
        await create_requirement(next_inspection_date=clock.today() - timedelta(days=2))

        first = await engine_for().run_audit()
        second = await engine_for().run_audit()

        assert first.new_compliance_rate == second.new_compliance_rate == 50
        assert len(first.updated_requirements) == 1
        assert second.updated_requirements == []
        assert second.requirements_updated == 2


class TestScope:
    @pytest.mark.asyncio
    async def test_site_scope_and_tenant_isolation(
        self, clock, create_requirement, fetch_requirement, engine_for
    ):
        past = clock.today() - timedelta(days=1)
        on_site = await create_requirement(site_id="site-1", next_inspection_date=past)
        off_site = await create_requirement(site_id="site-2", next_inspection_date=past)
        foreign = await create_requirement(
            tenant_id=OTHER_TENANT, site_id="site-1", next_inspection_date=past
        )

        result = await engine_for().run_audit(site_id="site-1")

        assert result.total_requirements == 1
        assert (await fetch_requirement(on_site.id)).status == ComplianceStatus.NON_COMPLIANT
        assert (await fetch_requirement(off_site.id)).status == ComplianceStatus.PENDING
        assert (await fetch_requirement(foreign.id)).status == ComplianceStatus.PENDING
        assert (await fetch_requirement(foreign.id)).last_audit_date is None

    @pytest.mark.asyncio
    async def test_deleted_requirements_are_skipped(
        self, session, clock, create_requirement, fetch_requirement, engine_for
    ):
        from compliance_api.services.requirement import RequirementService

        req = await create_requirement(next_inspection_date=clock.today() - timedelta(days=3))
        await RequirementService(session, TENANT, clock).delete_requirement(req.id)
        await session.commit()

        result = await engine_for().run_audit()

        assert result.total_requirements == 0
        stored = await fetch_requirement(req.id)
        assert stored.status == ComplianceStatus.PENDING
        assert stored.last_audit_date is None


class TestPartialFailure:
    @pytest.mark.asyncio
    async def test_failed_write_does_not_abort_the_batch(
        self, clock, create_requirement, fetch_requirement, engine_for, monkeypatch
    ):
        past = clock.today() - timedelta(days=4)
        broken = await create_requirement(title="Broken", next_inspection_date=past)
        healthy = await create_requirement(title="Healthy", next_inspection_date=past)

        original_update = RequirementRepository.update

        async def _flaky_update(self, entity_id, **kwargs):
            if entity_id == broken.id:
                raise OperationalError("UPDATE", {}, Exception("disk I/O error"))
            return await original_update(self, entity_id, **kwargs)

        monkeypatch.setattr(RequirementRepository, "update", _flaky_update)

        result = await engine_for().run_audit()

        assert result.requirements_eligible == 2
        assert result.requirements_updated == 1
        assert result.failed_requirements == [broken.id]
        # The failed record keeps its old status in the run statistics
        assert result.non_compliant_requirements == 1
        assert (await fetch_requirement(healthy.id)).status == ComplianceStatus.NON_COMPLIANT
        assert (await fetch_requirement(broken.id)).status == ComplianceStatus.PENDING


class TestLease:
    @pytest.mark.asyncio
    async def test_held_lease_flags_concurrent_run(
        self, session_factory, clock, create_requirement, fetch_requirement, engine_for
    ):
        req = await create_requirement(next_inspection_date=clock.today() - timedelta(days=1))
        other_run = AuditLeaseManager(session_factory, TENANT, clock, ttl_seconds=60)
        handle = await other_run.acquire(holder="scheduler")
        assert handle.acquired

        result = await engine_for().run_audit()

        assert result.concurrent_run_detected is True
        # The run still went ahead
        assert (await fetch_requirement(req.id)).status == ComplianceStatus.NON_COMPLIANT

        await other_run.release(handle)
        assert (await engine_for().run_audit()).concurrent_run_detected is False

    @pytest.mark.asyncio
    async def test_expired_lease_is_taken_over(self, session_factory, clock, engine_for):
        stale = AuditLeaseManager(session_factory, TENANT, clock, ttl_seconds=60)
        assert (await stale.acquire()).acquired
        clock.advance(seconds=120)

        result = await engine_for().run_audit()
        assert result.concurrent_run_detected is False

    @pytest.mark.asyncio
    async def test_leases_are_per_tenant(self, session_factory, clock, engine_for):
        other = AuditLeaseManager(session_factory, OTHER_TENANT, clock)
        assert (await other.acquire()).acquired

        result = await engine_for(TENANT).run_audit()
        assert result.concurrent_run_detected is False

    @pytest.mark.asyncio
    async def test_run_releases_its_own_lease(self, session_factory, clock, engine_for):
        await engine_for().run_audit()

        probe = AuditLeaseManager(session_factory, TENANT, clock)
        handle = await probe.acquire()
        assert handle.acquired
        assert handle.concurrent_run_detected is False
