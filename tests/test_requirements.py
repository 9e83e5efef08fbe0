"""Requirement catalog: create / list / get / update / soft delete and equipment linkage."""

import warnings
from datetime import date

import pytest
from sqlalchemy.exc import SADeprecationWarning

from compliance_api.core.exceptions import LinkageFailure, NotFoundError, ValidationError
from compliance_api.core.pagination import PaginationParams
from compliance_api.domain.enums import ComplianceStatus, Frequency, InspectionResult
from compliance_api.schemas.requirement import (
    RequirementCreate,
    RequirementFilters,
    RequirementUpdate,
)
from compliance_api.services.equipment import EquipmentLinkageService
from compliance_api.services.requirement import RequirementService

from tests.conftest import OTHER_TENANT, TENANT


def _page(page=1, limit=10):
    return PaginationParams(page=page, limit=limit, sort="created_at", order="desc")


class TestCreate:
    @pytest.mark.asyncio
    async def test_monthly_requirement_is_due_one_month_out(self, session, clock):
        svc = RequirementService(session, TENANT, clock)
        result = await svc.create_requirement(
            RequirementCreate(title="Fire extinguishers", category="safety", frequency="monthly")
        )

        req = result.requirement
        assert req.next_inspection_date == date(2024, 2, 15)
        assert req.status == ComplianceStatus.PENDING
        assert req.tenant_id == TENANT
        assert result.linkage_error is None

    @pytest.mark.asyncio
    async def test_explicit_next_inspection_date_is_kept(self, session, clock):
        svc = RequirementService(session, TENANT, clock)
        result = await svc.create_requirement(
            RequirementCreate(
                title="Harness check",
                category="safety",
                frequency="weekly",
                next_inspection_date=date(2024, 3, 1),
            )
        )
        assert result.requirement.next_inspection_date == date(2024, 3, 1)

    @pytest.mark.asyncio
    async def test_blank_title_is_rejected(self, session, clock):
        svc = RequirementService(session, TENANT, clock)
        with pytest.raises(ValidationError):
            await svc.create_requirement(
                RequirementCreate(title="   ", category="site", frequency="daily")
            )

    @pytest.mark.asyncio
    async def test_missing_tenant_is_rejected(self, session, clock):
        svc = RequirementService(session, "", clock)
        with pytest.raises(ValidationError):
            await svc.create_requirement(
                RequirementCreate(title="Guard rails", category="site", frequency="daily")
            )


class TestEquipmentLinkage:
    @pytest.mark.asyncio
    async def test_equipment_requirement_gets_linked_row(self, session, clock):
        svc = RequirementService(session, TENANT, clock)
        result = await svc.create_requirement(
            RequirementCreate(title="Crane certification", category="equipment", frequency="quarterly")
        )

        rows = await svc.list_equipment(result.requirement.id)
        assert len(rows) == 1
        assert rows[0].status == "pending"
        assert rows[0].equipment_type == "other"
        assert rows[0].next_inspection_date == date(2024, 4, 15)
        assert rows[0].next_maintenance_date == date(2024, 4, 15)

    @pytest.mark.asyncio
    async def test_other_categories_get_no_equipment_row(self, session, clock):
        svc = RequirementService(session, TENANT, clock)
        result = await svc.create_requirement(
            RequirementCreate(title="Training log", category="training", frequency="annually")
        )
        assert await svc.list_equipment(result.requirement.id) == []

    @pytest.mark.asyncio
    async def test_linkage_failure_does_not_abort_creation(
        self, session, session_factory, clock, monkeypatch, fetch_requirement
    ):
        async def _boom(self, requirement):
            raise RuntimeError("equipment store unavailable")

        monkeypatch.setattr(EquipmentLinkageService, "create_for_requirement", _boom)

        svc = RequirementService(session, TENANT, clock)
        result = await svc.create_requirement(
            RequirementCreate(title="Forklift check", category="equipment", frequency="weekly")
        )
        await session.commit()

        assert isinstance(result.linkage_error, LinkageFailure)
        assert result.linkage_error.requirement_id == result.requirement.id
        assert "equipment store unavailable" in result.linkage_error.message

        stored = await fetch_requirement(result.requirement.id)
        assert stored is not None
        assert stored.title == "Forklift check"

        async with session_factory() as fresh:
            assert await RequirementService(fresh, TENANT, clock).list_equipment(stored.id) == []


class TestReadAndList:
    @pytest.mark.asyncio
    async def test_get_unknown_id_raises_not_found(self, session, clock):
        with pytest.raises(NotFoundError):
            await RequirementService(session, TENANT, clock).get_requirement("missing")

    @pytest.mark.asyncio
    async def test_get_from_other_tenant_raises_not_found(self, session, clock, create_requirement):
        req = await create_requirement(tenant_id=OTHER_TENANT)
        with pytest.raises(NotFoundError):
            await RequirementService(session, TENANT, clock).get_requirement(req.id)

    @pytest.mark.asyncio
    async def test_list_filters_and_counts(self, session, clock, create_requirement):
        await create_requirement(title="A", category="site", priority="high", site_id="site-1")
        await create_requirement(title="B", category="site", priority="low", site_id="site-2")
        await create_requirement(title="C", category="training", priority="high", site_id="site-1")
        await create_requirement(tenant_id=OTHER_TENANT, title="X", category="site")

        svc = RequirementService(session, TENANT, clock)

        items, total = await svc.list_requirements(_page())
        assert total == 3
        assert {r.title for r in items} == {"A", "B", "C"}

        items, total = await svc.list_requirements(
            _page(), RequirementFilters(category="site", priority="high")
        )
        assert total == 1
        assert items[0].title == "A"

        items, total = await svc.list_requirements(_page(), RequirementFilters(site_id="site-1"))
        assert total == 2

    @pytest.mark.asyncio
    async def test_list_paginates_with_full_total(self, session, clock, create_requirement):
        for i in range(5):
            await create_requirement(title=f"Req {i}")

        items, total = await RequirementService(session, TENANT, clock).list_requirements(
            _page(page=2, limit=2)
        )
        assert total == 5
        assert len(items) == 2


class TestUpdate:
    @pytest.mark.asyncio
    async def test_frequency_change_recomputes_due_date_from_today(
        self, session, clock, create_requirement
    ):
        req = await create_requirement(frequency="monthly")
        clock.advance(days=10)  # 2024-01-25

        updated = await RequirementService(session, TENANT, clock).update_requirement(
            req.id, RequirementUpdate(frequency=Frequency.WEEKLY)
        )
        assert updated.frequency == "weekly"
        assert updated.next_inspection_date == date(2024, 2, 1)

    @pytest.mark.asyncio
    async def test_explicit_date_wins_over_frequency_change(self, session, clock, create_requirement):
        req = await create_requirement(frequency="monthly")

        updated = await RequirementService(session, TENANT, clock).update_requirement(
            req.id,
            RequirementUpdate(frequency="annually", next_inspection_date=date(2024, 6, 30)),
        )
        assert updated.next_inspection_date == date(2024, 6, 30)

    @pytest.mark.asyncio
    async def test_same_frequency_keeps_due_date(self, session, clock, create_requirement):
        req = await create_requirement(frequency="monthly")
        clock.advance(days=5)

        updated = await RequirementService(session, TENANT, clock).update_requirement(
            req.id, RequirementUpdate(frequency="monthly", title="Renamed")
        )
        assert updated.title == "Renamed"
        assert updated.next_inspection_date == date(2024, 2, 15)

    @pytest.mark.asyncio
    async def test_status_update(self, session, clock, create_requirement):
        req = await create_requirement()
        updated = await RequirementService(session, TENANT, clock).update_requirement(
            req.id, RequirementUpdate(status="compliant")
        )
        assert updated.status == "compliant"
        assert updated.next_inspection_date is not None

    @pytest.mark.asyncio
    async def test_update_other_tenant_raises_not_found(self, session, clock, create_requirement):
        req = await create_requirement(tenant_id=OTHER_TENANT)
        with pytest.raises(NotFoundError):
            await RequirementService(session, TENANT, clock).update_requirement(
                req.id, RequirementUpdate(title="Hijacked")
            )


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_cascades_to_equipment(
        self, session, session_factory, clock, create_requirement
    ):
        req = await create_requirement(category="equipment", title="Crane")
        svc = RequirementService(session, TENANT, clock)
        assert len(await svc.list_equipment(req.id)) == 1

        await svc.delete_requirement(req.id)
        await session.commit()

        from compliance_api.domain.equipment import EquipmentCompliance
        from sqlalchemy import select

        async with session_factory() as fresh:
            rows = (
                await fresh.execute(
                    select(EquipmentCompliance).where(EquipmentCompliance.requirement_id == req.id)
                )
            ).scalars().all()
        assert len(rows) == 1
        assert rows[0].is_deleted is True
        assert rows[0].deleted_at is not None

    @pytest.mark.asyncio
    async def test_deleted_requirement_is_hidden(self, session, clock, create_requirement):
        req = await create_requirement()
        svc = RequirementService(session, TENANT, clock)
        await svc.delete_requirement(req.id)

        with pytest.raises(NotFoundError):
            await svc.get_requirement(req.id)
        _, total = await svc.list_requirements(_page())
        assert total == 0
        with pytest.raises(NotFoundError):
            await svc.delete_requirement(req.id)

    @pytest.mark.asyncio
    async def test_delete_leaves_other_tenants_untouched(
        self, session, clock, create_requirement, fetch_requirement
    ):
        mine = await create_requirement(title="Mine")
        theirs = await create_requirement(tenant_id=OTHER_TENANT, title="Theirs")

        await RequirementService(session, TENANT, clock).delete_requirement(mine.id)
        await session.commit()

        assert (await fetch_requirement(theirs.id)).is_deleted is False
        with pytest.raises(NotFoundError):
            await RequirementService(session, TENANT, clock).delete_requirement(theirs.id)


class TestRecordInspection:
    @pytest.mark.asyncio
    async def test_pass_marks_compliant_and_rolls_schedule_forward(
        self, session, clock, create_requirement
    ):
        req = await create_requirement(frequency="monthly")  # due 2024-02-15
        clock.set(clock.now_utc().replace(month=3, day=1))

        updated = await RequirementService(session, TENANT, clock).record_inspection(
            req.id, InspectionResult.PASSED
        )

        assert updated.status == "compliant"
        assert updated.last_inspection_date == date(2024, 3, 1)
        assert updated.next_inspection_date == date(2024, 4, 1)

    @pytest.mark.asyncio
    async def test_fail_marks_non_compliant_from_inspection_date(
        self, session, clock, create_requirement
    ):
        req = await create_requirement(frequency="weekly")
        clock.set(clock.now_utc().replace(month=2, day=1))

        updated = await RequirementService(session, TENANT, clock).record_inspection(
            req.id, "failed", inspection_date=date(2024, 1, 29)
        )

        assert updated.status == "non_compliant"
        assert updated.last_inspection_date == date(2024, 1, 29)
        assert updated.next_inspection_date == date(2024, 2, 5)

    @pytest.mark.asyncio
    async def test_explicit_next_date_wins(self, session, clock, create_requirement):
        req = await create_requirement(frequency="annually")

        updated = await RequirementService(session, TENANT, clock).record_inspection(
            req.id, InspectionResult.PASSED, next_inspection_date=date(2024, 6, 30)
        )
        assert updated.next_inspection_date == date(2024, 6, 30)

    @pytest.mark.asyncio
    async def test_conditional_keeps_status(self, session, clock, create_requirement):
        req = await create_requirement(status="non_compliant")

        updated = await RequirementService(session, TENANT, clock).record_inspection(
            req.id, InspectionResult.CONDITIONAL
        )
        assert updated.status == "non_compliant"
        assert updated.last_inspection_date == date(2024, 1, 15)
        assert updated.next_inspection_date == date(2024, 2, 15)

    @pytest.mark.asyncio
    async def test_inconsistent_dates_rejected(self, session, clock, create_requirement):
        req = await create_requirement()
        svc = RequirementService(session, TENANT, clock)

        with pytest.raises(ValidationError):
            await svc.record_inspection(
                req.id, InspectionResult.PASSED, inspection_date=date(2024, 1, 16)
            )
        with pytest.raises(ValidationError):
            await svc.record_inspection(
                req.id, InspectionResult.PASSED, next_inspection_date=date(2024, 1, 15)
            )

    @pytest.mark.asyncio
    async def test_other_tenant_raises_not_found(self, session, clock, create_requirement):
        req = await create_requirement(tenant_id=OTHER_TENANT)
        with pytest.raises(NotFoundError):
            await RequirementService(session, TENANT, clock).record_inspection(
                req.id, InspectionResult.PASSED
            )


class TestMapping:
    @pytest.mark.asyncio
    async def test_crud_path_emits_no_sqlalchemy_deprecations(self, session, clock):
        svc = RequirementService(session, TENANT, clock)
        with warnings.catch_warnings():
            warnings.simplefilter("error", SADeprecationWarning)
            result = await svc.create_requirement(
                RequirementCreate(title="Hoist check", category="equipment", frequency="monthly")
            )
            await svc.list_equipment(result.requirement.id)
            await svc.list_requirements(_page())

    def test_requirement_table_has_only_mapped_fields(self):
        from compliance_api.domain.requirement import ComplianceRequirement

        columns = set(ComplianceRequirement.__table__.c.keys())
        assert "metadata" not in columns
        assert {"next_inspection_date", "last_inspection_date", "last_audit_date"} <= columns
