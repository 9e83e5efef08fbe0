"""Audit run engine — batch re-evaluation of requirement status against today.

A run loads every live requirement in scope, marks overdue ones
non_compliant, stamps ``last_audit_date`` on all of them and reports
run-level statistics.

Each record is written in its own short transaction: a failed write is
logged and reported in ``failed_requirements`` while the rest of the batch
carries on, and writes already committed stay committed if the caller
abandons the run. Two runs for the same tenant may overlap; the advisory
lease only lets the second one notice (``concurrent_run_detected``).
"""


import dataclasses
import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from compliance_api.core.clock import Clock, SystemClock
from compliance_api.domain.enums import ComplianceStatus, Priority
from compliance_api.domain.requirement import ComplianceRequirement
from compliance_api.repositories.requirement import RequirementRepository
from compliance_api.schemas.reports import AuditRunResult
from compliance_api.services.lease import AuditLeaseManager
from compliance_api.services.reports import compliance_rate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Snapshot:
    """Plain copy of the fields a run reads, detached from any session."""

    id: str
    title: str
    status: str
    priority: str
    next_inspection_date: date

    @classmethod
    def of(cls, requirement: ComplianceRequirement) -> "_Snapshot":
        return cls(
            id=requirement.id,
            title=requirement.title,
            status=requirement.status,
            priority=requirement.priority,
            next_inspection_date=requirement.next_inspection_date,
        )

    def is_overdue(self, today: date) -> bool:
        return self.next_inspection_date < today


class AuditRunService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        tenant_id: str,
        clock: Clock | None = None,
        lease_manager: AuditLeaseManager | None = None,
    ):
        self._session_factory = session_factory
        self._tenant_id = tenant_id
        self._clock = clock or SystemClock()
        self._leases = lease_manager or AuditLeaseManager(session_factory, tenant_id, self._clock)

    async def run_audit(
        self, site_id: str | None = None, actor_id: str | None = None
    ) -> AuditRunResult:
        logger.info(
            "Running compliance audit for tenant %s%s",
            self._tenant_id, f" (site {site_id})" if site_id else "",
        )
        lease = await self._leases.acquire(holder=actor_id)
        try:
            result = await self._run(site_id, actor_id)
        finally:
            await self._leases.release(lease)

        result.concurrent_run_detected = lease.concurrent_run_detected
        logger.info(
            "Audit completed for tenant %s. Updated %d/%d requirements (%d failed). "
            "Compliance rate: %d%%",
            self._tenant_id, result.requirements_updated, result.requirements_eligible,
            len(result.failed_requirements), result.new_compliance_rate,
        )
        return result

    async def _load(self, site_id: str | None) -> list[_Snapshot]:
        async with self._session_factory() as session:
            repo = RequirementRepository(session, self._tenant_id, self._clock)
            return [_Snapshot.of(r) for r in await repo.in_scope(site_id)]

    async def _write(self, requirement_id: str, values: dict) -> bool:
        """Persist one record's audit update in its own transaction."""
        async with self._session_factory() as session:
            repo = RequirementRepository(session, self._tenant_id, self._clock)
            try:
                updated = await repo.update(requirement_id, **values)
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                logger.error(
                    "Audit update failed for requirement %s: %s", requirement_id, exc,
                    exc_info=True,
                )
                return False
        if updated is None:
            # Deleted between the snapshot and this write.
            logger.warning("Requirement %s disappeared during audit", requirement_id)
            return False
        return True

    async def _run(self, site_id: str | None, actor_id: str | None) -> AuditRunResult:
        today = self._clock.today()
        snapshots = await self._load(site_id)

        after: list[_Snapshot] = []
        failed: list[str] = []
        changes: list[str] = []
        for snap in snapshots:
            values = {"last_audit_date": today, "last_audited_by": actor_id}
            new_status = snap.status
            if snap.is_overdue(today) and snap.status != ComplianceStatus.NON_COMPLIANT:
                new_status = ComplianceStatus.NON_COMPLIANT.value
                values["status"] = new_status

            if not await self._write(snap.id, values):
                failed.append(snap.id)
                after.append(snap)
                continue

            if new_status != snap.status:
                changes.append(
                    f"{snap.title}: marked non_compliant "
                    f"(inspection overdue since {snap.next_inspection_date.isoformat()})"
                )
            after.append(dataclasses.replace(snap, status=new_status))

        total = len(after)
        compliant = sum(1 for s in after if s.status == ComplianceStatus.COMPLIANT)
        non_compliant = sum(1 for s in after if s.status == ComplianceStatus.NON_COMPLIANT)
        return AuditRunResult(
            total_requirements=total,
            compliant_requirements=compliant,
            non_compliant_requirements=non_compliant,
            overdue_inspections=sum(1 for s in after if s.is_overdue(today)),
            critical_violations=sum(
                1
                for s in after
                if s.status == ComplianceStatus.NON_COMPLIANT and s.priority == Priority.HIGH
            ),
            new_compliance_rate=compliance_rate(compliant, total),
            requirements_eligible=total,
            requirements_updated=total - len(failed),
            failed_requirements=failed,
            updated_requirements=changes,
            audit_date=today,
        )
