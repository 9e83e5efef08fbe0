"""Generic async repository with soft-delete, pagination, and tenant isolation."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from compliance_api.core.clock import Clock, SystemClock
from compliance_api.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Generic CRUD repository. All queries are filtered by tenant_id.

    Soft-deletes: rows with `is_deleted = true` are excluded from all
    standard reads. Hard-delete is intentionally never exposed.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession, tenant_id: str, clock: Clock | None = None):
        self._session = session
        self._tenant_id = tenant_id
        self._clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _base_query(self):
        """Return a SELECT filtered by tenant_id and excluding soft-deleted rows."""
        q = select(self.model).where(self.model.tenant_id == self._tenant_id)
        if hasattr(self.model, "is_deleted"):
            q = q.where(self.model.is_deleted.is_(False))
        return q

    def _apply_filters(self, q, filters: dict[str, Any] | None):
        """Apply simple equality filters; None values are ignored."""
        if filters:
            for col_name, value in filters.items():
                if value is not None and hasattr(self.model, col_name):
                    q = q.where(getattr(self.model, col_name) == value)
        return q

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, entity_id: str) -> ModelT | None:
        result = await self._session.execute(
            self._base_query().where(self.model.id == entity_id)
        )
        return result.scalars().first()

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "created_at",
        order: str = "desc",
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[ModelT], int]:
        """Return (items, total_count) with pagination and optional column filters."""
        q = self._apply_filters(self._base_query(), filters)

        # Count
        count_q = select(func.count()).select_from(q.subquery())
        total = (await self._session.execute(count_q)).scalar_one()

        # Order + paginate
        col = getattr(self.model, order_by, None)
        if col is not None:
            q = q.order_by(col.desc() if order == "desc" else col.asc())
        q = q.offset(offset).limit(limit)

        items = (await self._session.execute(q)).scalars().all()
        return list(items), total

    async def find(
        self,
        *criteria: Any,
        filters: dict[str, Any] | None = None,
        order_by: Any = None,
    ) -> list[ModelT]:
        """Unpaginated read: all live rows matching *criteria* and *filters*."""
        q = self._apply_filters(self._base_query(), filters)
        if criteria:
            q = q.where(*criteria)
        if order_by is not None:
            q = q.order_by(order_by)
        return list((await self._session.execute(q)).scalars().all())

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, **kwargs: Any) -> ModelT:
        now = self._clock.now_utc()
        kwargs.setdefault("created_at", now)
        kwargs.setdefault("updated_at", now)
        instance = self.model(tenant_id=self._tenant_id, **kwargs)
        self._session.add(instance)
        await self._session.flush()  # populate id
        await self._session.refresh(instance)
        return instance

    async def update(self, entity_id: str, **kwargs: Any) -> ModelT | None:
        kwargs.pop("id", None)
        kwargs.pop("tenant_id", None)
        if "updated_at" not in kwargs and hasattr(self.model, "updated_at"):
            kwargs["updated_at"] = self._clock.now_utc()

        await self._session.execute(
            update(self.model)
            .where(self.model.id == entity_id)
            .where(self.model.tenant_id == self._tenant_id)
            .where(self.model.is_deleted.is_(False))
            .values(**kwargs)
        )
        await self._session.flush()
        return await self.get_by_id(entity_id)

    async def soft_delete(self, entity_id: str) -> bool:
        now = self._clock.now_utc()
        result = await self._session.execute(
            update(self.model)
            .where(self.model.id == entity_id)
            .where(self.model.tenant_id == self._tenant_id)
            .where(self.model.is_deleted.is_(False))
            .values(is_deleted=True, deleted_at=now, updated_at=now)
        )
        await self._session.flush()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    async def count(self, *criteria: Any, filters: dict[str, Any] | None = None) -> int:
        q = self._apply_filters(self._base_query(), filters)
        if criteria:
            q = q.where(*criteria)
        result = await self._session.execute(select(func.count()).select_from(q.subquery()))
        return result.scalar_one()

    async def count_by(
        self, column: str, *criteria: Any, filters: dict[str, Any] | None = None
    ) -> dict[Any, int]:
        """Return ``{value: row_count}`` grouped on *column*."""
        q = self._apply_filters(self._base_query(), filters)
        if criteria:
            q = q.where(*criteria)
        sub = q.subquery()
        grouped = select(sub.c[column], func.count()).group_by(sub.c[column])
        rows = (await self._session.execute(grouped)).all()
        return {value: count for value, count in rows}
