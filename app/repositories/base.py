"""Generic async repository with pagination and multi-key sorting."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from sqlalchemy import delete, func, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.sorting import SortSpec
from app.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Generic CRUD repository.

    Every write flushes immediately so constraint violations surface inside
    the request that caused them, not at commit time.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self._session = session

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _base_query(self):
        return select(self.model)

    def _apply_filters(self, q, filters: dict[str, Any] | None):
        # Simple equality filters; unknown columns and None values are skipped
        for col_name, value in (filters or {}).items():
            if value is not None and hasattr(self.model, col_name):
                q = q.where(getattr(self.model, col_name) == value)
        return q

    def _apply_sorts(self, q, sorts: list[SortSpec] | None):
        for spec in sorted(sorts or [], key=lambda s: s.priority):
            if spec.custom:
                q = q.order_by(text(spec.to_query_string()))
                continue
            col = getattr(self.model, spec.actual_field, None)
            if col is None or not spec.is_field_valid():
                continue
            q = q.order_by(col.asc() if spec.is_asc else col.desc())
        return q

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, entity_id: Any) -> ModelT | None:
        result = await self._session.execute(
            self._base_query().where(self.model.id == entity_id)
        )
        return result.scalars().first()

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        sorts: list[SortSpec] | None = None,
        filters: dict[str, Any] | None = None,
        conditions: list | None = None,
    ) -> tuple[list[ModelT], int]:
        """Return (items, total_count). ``conditions`` are extra SQL expressions."""
        q = self._apply_filters(self._base_query(), filters)
        for condition in conditions or []:
            q = q.where(condition)

        count_q = select(func.count()).select_from(q.subquery())
        total = (await self._session.execute(count_q)).scalar_one()

        q = self._apply_sorts(q, sorts).offset(offset).limit(limit)
        items = (await self._session.execute(q)).scalars().all()
        return list(items), total

    async def exists(self, **criteria: Any) -> bool:
        q = select(func.count()).select_from(self.model)
        for col_name, value in criteria.items():
            q = q.where(getattr(self.model, col_name) == value)
        return (await self._session.execute(q)).scalar_one() > 0

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, **kwargs: Any) -> ModelT:
        instance = self.model(**kwargs)
        return await self.add(instance)

    async def add(self, instance: ModelT) -> ModelT:
        self._session.add(instance)
        await self._session.flush()  # populate id
        await self._session.refresh(instance)
        return instance

    async def save(self, instance: ModelT) -> ModelT:
        await self._session.flush()
        await self._session.refresh(instance)
        return instance

    async def update(self, entity_id: Any, **kwargs: Any) -> ModelT | None:
        kwargs.pop("id", None)
        if kwargs:
            await self._session.execute(
                update(self.model).where(self.model.id == entity_id).values(**kwargs)
            )
            await self._session.flush()
        instance = await self.get_by_id(entity_id)
        if instance is not None:
            await self._session.refresh(instance)
        return instance

    async def delete(self, entity_id: Any) -> bool:
        result = await self._session.execute(
            delete(self.model).where(self.model.id == entity_id)
        )
        await self._session.flush()
        return result.rowcount > 0
