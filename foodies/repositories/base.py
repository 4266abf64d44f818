"""Generic async repository with filtering, pagination, and guarded updates."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from foodies.db.base import Base
from foodies.domain.mixins import utcnow

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Generic CRUD repository.

    Filters are simple column matches: a scalar compares with ``==``, a list,
    tuple or set compares with ``IN``. ``None`` values are ignored.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self._session = session

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _base_query(self):
        # Guarded bulk UPDATEs bypass the identity map; always reload row state.
        return select(self.model).execution_options(populate_existing=True)

    def _apply_filters(self, q, filters: dict[str, Any] | None):
        if not filters:
            return q
        for col_name, value in filters.items():
            if value is None or not hasattr(self.model, col_name):
                continue
            col = getattr(self.model, col_name)
            if isinstance(value, (list, tuple, set, frozenset)):
                q = q.where(col.in_([getattr(v, "value", v) for v in value]))
            else:
                q = q.where(col == getattr(value, "value", value))
        return q

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, entity_id: str) -> ModelT | None:
        result = await self._session.execute(
            self._base_query().where(self.model.id == entity_id)
        )
        return result.scalars().first()

    async def find_one(self, **filters: Any) -> ModelT | None:
        q = self._apply_filters(self._base_query(), filters)
        result = await self._session.execute(q.limit(1))
        return result.scalars().first()

    async def find_all(
        self,
        *,
        order_by: tuple[str, ...] = ("created_at",),
        descending: bool = True,
        **filters: Any,
    ) -> list[ModelT]:
        """Return every matching row (no pagination)."""
        q = self._apply_filters(self._base_query(), filters)
        for name in order_by:
            col = getattr(self.model, name, None)
            if col is not None:
                q = q.order_by(col.desc() if descending else col.asc())
        items = (await self._session.execute(q)).scalars().all()
        return list(items)

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

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, **kwargs: Any) -> ModelT:
        instance = self.model(**kwargs)
        self._session.add(instance)
        await self._session.flush()  # populate id
        await self._session.refresh(instance)
        return instance

    async def update(self, entity_id: str, **kwargs: Any) -> ModelT | None:
        kwargs.pop("id", None)
        await self.update_where(entity_id, **kwargs)
        return await self.get_by_id(entity_id)

    async def update_where(
        self, entity_id: str, *, expected: dict[str, Any] | None = None, **kwargs: Any
    ) -> int:
        """UPDATE one row, optionally only while ``expected`` columns still match.

        Returns the number of rows changed, so callers can detect a lost race.
        """
        if "updated_at" not in kwargs and hasattr(self.model, "updated_at"):
            kwargs["updated_at"] = utcnow()

        stmt = update(self.model).where(self.model.id == entity_id)
        for col_name, value in (expected or {}).items():
            stmt = stmt.where(getattr(self.model, col_name) == value)

        result = await self._session.execute(
            stmt.values(**kwargs).execution_options(synchronize_session=False)
        )
        await self._session.flush()
        return result.rowcount
