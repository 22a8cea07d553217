# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Entity store for the sports program.

SqlAlchemyRepository gives every entity type the same small surface
(create, find_by_id, find_one, find_all, count, update, destroy).
Repositories only flush; SportsDataStore owns the session and decides
when a unit of work commits or rolls back.

Example:
    async with get_session() as session:
        store = SportsDataStore(session)
        async with store.transaction():
            enrollment = await store.enrollments.find_by_id(eid, for_update=True)
            await store.enrollments.update(eid, total_sessions=enrollment.total_sessions + 1)
"""

import logging
import math
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Generic, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import (
    AcademicYear,
    Base,
    Sport,
    SportsAchievement,
    SportsEnrollment,
    Team,
    Tournament,
)
from src.infrastructure.database.models.base import new_id
from src.models.common import PaginationMeta
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100


@dataclass(frozen=True)
class Pagination:
    """Offset pagination window.

    Attributes:
        page: 1-based page number.
        limit: Page size after clamping.
    """

    page: int
    limit: int

    @classmethod
    def from_params(
        cls,
        page: int | None = None,
        limit: int | None = None,
        *,
        default_limit: int = DEFAULT_PAGE_LIMIT,
        max_limit: int = MAX_PAGE_LIMIT,
    ) -> "Pagination":
        """Build a window from raw request parameters.

        The limit is clamped to [1, max_limit] and the page floored at 1.

        Example:
            >>> Pagination.from_params(page=2, limit=200)
            Pagination(page=2, limit=100)
        """
        if limit is None:
            limit = default_limit
        limit = max(1, min(limit, max_limit))
        page = max(1, page or 1)
        return cls(page=page, limit=limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def meta(self, total: int) -> PaginationMeta:
        """Build response metadata for a result set of ``total`` rows."""
        return PaginationMeta(
            page=self.page,
            limit=self.limit,
            total=total,
            total_pages=math.ceil(total / self.limit),
        )


class SqlAlchemyRepository(Generic[ModelT]):
    """Generic async repository for one mapped model.

    Keyword filters are equality tests on column attributes; positional
    criteria are arbitrary SQLAlchemy expressions.

    Attributes:
        session: Async session shared with the owning store.
        model: Mapped model class.
    """

    def __init__(self, session: AsyncSession, model: type[ModelT]) -> None:
        self.session = session
        self.model = model

    def _where(self, criteria: Sequence[Any], filters: dict[str, Any]) -> list[Any]:
        clauses = list(criteria)
        for name, value in filters.items():
            column = getattr(self.model, name)
            clauses.append(column.is_(None) if value is None else column == value)
        return clauses

    async def create(self, **attrs: Any) -> ModelT:
        """Insert a new row and flush it.

        Args:
            **attrs: Column values.

        Returns:
            The persisted entity with its generated id.
        """
        now = utc_now()
        attrs.setdefault("id", new_id())
        attrs.setdefault("created_at", now)
        attrs.setdefault("updated_at", now)
        entity = self.model(**attrs)
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def find_by_id(self, entity_id: str, for_update: bool = False) -> ModelT | None:
        """Load one row by primary key.

        Args:
            entity_id: Primary key.
            for_update: Lock the row (SELECT ... FOR UPDATE) and refresh
                any copy already in the identity map.

        Returns:
            The entity or None.
        """
        if for_update:
            return await self.session.get(
                self.model,
                entity_id,
                with_for_update=True,
                populate_existing=True,
            )
        return await self.session.get(self.model, entity_id)

    async def find_one(self, *criteria: Any, **filters: Any) -> ModelT | None:
        query = select(self.model).where(*self._where(criteria, filters)).limit(1)
        result = await self.session.execute(query)
        return result.scalars().first()

    async def find_all(
        self,
        *criteria: Any,
        order_by: Any = None,
        limit: int | None = None,
        offset: int | None = None,
        **filters: Any,
    ) -> list[ModelT]:
        """Load every row matching the criteria.

        Args:
            *criteria: SQLAlchemy filter expressions.
            order_by: Column expression or list of them.
            limit: Maximum rows to return.
            offset: Rows to skip.
            **filters: Column equality filters.

        Returns:
            Matching entities.
        """
        query = select(self.model).where(*self._where(criteria, filters))
        if order_by is not None:
            if isinstance(order_by, (list, tuple)):
                query = query.order_by(*order_by)
            else:
                query = query.order_by(order_by)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count(self, *criteria: Any, **filters: Any) -> int:
        query = (
            select(func.count())
            .select_from(self.model)
            .where(*self._where(criteria, filters))
        )
        result = await self.session.execute(query)
        return int(result.scalar_one())

    async def paginate(
        self,
        pagination: Pagination,
        *criteria: Any,
        order_by: Any = None,
        **filters: Any,
    ) -> tuple[list[ModelT], PaginationMeta]:
        """Load one page of rows plus the metadata for the whole result."""
        total = await self.count(*criteria, **filters)
        items = await self.find_all(
            *criteria,
            order_by=order_by,
            limit=pagination.limit,
            offset=pagination.offset,
            **filters,
        )
        return items, pagination.meta(total)

    async def update(self, entity_id: str, **partial: Any) -> ModelT | None:
        """Apply a partial update and flush it.

        List values are copied so JSON columns always see a new object.

        Returns:
            The updated entity, or None when no row has that id.
        """
        entity = await self.find_by_id(entity_id)
        if entity is None:
            return None
        for name, value in partial.items():
            if isinstance(value, list):
                value = list(value)
            setattr(entity, name, value)
        entity.updated_at = utc_now()
        await self.session.flush()
        return entity

    async def destroy(self, entity_id: str) -> bool:
        """Delete a row by primary key.

        Returns:
            True if a row was deleted.
        """
        entity = await self.find_by_id(entity_id)
        if entity is None:
            return False
        await self.session.delete(entity)
        await self.session.flush()
        return True


class SportsDataStore:
    """Unit of work over one session with a repository per entity type.

    Attributes:
        session: The async session all repositories share.
        sports: Sport repository.
        teams: Team repository.
        enrollments: SportsEnrollment repository.
        tournaments: Tournament repository.
        achievements: SportsAchievement repository.
        academic_years: AcademicYear repository (read only here).
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.sports = SqlAlchemyRepository(session, Sport)
        self.teams = SqlAlchemyRepository(session, Team)
        self.enrollments = SqlAlchemyRepository(session, SportsEnrollment)
        self.tournaments = SqlAlchemyRepository(session, Tournament)
        self.achievements = SqlAlchemyRepository(session, SportsAchievement)
        self.academic_years = SqlAlchemyRepository(session, AcademicYear)
        self._depth = 0

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SportsDataStore"]:
        """Run a block as one atomic unit of work.

        The outermost block commits on success and rolls back on any
        exception. Nested blocks join the outer one.
        """
        if self._depth:
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            return

        self._depth = 1
        try:
            yield self
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            logger.debug("Rolled back sports unit of work")
            raise
        finally:
            self._depth = 0
