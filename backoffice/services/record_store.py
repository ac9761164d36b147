"""
Record store: async CRUD over one ORM model, returning canonical Pydantic shapes.

This is the only place ORM rows are converted to the shapes the rest of the
service works with. Every call runs in its own short-lived session, so
independent calls can be awaited concurrently.
"""
from datetime import date
from typing import Any, Dict, Generic, Iterable, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import select, update, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.orm import selectinload

from backoffice.exceptions import ExternalFetchFailure, RecordNotFound

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class RecordStore(Generic[SchemaT]):

    def __init__(
        self,
        session_factory: async_sessionmaker,
        model: Type[Any],
        schema: Type[SchemaT],
        eager: Sequence[str] = (),
    ):
        self._session_factory = session_factory
        self.model = model
        self.schema = schema
        self._eager = tuple(eager)
        self.entity = model.__name__

    def _to_schema(self, row) -> SchemaT:
        return self.schema.model_validate(row)

    def _select(self):
        query = select(self.model)
        for attr in self._eager:
            query = query.options(selectinload(getattr(self.model, attr)))
        return query

    async def _load(self, session, record_id: int):
        result = await session.execute(
            self._select()
            .where(self.model.id == record_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list(
        self,
        order_by: Iterable[str] = ("id",),
        date_field: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        **filters: Any,
    ) -> List[SchemaT]:
        """
        List records matching equality filters (None values are ignored),
        optionally bounded by an inclusive date range on `date_field`.
        """
        query = self._select()
        for field, value in filters.items():
            if value is not None:
                query = query.where(getattr(self.model, field) == value)
        if date_field:
            column = getattr(self.model, date_field)
            if start:
                query = query.where(column >= start)
            if end:
                query = query.where(column <= end)
        query = query.order_by(*[getattr(self.model, f) for f in order_by])

        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                return [self._to_schema(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise ExternalFetchFailure(f"Could not read {self.entity} records: {e}") from e

    async def find(self, record_id: int) -> Optional[SchemaT]:
        try:
            async with self._session_factory() as session:
                row = await self._load(session, record_id)
                return self._to_schema(row) if row else None
        except SQLAlchemyError as e:
            raise ExternalFetchFailure(f"Could not read {self.entity} {record_id}: {e}") from e

    async def get(self, record_id: int) -> SchemaT:
        record = await self.find(record_id)
        if record is None:
            raise RecordNotFound(self.entity, record_id)
        return record

    async def create(self, data: Dict[str, Any]) -> SchemaT:
        async with self._session_factory() as session:
            row = self.model(**data)
            session.add(row)
            await session.flush()
            record = self._to_schema(await self._load(session, row.id))
            await session.commit()
            return record

    async def update(self, record_id: int, patch: Dict[str, Any]) -> SchemaT:
        async with self._session_factory() as session:
            if patch:
                result = await session.execute(
                    update(self.model).where(self.model.id == record_id).values(**patch)
                )
                if result.rowcount == 0:
                    raise RecordNotFound(self.entity, record_id)
            row = await self._load(session, record_id)
            if row is None:
                raise RecordNotFound(self.entity, record_id)
            record = self._to_schema(row)
            await session.commit()
            return record

    async def delete(self, record_id: int) -> None:
        async with self._session_factory() as session:
            result = await session.execute(
                delete(self.model).where(self.model.id == record_id)
            )
            if result.rowcount == 0:
                raise RecordNotFound(self.entity, record_id)
            await session.commit()

    async def delete_where(self, **filters: Any) -> int:
        """Delete every record matching the equality filters; returns the row count"""
        if not filters:
            raise ValueError("delete_where requires at least one filter")
        query = delete(self.model)
        for field, value in filters.items():
            query = query.where(getattr(self.model, field) == value)
        async with self._session_factory() as session:
            result = await session.execute(query)
            await session.commit()
            return result.rowcount
