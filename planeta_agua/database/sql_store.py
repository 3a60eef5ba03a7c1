# planeta_agua/database/sql_store.py

import logging
from typing import Any, Iterable, List, Optional

from sqlalchemy import Integer, Table, create_engine, delete, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from .core import (
    UNIQUE_VIOLATION, Filters, RecordStore, Repository, Row, StoreError,
    is_multi_value, parse_columns,
)
from .models import metadata

logger = logging.getLogger(__name__)


def _to_store_error(exc: SQLAlchemyError) -> StoreError:
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code is None and isinstance(exc, IntegrityError) and "unique" in str(orig).lower():
        code = UNIQUE_VIOLATION
    return StoreError(str(orig or exc), code=code)


class SqlTable(Repository):
    def __init__(self, engine: Engine, table: Table):
        self.engine = engine
        self.table = table
        self.name = table.name

    def _column(self, name: str):
        try:
            return self.table.c[name]
        except KeyError:
            raise StoreError(f"column {self.name}.{name} does not exist", code="42703")

    @staticmethod
    def _coerce(column, value: Any) -> Any:
        # Token subjects and path params arrive as strings.
        if isinstance(column.type, Integer) and isinstance(value, str) and value.strip().lstrip("-").isdigit():
            return int(value)
        return value

    def _where(self, stmt, filters: Optional[Filters]):
        for name, value in (filters or {}).items():
            column = self._column(name)
            if is_multi_value(value):
                stmt = stmt.where(column.in_([self._coerce(column, v) for v in value]))
            else:
                stmt = stmt.where(column == self._coerce(column, value))
        return stmt

    def _values(self, row: Row) -> Row:
        return {name: self._coerce(self._column(name), value) for name, value in row.items()}

    def _find(self, filters, columns, order_by, descending) -> List[Row]:
        names = parse_columns(columns)
        selected = [self._column(n) for n in names] if names else [self.table]
        stmt = self._where(select(*selected), filters)
        if order_by:
            column = self._column(order_by)
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        with self.engine.connect() as conn:
            return [dict(r) for r in conn.execute(stmt).mappings().all()]

    def _insert_many(self, rows: List[Row]) -> List[Row]:
        created = []
        # One transaction: a failing row leaves none of the batch behind.
        with self.engine.begin() as conn:
            for row in rows:
                result = conn.execute(insert(self.table).values(**self._values(row)).returning(*self.table.c))
                created.append(dict(result.mappings().one()))
        return created

    def _update(self, filters, patch) -> List[Row]:
        stmt = self._where(update(self.table), filters).values(**self._values(patch)).returning(*self.table.c)
        with self.engine.begin() as conn:
            return [dict(r) for r in conn.execute(stmt).mappings().all()]

    def _delete(self, filters) -> None:
        with self.engine.begin() as conn:
            conn.execute(self._where(delete(self.table), filters))

    async def _run(self, func, *args):
        try:
            return await run_in_threadpool(func, *args)
        except SQLAlchemyError as e:
            logger.error(f"SQL error on table '{self.name}': {e}")
            raise _to_store_error(e) from e

    async def find(self, filters=None, columns="*", order_by=None, descending=False) -> List[Row]:
        return await self._run(self._find, filters, columns, order_by, descending)

    async def insert_many(self, rows: Iterable[Row]) -> List[Row]:
        return await self._run(self._insert_many, list(rows))

    async def update(self, filters: Filters, patch: Row) -> List[Row]:
        return await self._run(self._update, filters, patch)

    async def delete(self, filters: Filters) -> None:
        await self._run(self._delete, filters)


class SqlStore(RecordStore):
    """Record store backed by a SQL database through SQLAlchemy (local development)."""

    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None):
        if engine is None:
            if not database_url:
                raise StoreError("A database URL or engine is required")
            if database_url.startswith("sqlite"):
                engine = create_engine(database_url, connect_args={"check_same_thread": False})
            else:
                engine = create_engine(database_url, pool_pre_ping=True, pool_recycle=300)
        self.engine = engine

    async def connect(self) -> None:
        await run_in_threadpool(metadata.create_all, self.engine)
        logger.info(f"SQL store ready ({self.engine.dialect.name})")

    async def close(self) -> None:
        await run_in_threadpool(self.engine.dispose)

    def table(self, name: str) -> Repository:
        try:
            return SqlTable(self.engine, metadata.tables[name])
        except KeyError:
            raise StoreError(f"relation '{name}' does not exist", code="42P01")
