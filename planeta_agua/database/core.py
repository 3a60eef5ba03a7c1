# planeta_agua/database/core.py
"""
Record Store abstraction.

Handlers never talk to a concrete database client. They ask a `RecordStore`
for a per-table `Repository` and use its filter/insert/update/delete calls.
Adapters translate those calls to a backing service and raise `StoreError`
for every failure reported by that service.

Filters are plain mappings of column -> value. A list/tuple/set value means
"column is one of these values"; anything else means equality.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional

# Postgres SQLSTATE for unique_violation; every adapter reports it this way.
UNIQUE_VIOLATION = "23505"

Row = Dict[str, Any]
Filters = Mapping[str, Any]


class StoreError(Exception):
    """A failure reported by the backing store."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code
        super().__init__(self.message)

    @property
    def is_unique_violation(self) -> bool:
        return self.code == UNIQUE_VIOLATION


def parse_columns(columns: str) -> Optional[List[str]]:
    """Turn a select list like "id, name" into column names (None means all)."""
    if not columns or columns.strip() == "*":
        return None
    return [c.strip() for c in columns.split(",") if c.strip()]


def is_multi_value(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


class Repository(ABC):
    """Operations on a single table."""

    name: str

    @abstractmethod
    async def find(
        self,
        filters: Optional[Filters] = None,
        columns: str = "*",
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Row]:
        ...

    async def find_one(self, filters: Filters, columns: str = "*") -> Optional[Row]:
        """Return the first matching row, or None when nothing matches."""
        rows = await self.find(filters, columns=columns)
        return rows[0] if rows else None

    async def insert(self, row: Row) -> Row:
        rows = await self.insert_many([row])
        if not rows:
            raise StoreError(f"Insert into '{self.name}' returned no row")
        return rows[0]

    @abstractmethod
    async def insert_many(self, rows: Iterable[Row]) -> List[Row]:
        ...

    @abstractmethod
    async def update(self, filters: Filters, patch: Row) -> List[Row]:
        """Apply `patch` to every matching row and return the updated rows."""

    @abstractmethod
    async def delete(self, filters: Filters) -> None:
        ...


class RecordStore(ABC):
    """A collection of tables reached through one backing service."""

    async def connect(self) -> None:
        """Open connections or prepare schema. Called once at startup."""

    async def close(self) -> None:
        """Release connections. Called once at shutdown."""

    @abstractmethod
    def table(self, name: str) -> Repository:
        ...
