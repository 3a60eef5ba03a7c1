# planeta_agua/database/supabase_store.py

import logging
from typing import Iterable, List, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from .core import Filters, RecordStore, Repository, Row, StoreError, is_multi_value

logger = logging.getLogger(__name__)


def _to_store_error(exc: APIError) -> StoreError:
    return StoreError(exc.message or str(exc), code=exc.code)


class SupabaseTable(Repository):
    def __init__(self, store: "SupabaseStore", name: str):
        self.store = store
        self.name = name

    def _apply_filters(self, query, filters: Optional[Filters]):
        for column, value in (filters or {}).items():
            if is_multi_value(value):
                query = query.in_(column, list(value))
            else:
                query = query.eq(column, value)
        return query

    async def _execute(self, query) -> List[Row]:
        # Timeouts and connection failures surface from httpx, not as APIError.
        try:
            response = await query.execute()
        except APIError as e:
            raise _to_store_error(e) from e
        except httpx.HTTPError as e:
            logger.error(f"Supabase request on table '{self.name}' failed: {e!r}")
            raise StoreError(str(e) or type(e).__name__) from e
        return response.data or []

    async def find(self, filters=None, columns="*", order_by=None, descending=False) -> List[Row]:
        query = self._apply_filters(self.store.client.table(self.name).select(columns), filters)
        if order_by:
            query = query.order(order_by, desc=descending)
        return await self._execute(query)

    async def insert_many(self, rows: Iterable[Row]) -> List[Row]:
        return await self._execute(self.store.client.table(self.name).insert(list(rows)))

    async def update(self, filters: Filters, patch: Row) -> List[Row]:
        return await self._execute(self._apply_filters(self.store.client.table(self.name).update(patch), filters))

    async def delete(self, filters: Filters) -> None:
        await self._execute(self._apply_filters(self.store.client.table(self.name).delete(), filters))


class SupabaseStore(RecordStore):
    """Record store backed by a Supabase project (PostgREST)."""

    def __init__(self, url: str, key: str, client: Optional[AsyncClient] = None):
        self.url = url
        self.key = key
        self._client = client

    async def connect(self) -> None:
        if self._client is None:
            self._client = await acreate_client(self.url, self.key)
            logger.info("Supabase client created")

    @property
    def client(self) -> AsyncClient:
        if self._client is None:
            raise StoreError("Supabase client is not connected")
        return self._client

    def table(self, name: str) -> Repository:
        return SupabaseTable(self, name)
