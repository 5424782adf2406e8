"""PostgREST-backed implementation of the DatabaseBackend port."""

import logging
from collections.abc import Mapping
from typing import Any

from portal_sync.adapters.supabase.constants import REST_PATH, STORAGE_PATH
from portal_sync.adapters.supabase.http_client import SupabaseHttpClient
from portal_sync.domain.ports.database_backend import DatabaseBackend, Row

logger = logging.getLogger(__name__)

RETURN_REPRESENTATION = "return=representation"


def _filter_value(value: Any) -> str:
    """Render an equality filter in PostgREST syntax."""
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


def build_query(
    columns: str | None = None,
    filters: Mapping[str, Any] | None = None,
    order_by: str | None = None,
    ascending: bool = True,
    limit: int | None = None,
) -> dict[str, str]:
    """Build PostgREST query parameters."""
    params: dict[str, str] = {}
    if columns is not None:
        params["select"] = "".join(columns.split())
    for column, value in (filters or {}).items():
        params[column] = _filter_value(value)
    if order_by:
        params["order"] = f"{order_by}.{'asc' if ascending else 'desc'}"
    if limit is not None:
        params["limit"] = str(limit)
    return params


def _as_rows(body: Any) -> list[Row]:
    if isinstance(body, list):
        return [row for row in body if isinstance(row, dict)]
    if isinstance(body, dict):
        return [body]
    return []


class SupabaseDatabase(DatabaseBackend):
    """Tables via PostgREST, files via Supabase Storage."""

    def __init__(self, client: SupabaseHttpClient) -> None:
        self._client = client

    @staticmethod
    def _table_path(table: str) -> str:
        return f"{REST_PATH}/{table}"

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        ascending: bool = True,
    ) -> list[Row]:
        _, body = await self._client.request(
            "GET",
            self._table_path(table),
            params=build_query(columns, filters, order_by, ascending),
        )
        return _as_rows(body)

    async def select_one(
        self, table: str, columns: str = "*", filters: Mapping[str, Any] | None = None
    ) -> Row | None:
        _, body = await self._client.request(
            "GET", self._table_path(table), params=build_query(columns, filters, limit=1)
        )
        rows = _as_rows(body)
        return rows[0] if rows else None

    async def insert(self, table: str, rows: Row | list[Row]) -> list[Row]:
        _, body = await self._client.request(
            "POST",
            self._table_path(table),
            json=rows,
            headers={"Prefer": RETURN_REPRESENTATION},
        )
        return _as_rows(body)

    async def update(self, table: str, values: Row, filters: Mapping[str, Any]) -> list[Row]:
        if not filters:
            raise ValueError("update requires at least one filter")
        _, body = await self._client.request(
            "PATCH",
            self._table_path(table),
            params=build_query(filters=filters),
            json=values,
            headers={"Prefer": RETURN_REPRESENTATION},
        )
        return _as_rows(body)

    async def upsert(self, table: str, rows: Row | list[Row]) -> list[Row]:
        _, body = await self._client.request(
            "POST",
            self._table_path(table),
            json=rows,
            headers={"Prefer": f"resolution=merge-duplicates,{RETURN_REPRESENTATION}"},
        )
        return _as_rows(body)

    async def delete(self, table: str, filters: Mapping[str, Any]) -> None:
        if not filters:
            raise ValueError("delete requires at least one filter")
        await self._client.request(
            "DELETE", self._table_path(table), params=build_query(filters=filters)
        )

    async def upload_file(
        self, bucket: str, path: str, content: bytes, content_type: str = "application/octet-stream"
    ) -> None:
        logger.debug(f"Uploading {len(content)} bytes to {bucket}/{path}")
        await self._client.request(
            "POST",
            f"{STORAGE_PATH}/object/{bucket}/{path}",
            data=content,
            headers={"Content-Type": content_type, "x-upsert": "true"},
        )

    def public_url(self, bucket: str, path: str) -> str:
        return self._client.url(f"{STORAGE_PATH}/object/public/{bucket}/{path}")
