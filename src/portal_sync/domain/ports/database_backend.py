"""Managed database backend port."""

from collections.abc import Mapping
from typing import Any, Protocol

Row = dict[str, Any]


class DatabaseBackend(Protocol):
    """Port for row-level access to named collections.

    Filters are equality filters on columns. Failures are raised as BackendError.
    """

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        ascending: bool = True,
    ) -> list[Row]:
        """Return all rows matching `filters`."""
        ...

    async def select_one(
        self, table: str, columns: str = "*", filters: Mapping[str, Any] | None = None
    ) -> Row | None:
        """Return the single row matching `filters`, or None."""
        ...

    async def insert(self, table: str, rows: Row | list[Row]) -> list[Row]:
        """Insert rows and return them as stored."""
        ...

    async def update(self, table: str, values: Row, filters: Mapping[str, Any]) -> list[Row]:
        """Update matching rows and return them."""
        ...

    async def upsert(self, table: str, rows: Row | list[Row]) -> list[Row]:
        """Insert or replace rows by primary key."""
        ...

    async def delete(self, table: str, filters: Mapping[str, Any]) -> None:
        """Delete matching rows."""
        ...

    async def upload_file(
        self, bucket: str, path: str, content: bytes, content_type: str = "application/octet-stream"
    ) -> None:
        """Store a file in an object storage bucket."""
        ...

    def public_url(self, bucket: str, path: str) -> str:
        """Public URL of a stored object."""
        ...
