"""Schema accessor: the only path by which the report engine reads the store.

The engine depends on the small ``SchemaAccessor`` protocol rather than on a
session directly, so a host platform can hand in its own query executor.
``SqlAlchemyAccessor`` is the default adapter over a SQLAlchemy ``Session`` or
``Connection``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.orm import Session
from sqlalchemy.sql import Executable

type Row = Mapping[str, Any]


class SchemaAccessor(Protocol):
    def execute_query(
        self,
        query: str | Executable,
        parameters: Mapping[str, Any] | None = None,
    ) -> Sequence[Row]:
        """Execute a read query and return rows with named-field access."""
        ...


class SqlAlchemyAccessor:
    """Execute queries on a SQLAlchemy ``Session`` or ``Connection``.

    Plain strings are wrapped in :func:`sqlalchemy.text`; named ``:param``
    placeholders are bound from ``parameters``.
    """

    def __init__(self, bind: Session | Connection) -> None:
        self._bind = bind

    def execute_query(
        self,
        query: str | Executable,
        parameters: Mapping[str, Any] | None = None,
    ) -> Sequence[Row]:
        stmt = text(query) if isinstance(query, str) else query
        result = self._bind.execute(stmt, dict(parameters or {}))
        return result.mappings().all()


__all__ = [
    "Row",
    "SchemaAccessor",
    "SqlAlchemyAccessor",
]
