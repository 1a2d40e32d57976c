"""Core port contracts used by adapters, statements, and repositories."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, List, Optional, Protocol

from .types import MaybeRow, QueryParams, RowMapping, Rows


class DialectPort(Protocol):
    """Dialect behavior required by statement compilation and DDL rendering."""

    name: str
    paramstyle: str

    def q(self, ident: str) -> str: ...

    def placeholder(self, key: str) -> str: ...

    def auto_pk_sql(self, pk_name: str) -> str: ...

    def empty_insert_sql(self, table_sql: str) -> str: ...

    def get_lastrowid(self, cursor: Any) -> Optional[int]: ...


class DatabasePort(Protocol):
    """Driver adapter behavior required by result sets and repositories."""

    dialect: DialectPort

    def transaction(self) -> AbstractContextManager[None]: ...

    def execute(self, sql: str, params: QueryParams = None) -> Any: ...

    def fetchone(self, sql: str, params: QueryParams = None) -> MaybeRow: ...

    def fetchall(self, sql: str, params: QueryParams = None) -> List[RowMapping]: ...

    def row_count(self, cursor: Any) -> int: ...

    def last_insert_id(self, cursor: Any) -> str: ...

    def begin(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def in_transaction(self) -> bool: ...


class CacheStoragePort(Protocol):
    """Key/value storage used by `CacheRepository`."""

    def exists(self, key: str) -> bool: ...

    def load(self, key: str) -> Any: ...

    def save(self, key: str, value: Rows | RowMapping) -> bool: ...

    def invalidate(self, key: str) -> bool: ...
