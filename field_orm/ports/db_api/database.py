"""DB-API adapter implementation for the core database port."""

from __future__ import annotations

import contextlib
import logging
from typing import Any, Mapping, Optional

from ...core.errors import QueryExecutionError, TransactionError
from ...core.types import MaybeRow, QueryParams, RowMapping, Rows
from .dialects import Dialect

logger = logging.getLogger(__name__)


class Database:
    """Thin DB-API wrapper that normalizes execute, row mapping, and errors."""

    def __init__(self, conn: Any, dialect: Dialect):
        """Create database adapter.

        Args:
            conn: DB-API connection object.
            dialect: Concrete SQL dialect instance.
        """

        self.conn: Any | None = conn
        self.dialect = dialect
        self._closed = False
        self._in_transaction = False

    def _require_open_connection(self) -> Any:
        if self._closed or self.conn is None:
            raise QueryExecutionError("connection is closed")
        return self.conn

    def _should_begin_sqlite_transaction(self, conn: Any) -> bool:
        if getattr(self.dialect, "name", "").lower() != "sqlite":
            return False
        if getattr(conn, "isolation_level", "") is not None:
            return False
        return not bool(getattr(conn, "in_transaction", False))

    def in_transaction(self) -> bool:
        """Return whether `begin()` was called without commit/rollback."""

        return self._in_transaction

    def begin(self) -> None:
        """Start an explicit transaction."""

        conn = self._require_open_connection()
        if self._in_transaction:
            raise TransactionError("Transaction already started.")
        if self._should_begin_sqlite_transaction(conn):
            conn.execute("BEGIN")
        self._in_transaction = True
        logger.debug("transaction started")

    def commit(self) -> None:
        """Commit the active transaction."""

        conn = self._require_open_connection()
        if not self._in_transaction:
            raise TransactionError("No active transaction to commit.")
        try:
            conn.commit()
        except Exception as exc:
            raise QueryExecutionError(
                f"DB commit error: {exc}", code=_error_code(exc)
            ) from exc
        finally:
            self._in_transaction = False
        logger.debug("transaction committed")

    def rollback(self) -> None:
        """Roll back the active transaction."""

        conn = self._require_open_connection()
        if not self._in_transaction:
            raise TransactionError("No active transaction to roll back.")
        try:
            conn.rollback()
        except Exception as exc:
            raise QueryExecutionError(
                f"DB rollback error: {exc}", code=_error_code(exc)
            ) from exc
        finally:
            self._in_transaction = False
        logger.debug("transaction rolled back")

    @contextlib.contextmanager
    def transaction(self):
        """Provide commit/rollback transaction scope."""

        self.begin()
        try:
            yield
        except BaseException:
            self.rollback()
            raise
        self.commit()

    def execute(self, sql: str, params: QueryParams = None) -> Any:
        """Execute SQL with optional parameters and return cursor.

        Raises:
            QueryExecutionError: When the driver rejects the statement.
        """

        conn = self._require_open_connection()
        logger.debug("executing: %s", sql)
        try:
            cur = conn.cursor()
            if params is None:
                cur.execute(sql)
            else:
                cur.execute(sql, params)
        except Exception as exc:
            code = _error_code(exc)
            raise QueryExecutionError(
                f"DB query execution error: {code}: {exc}", code=code
            ) from exc
        return cur

    def _row_to_mapping(self, cursor: Any, row: Any) -> RowMapping:
        """Normalize row object to mapping.

        Supports mapping rows directly and tuple/list rows via
        `cursor.description`.
        """

        if isinstance(row, Mapping):
            return row

        if isinstance(row, (tuple, list)):
            desc = getattr(cursor, "description", None)
            if not desc:
                raise TypeError(
                    "Cursor has no description; cannot map tuple rows to dict."
                )
            cols = [d[0] for d in desc]
            return dict(zip(cols, row))

        try:
            m = dict(row)
        except (TypeError, ValueError):
            m = {}
        if m:
            return m

        raise TypeError(f"Unsupported row type: {type(row)}")

    def fetchone(self, sql: str, params: QueryParams = None) -> MaybeRow:
        """Execute query and return one normalized row mapping."""

        cur = self.execute(sql, params)
        row = cur.fetchone()
        if row is None:
            return None
        return self._row_to_mapping(cur, row)

    def fetchall(self, sql: str, params: QueryParams = None) -> Rows:
        """Execute query and return all rows as normalized mappings."""

        cur = self.execute(sql, params)
        rows = cur.fetchall()
        return [self._row_to_mapping(cur, r) for r in rows]

    def row_count(self, cursor: Any) -> int:
        """Return affected row count reported by a cursor."""

        count = getattr(cursor, "rowcount", -1)
        return count if count is not None and count >= 0 else 0

    def last_insert_id(self, cursor: Any) -> str:
        """Return the generated key of the last insert as a string.

        Returns `"0"` when the driver reports no generated key.
        """

        new_id: Optional[int] = self.dialect.get_lastrowid(cursor)
        return "0" if new_id is None else str(new_id)

    def close(self) -> None:
        """Close underlying connection."""

        if self._closed:
            return
        conn = self.conn
        self._closed = True
        self.conn = None
        close = getattr(conn, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()


def _error_code(exc: BaseException) -> Any:
    """Extract a driver error code (sqlite, psycopg, and MySQL drivers)."""

    for attr in ("sqlite_errorcode", "pgcode", "errno"):
        code = getattr(exc, attr, None)
        if code is not None:
            return code
    if exc.args and isinstance(exc.args[0], int):
        return exc.args[0]
    return None
