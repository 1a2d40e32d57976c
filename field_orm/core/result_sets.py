"""Result sets: one statement bound to a model and a database.

A result set starts unresolved. Executing it (`first`, `all`, `exec`) moves it
to resolved and stores the outcome; a resolved result set refuses to execute
again until `unresolve()` is called, and results can only be read once it is
resolved.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, Iterable, List, Mapping, Optional, TypeVar

from .contracts import DatabasePort
from .criteria import Criteria
from .errors import (
    DeleteError,
    FieldNotFoundError,
    InsertError,
    NotFoundError,
    QueryExecutionError,
    ResolvedError,
    UnresolvedError,
    UpdateError,
)
from .statements import Delete, Insert, QueryFactory, Select, Statement, Update, apply_criteria
from .types import QueryParams, RowMapping, Rows

if TYPE_CHECKING:
    from .orm import OrmModel

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=Statement)


class _Resolution:
    """Resolved flag plus the stored outcome."""

    def __init__(self) -> None:
        self.resolved = False
        self.result: Any = None

    def require_unresolved(self) -> None:
        if self.resolved:
            raise ResolvedError("Try to execute resolved result set.")

    def require_resolved(self, what: str) -> None:
        if not self.resolved:
            raise UnresolvedError(f"Try to get {what} on unresolved result set.")

    def resolve(self, result: Any) -> None:
        self.result = result
        self.resolved = True

    def reset(self) -> None:
        self.result = None
        self.resolved = False


class ResultSet(Generic[S]):
    """Shared state and statement delegation for every result set kind."""

    def __init__(self, model: "OrmModel", db: DatabasePort, statement: S):
        self.model = model
        self.db = db
        self.statement = statement
        self._resolution = _Resolution()

    def is_resolved(self) -> bool:
        return self._resolution.resolved

    def unresolve(self):
        """Reset to unresolved so the result set can be executed again."""

        self._resolution.reset()
        return self

    def where(self, cond: str, binds: Optional[Mapping[str, Any]] = None):
        self.statement.where(cond, binds)
        return self

    def or_where(self, cond: str, binds: Optional[Mapping[str, Any]] = None):
        self.statement.or_where(cond, binds)
        return self

    def bind_value(self, name: str, value: Any):
        self.statement.bind_value(name, value)
        return self

    def bind_values(self, values: Mapping[str, Any]):
        self.statement.bind_values(values)
        return self

    def filter(self, *criteria: Criteria):
        """Fold criteria into the WHERE clause."""

        apply_criteria(self.statement, criteria)
        return self

    def get_statement(self) -> S:
        return self.statement

    def get_statement_text(self) -> str:
        return self.statement.get_statement_text()

    def get_bound_values(self) -> QueryParams:
        return self.statement.get_bound_values()


class SelectResultSet(ResultSet[Select]):
    """Reads rows and hydrates them into models."""

    def cols(self, columns: Iterable[str]) -> "SelectResultSet":
        self.statement.cols(columns)
        return self

    def order_by(self, col: str, desc: bool = False) -> "SelectResultSet":
        self.statement.order_by(col, desc)
        return self

    def limit(self, limit: Optional[int]) -> "SelectResultSet":
        self.statement.limit(limit)
        return self

    def offset(self, offset: Optional[int]) -> "SelectResultSet":
        self.statement.offset(offset)
        return self

    def fetch_raw(self, sql: str, binds: QueryParams = None) -> RowMapping:
        row = self.db.fetchone(sql, binds)
        if row is None:
            raise NotFoundError("Database record not found.")
        return row

    def fetch_all_raw(self, sql: str, binds: QueryParams = None) -> Rows:
        return self.db.fetchall(sql, binds)

    def fetch_query(self, select: Select) -> RowMapping:
        compiled = select.compile()
        return self.fetch_raw(compiled.sql, compiled.params)

    def fetch_all_query(self, select: Select) -> Rows:
        compiled = select.compile()
        return self.fetch_all_raw(compiled.sql, compiled.params)

    def first(self) -> "OrmModel":
        """Execute and return the first matching model.

        Raises:
            ResolvedError: When already resolved.
            NotFoundError: When no row matches; the result set stays unresolved.
        """

        self._resolution.require_unresolved()
        model = self.model.new_from_row(self.fetch_query(self.statement))
        self._resolution.resolve([model])
        return model

    def all(self) -> List["OrmModel"]:
        """Execute and return every matching model (possibly none)."""

        self._resolution.require_unresolved()
        models = self.model.new_from_rows(self.fetch_all_query(self.statement))
        self._resolution.resolve(models)
        return models

    def result_first(self) -> "OrmModel":
        self._resolution.require_resolved("result")
        if not self._resolution.result:
            raise NotFoundError("Database record not found.")
        return self._resolution.result[0]

    def result_all(self) -> List["OrmModel"]:
        self._resolution.require_resolved("result")
        return list(self._resolution.result)


class InsertResultSet(ResultSet[Insert]):
    """Executes an insert and echoes the generated key into the model."""

    def cols(self, values: Mapping[str, Any]) -> "InsertResultSet":
        self.statement.cols(values)
        return self

    def exec_raw(self, sql: str, binds: QueryParams = None) -> str:
        try:
            cursor = self.db.execute(sql, binds)
            return self.db.last_insert_id(cursor)
        except QueryExecutionError as exc:
            raise InsertError(str(exc), code=exc.code) from exc

    def exec_query(self, insert: Insert) -> str:
        compiled = insert.compile()
        return self.exec_raw(compiled.sql, compiled.params)

    def exec(self) -> "InsertResultSet":
        """Execute the insert.

        When the model has a primary key that is autoincrement or still
        empty, the generated key is written into it. Afterwards the model
        is clean.
        """

        self._resolution.require_unresolved()
        last_id = self.exec_query(self.statement)
        self._resolution.resolve(last_id)
        self._store_generated_key(last_id)
        self.model.undirty()
        return self

    def _store_generated_key(self, last_id: str) -> None:
        if last_id in ("", "0"):
            return
        try:
            pk = self.model.get_pk()
        except FieldNotFoundError:
            logger.debug("%s has no primary key; generated key %s not stored",
                          type(self.model).__name__, last_id)
            return
        if pk.get_column().autoincrement or pk.value is None:
            pk.set_from_string(last_id)

    def last_inserted_id(self) -> str:
        self._resolution.require_resolved("last inserted id")
        return self._resolution.result


class _WriteResultSet(ResultSet[S]):
    error_class = QueryExecutionError

    def exec_raw(self, sql: str, binds: QueryParams = None) -> int:
        try:
            cursor = self.db.execute(sql, binds)
        except QueryExecutionError as exc:
            raise self.error_class(str(exc), code=exc.code) from exc
        return self.db.row_count(cursor)

    def exec_query(self, statement: S) -> int:
        compiled = statement.compile()
        return self.exec_raw(compiled.sql, compiled.params)

    def affected_rows(self) -> int:
        self._resolution.require_resolved("affected rows")
        return self._resolution.result


class UpdateResultSet(_WriteResultSet[Update]):
    """Executes an update built from dirty fields and criteria."""

    error_class = UpdateError

    def cols(self, values: Mapping[str, Any]) -> "UpdateResultSet":
        self.statement.cols(values)
        return self

    def exec(self) -> "UpdateResultSet":
        """Execute the update and mark the model clean.

        Raises:
            UpdateError: When no column is set.
        """

        self._resolution.require_unresolved()
        if not self.statement.has_cols():
            raise UpdateError("Nothing to update")
        self._resolution.resolve(self.exec_query(self.statement))
        self.model.undirty()
        return self


class DeleteResultSet(_WriteResultSet[Delete]):
    """Executes a delete and flags the model as deleted."""

    error_class = DeleteError

    def exec(self) -> "DeleteResultSet":
        self._resolution.require_unresolved()
        self._resolution.resolve(self.exec_query(self.statement))
        self.model.is_deleted = True
        return self


class ResultSetFactory:
    """Creates result sets wired to one database and query factory."""

    def __init__(self, db: DatabasePort, query_factory: QueryFactory):
        self.db = db
        self.query_factory = query_factory

    def new_select(self, model: "OrmModel") -> SelectResultSet:
        select = self.query_factory.new_select().cols(model.get_column_names())
        return SelectResultSet(model, self.db, select.from_(model.get_table_name()))

    def new_insert(self, model: "OrmModel") -> InsertResultSet:
        return InsertResultSet(model, self.db, self.query_factory.new_insert().into(model.get_table_name()))

    def new_update(self, model: "OrmModel") -> UpdateResultSet:
        return UpdateResultSet(model, self.db, self.query_factory.new_update().table(model.get_table_name()))

    def new_delete(self, model: "OrmModel") -> DeleteResultSet:
        return DeleteResultSet(model, self.db, self.query_factory.new_delete().from_(model.get_table_name()))
