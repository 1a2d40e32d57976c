"""Repository layer: statement-level access to one model's table."""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Dict, List

from .contracts import CacheStoragePort, DatabasePort
from .criteria import Criteria
from .errors import DeleteError, InsertError, NotFoundError, QueryExecutionError, UpdateError
from .models import Model
from .schema import TableSchema
from .statements import Delete, Insert, QueryFactory, Select, Update, apply_criteria
from .types import QueryParams, RowMapping, Rows

logger = logging.getLogger(__name__)

_READ_KINDS = ("one", "all")


class RawRepository:
    """Raw SQL execution and transaction control over a database adapter."""

    def __init__(self, db: DatabasePort):
        self.db = db

    def execute(self, sql: str, binds: QueryParams = None) -> Any:
        return self.db.execute(sql, binds)

    def fetch_one_raw(self, sql: str, binds: QueryParams = None) -> RowMapping:
        """Return the first row.

        Raises:
            NotFoundError: When the query returns no row.
        """

        row = self.db.fetchone(sql, binds)
        if row is None:
            raise NotFoundError("Database record not found.")
        return row

    def fetch_all_raw(self, sql: str, binds: QueryParams = None) -> Rows:
        return self.db.fetchall(sql, binds)

    def execute_insert_raw(self, sql: str, binds: QueryParams = None) -> str:
        """Run an insert and return the generated key as a string."""

        try:
            cursor = self.db.execute(sql, binds)
        except QueryExecutionError as exc:
            raise InsertError(f"Database insert error: {exc}", code=exc.code) from exc
        return self.db.last_insert_id(cursor)

    def execute_update_raw(self, sql: str, binds: QueryParams = None) -> int:
        try:
            cursor = self.db.execute(sql, binds)
        except QueryExecutionError as exc:
            raise UpdateError(f"Database update error: {exc}", code=exc.code) from exc
        return self.db.row_count(cursor)

    def execute_delete_raw(self, sql: str, binds: QueryParams = None) -> int:
        try:
            cursor = self.db.execute(sql, binds)
        except QueryExecutionError as exc:
            raise DeleteError(f"Database delete error: {exc}", code=exc.code) from exc
        return self.db.row_count(cursor)

    def begin_transaction(self) -> None:
        self.db.begin()

    def commit_transaction(self) -> None:
        self.db.commit()

    def rollback_transaction(self) -> None:
        self.db.rollback()

    def in_transaction(self) -> bool:
        return self.db.in_transaction()

    def transaction(self):
        """Commit on success, roll back on error."""

        return self.db.transaction()


class Repository(RawRepository):
    """Builds and runs statements for the table of `model`."""

    def __init__(self, db: DatabasePort, query_factory: QueryFactory, model: Model):
        super().__init__(db)
        self.query_factory = query_factory
        self.model = model

    def get_model(self) -> Model:
        return self.model

    def get_query_factory(self) -> QueryFactory:
        return self.query_factory

    def get_schema(self) -> TableSchema:
        return self.model.get_schema()

    def get_table_name(self) -> str:
        return self.get_schema().name

    def get_column_names(self) -> List[str]:
        return self.model.get_column_names()

    def new_select(self, *criteria: Criteria) -> Select:
        select = self.query_factory.new_select().cols(self.get_column_names()).from_(self.get_table_name())
        apply_criteria(select, criteria)
        return select

    def new_insert(self, model: Model) -> Insert:
        return self.query_factory.new_insert().into(self.get_table_name()).cols(model.dirty_fields_to_query())

    def new_update(self, model: Model, *criteria: Criteria) -> Update:
        update = self.query_factory.new_update().table(self.get_table_name()).cols(model.dirty_fields_to_query())
        apply_criteria(update, criteria)
        return update

    def new_delete(self, *criteria: Criteria) -> Delete:
        delete = self.query_factory.new_delete().from_(self.get_table_name())
        apply_criteria(delete, criteria)
        return delete

    def fetch_one(self, select: Select) -> RowMapping:
        compiled = select.compile()
        return self.fetch_one_raw(compiled.sql, compiled.params)

    def fetch_all(self, select: Select) -> Rows:
        compiled = select.compile()
        return self.fetch_all_raw(compiled.sql, compiled.params)

    def find_one(self, *criteria: Criteria) -> Model:
        """Fetch the first matching row as a persisted model."""

        return self.model.new_from_row(self.fetch_one(self.new_select(*criteria)))

    def find_all(self, *criteria: Criteria) -> List[Model]:
        return self.model.new_from_rows(self.fetch_all(self.new_select(*criteria)))

    def execute_insert(self, insert: Insert) -> str:
        compiled = insert.compile()
        return self.execute_insert_raw(compiled.sql, compiled.params)

    def execute_update(self, update: Update) -> int:
        compiled = update.compile()
        return self.execute_update_raw(compiled.sql, compiled.params)

    def execute_delete(self, delete: Delete) -> int:
        compiled = delete.compile()
        return self.execute_delete_raw(compiled.sql, compiled.params)


class CacheRepository(Repository):
    """Repository whose reads can be served from a cache storage.

    Cache keys are derived from the statement text and its bound values, so
    the same select with the same values always hits the same entry.
    Entries are stored per read kind, so `fetch_one_cache` and
    `fetch_all_cache` on one select never serve each other's result.
    """

    def __init__(
        self,
        db: DatabasePort,
        query_factory: QueryFactory,
        model: Model,
        cache_storage: CacheStoragePort,
    ):
        super().__init__(db, query_factory, model)
        self.cache_storage = cache_storage

    def fetch_all_cache(self, select: Select, force: bool = False) -> Rows:
        """Return all rows, from cache unless `force` or not cached yet."""

        key = self._storage_key("all", select)
        if not force and self.cache_storage.exists(key):
            logger.debug("cache hit %s", key)
            return self.cache_storage.load(key)

        rows = [dict(row) for row in self.fetch_all(select)]
        self.cache_storage.save(key, rows)
        logger.debug("cache stored %s (%d rows)", key, len(rows))
        return rows

    def fetch_one_cache(self, select: Select, force: bool = False) -> RowMapping:
        """Return one row, from cache unless `force` or not cached yet.

        Raises:
            NotFoundError: When the query returns no row; nothing is cached.
        """

        key = self._storage_key("one", select)
        if not force and self.cache_storage.exists(key):
            logger.debug("cache hit %s", key)
            return self.cache_storage.load(key)

        row: Dict[str, Any] = dict(self.fetch_one(select))
        self.cache_storage.save(key, row)
        logger.debug("cache stored %s", key)
        return row

    def invalidate_cache(self, select: Select) -> bool:
        """Drop the cached entries for `select`; `False` when nothing was cached."""

        dropped = False
        for kind in _READ_KINDS:
            key = self._storage_key(kind, select)
            if self.cache_storage.exists(key):
                dropped = self.cache_storage.invalidate(key) or dropped
        return dropped

    def generate_cache_key(self, select: Select) -> str:
        compiled = select.compile()
        params = compiled.params or {}
        values = params.values() if isinstance(params, dict) else params
        raw = "::".join([compiled.sql, *(repr(value) for value in values)])
        return hashlib.md5(raw.encode("utf-8")).hexdigest()

    def _storage_key(self, kind: str, select: Select) -> str:
        return f"{kind}:{self.generate_cache_key(select)}"
