"""Table and database schema values plus DDL rendering helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .contracts import DatabasePort, DialectPort
from .errors import (
    DuplicateColumnError,
    DuplicateIndexError,
    DuplicateRelationError,
    DuplicateTableError,
    SchemaDeclarationError,
)
from .schema_columns import Column, column_sql
from .schema_foreign_keys import ForeignKey, foreign_key_sql, relation_key
from .schema_indexes import (
    Index,
    build_index_sql,
    index_key,
    primary_key_sql,
    validate_index_columns,
)


@dataclass(frozen=True)
class TableSchema:
    """Structural description of one table.

    Duplicate columns, indexes, and relations are rejected on construction.
    """

    name: str
    columns: Tuple[Column, ...]
    indexes: Tuple[Index, ...] = ()
    relations: Tuple[ForeignKey, ...] = ()
    engine: Optional[str] = None
    charset: Optional[str] = None
    collation: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise SchemaDeclarationError("Table name must be a non-empty string.")
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "indexes", tuple(self.indexes))
        object.__setattr__(self, "relations", tuple(self.relations))
        self._validate_columns()
        self._validate_indexes()
        self._validate_relations()

    def _validate_columns(self) -> None:
        seen: set[str] = set()
        for column in self.columns:
            if column.name in seen:
                raise DuplicateColumnError(
                    f"Duplicate column {column.name!r} in table {self.name!r}."
                )
            seen.add(column.name)

    def _validate_indexes(self) -> None:
        names: set[str] = set()
        keys: set[Tuple[Any, ...]] = set()
        primary_keys = 0
        available = set(self.column_names)
        for index in self.indexes:
            validate_index_columns(index.fields, available)
            key = index_key(index)
            if key in keys or (index.name is not None and index.name in names):
                raise DuplicateIndexError(
                    f"Duplicate index on {', '.join(index.fields)} in table {self.name!r}."
                )
            keys.add(key)
            if index.name is not None:
                names.add(index.name)
            if index.is_primary_key:
                primary_keys += 1
        if primary_keys > 1:
            raise DuplicateIndexError(f"Table {self.name!r} declares more than one primary key.")

        auto_columns = tuple(column.name for column in self.columns if column.autoincrement)
        if len(auto_columns) > 1:
            raise DuplicateIndexError(
                f"Table {self.name!r} declares more than one autoincrement column."
            )
        pk = self.primary_key
        if auto_columns and pk is not None and pk.fields != auto_columns:
            raise DuplicateIndexError(
                f"Table {self.name!r} declares a primary key on {', '.join(pk.fields)} "
                f"besides autoincrement column {', '.join(auto_columns)}."
            )

    def _validate_relations(self) -> None:
        names: set[str] = set()
        keys: set[Tuple[Any, ...]] = set()
        available = set(self.column_names)
        for relation in self.relations:
            validate_index_columns(relation.fields, available)
            key = relation_key(relation)
            if key in keys or (relation.name is not None and relation.name in names):
                raise DuplicateRelationError(
                    f"Duplicate relation on {', '.join(relation.fields)} in table {self.name!r}."
                )
            keys.add(key)
            if relation.name is not None:
                names.add(relation.name)

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    @property
    def primary_key(self) -> Optional[Index]:
        for index in self.indexes:
            if index.is_primary_key:
                return index
        return None

    def has_column(self, name: str) -> bool:
        return any(column.name == name for column in self.columns)

    def get_column(self, name: str) -> Column:
        for column in self.columns:
            if column.name == name:
                return column
        raise KeyError(f"Column {name!r} does not exist in table {self.name!r}.")


@dataclass(frozen=True)
class DatabaseSchema:
    """Collection of table schemas that make up one database."""

    name: str
    tables: Tuple[TableSchema, ...]
    engine: Optional[str] = None
    charset: Optional[str] = None
    collation: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tables", tuple(self.tables))
        seen: set[str] = set()
        for table in self.tables:
            if table.name in seen:
                raise DuplicateTableError(
                    f"Duplicate table {table.name!r} in database {self.name!r}."
                )
            seen.add(table.name)

    def get_table(self, name: str) -> TableSchema:
        for table in self.tables:
            if table.name == name:
                return table
        raise KeyError(f"Table {name!r} does not exist in database {self.name!r}.")


def create_table_sql(
    schema: TableSchema,
    dialect: DialectPort,
    *,
    if_not_exists: bool = False,
) -> str:
    """Build `CREATE TABLE` statement for a table schema."""

    definitions = [column_sql(column, dialect) for column in schema.columns]

    auto_columns = tuple(column.name for column in schema.columns if column.autoincrement)
    pk = schema.primary_key
    if pk is not None and pk.fields != auto_columns:
        definitions.append(primary_key_sql(pk, dialect))
    definitions.extend(foreign_key_sql(relation, dialect) for relation in schema.relations)

    prefix = "CREATE TABLE IF NOT EXISTS" if if_not_exists else "CREATE TABLE"
    sql = f"{prefix} {dialect.q(schema.name)} (\n  " + ",\n  ".join(definitions) + "\n)"
    return sql + _table_options_sql(schema, dialect) + ";"


def create_indexes_sql(
    schema: TableSchema,
    dialect: DialectPort,
    *,
    if_not_exists: bool = False,
) -> List[str]:
    """Build `CREATE INDEX` statements for every non-primary index."""

    return [
        build_index_sql(schema.name, index, dialect, if_not_exists=if_not_exists)
        for index in schema.indexes
        if not index.is_primary_key
    ]


def create_schema_sql(
    schema: TableSchema,
    dialect: DialectPort,
    *,
    if_not_exists: bool = False,
) -> List[str]:
    """Build full schema SQL list (table first, then indexes)."""

    return [
        create_table_sql(schema, dialect, if_not_exists=if_not_exists),
        *create_indexes_sql(schema, dialect, if_not_exists=if_not_exists),
    ]


def apply_schema(
    db: DatabasePort,
    target: Any,
    *,
    if_not_exists: bool = False,
) -> List[str]:
    """Create the table and indexes for a model (class or instance) or schema."""

    statements = create_schema_sql(
        resolve_table_schema(target), db.dialect, if_not_exists=if_not_exists
    )
    with db.transaction():
        for sql in statements:
            db.execute(sql)
    return statements


def resolve_table_schema(target: Any) -> TableSchema:
    """Accept a `TableSchema`, a model instance, or a model class."""

    if isinstance(target, TableSchema):
        return target
    if isinstance(target, type):
        target = target()
    return target.get_schema()


def database_schema_sql(
    database: DatabaseSchema,
    dialect: DialectPort,
    *,
    if_not_exists: bool = False,
) -> List[str]:
    """Build DDL for every table of a database schema, in declaration order."""

    statements: List[str] = []
    for table in database.tables:
        statements.extend(create_schema_sql(table, dialect, if_not_exists=if_not_exists))
    return statements


def _table_options_sql(schema: TableSchema, dialect: DialectPort) -> str:
    if getattr(dialect, "name", "").lower() != "mysql":
        return ""

    options: Dict[str, Optional[str]] = {
        "ENGINE": schema.engine,
        "DEFAULT CHARSET": schema.charset,
        "COLLATE": schema.collation,
    }
    rendered = [f"{key}={value}" for key, value in options.items() if value]
    return (" " + " ".join(rendered)) if rendered else ""
