"""Column descriptors and column SQL helpers used by schema generation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from .contracts import DialectPort
from .errors import SchemaDeclarationError

CURRENT_TIMESTAMP = "CURRENT_TIMESTAMP"


class ColumnType(str, Enum):
    """SQL type families a column can be declared with."""

    INT = "int"
    TINYINT = "tinyint"
    SMALLINT = "smallint"
    MEDIUMINT = "mediumint"
    BIGINT = "bigint"
    YEAR = "year"
    BOOL = "bool"
    CHAR = "char"
    VARCHAR = "varchar"
    TEXT = "text"
    ENUM = "enum"
    SET = "set"
    DATETIME = "datetime"
    TIMESTAMP = "timestamp"
    DATE = "date"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    JSON = "json"
    BINARY = "binary"
    VARBINARY = "varbinary"


INTEGER_TYPES = frozenset(
    {
        ColumnType.INT,
        ColumnType.TINYINT,
        ColumnType.SMALLINT,
        ColumnType.MEDIUMINT,
        ColumnType.BIGINT,
    }
)
OPTION_TYPES = frozenset({ColumnType.ENUM, ColumnType.SET})


@dataclass(frozen=True)
class Column:
    """Immutable description of one table column.

    Construction validates the declaration, so each descriptor is meant to be
    built once per model class and column and then shared.
    """

    name: str
    type: ColumnType
    size: Optional[int] = None
    scale: Optional[int] = None
    nullable: bool = False
    default: Any = None
    autoincrement: bool = False
    unsigned: bool = False
    zerofill: bool = False
    comment: Optional[str] = None
    options: Tuple[str, ...] = ()
    charset: Optional[str] = None
    collate: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise SchemaDeclarationError("Column name must be a non-empty string.")
        object.__setattr__(self, "type", ColumnType(self.type))
        object.__setattr__(self, "options", tuple(self.options))

        if self.size is not None and self.size < 0:
            raise SchemaDeclarationError(
                f"Column {self.name!r} size must not be negative."
            )
        if self.autoincrement and self.type not in INTEGER_TYPES:
            raise SchemaDeclarationError(
                f"Column {self.name!r} of type {self.type.value} cannot be autoincrement."
            )
        if self.type in OPTION_TYPES and not self.options:
            raise SchemaDeclarationError(
                f"Column {self.name!r} of type {self.type.value} requires options."
            )
        if (
            self.type is ColumnType.DECIMAL
            and self.scale is not None
            and self.size is not None
            and self.scale > self.size
        ):
            raise SchemaDeclarationError(
                f"Column {self.name!r} scale {self.scale} exceeds precision {self.size}."
            )


_SQLITE_TYPES = {
    ColumnType.INT: "INTEGER",
    ColumnType.TINYINT: "INTEGER",
    ColumnType.SMALLINT: "INTEGER",
    ColumnType.MEDIUMINT: "INTEGER",
    ColumnType.BIGINT: "INTEGER",
    ColumnType.YEAR: "INTEGER",
    ColumnType.BOOL: "BOOLEAN",
    ColumnType.CHAR: "TEXT",
    ColumnType.VARCHAR: "TEXT",
    ColumnType.TEXT: "TEXT",
    ColumnType.ENUM: "TEXT",
    ColumnType.SET: "TEXT",
    ColumnType.DATETIME: "TIMESTAMP",
    ColumnType.TIMESTAMP: "TIMESTAMP",
    ColumnType.DATE: "DATE",
    ColumnType.FLOAT: "REAL",
    ColumnType.DOUBLE: "REAL",
    ColumnType.DECIMAL: "NUMERIC",
    ColumnType.JSON: "TEXT",
    ColumnType.BINARY: "BLOB",
    ColumnType.VARBINARY: "BLOB",
}

_POSTGRES_TYPES = {
    ColumnType.INT: "INTEGER",
    ColumnType.TINYINT: "SMALLINT",
    ColumnType.SMALLINT: "SMALLINT",
    ColumnType.MEDIUMINT: "INTEGER",
    ColumnType.BIGINT: "BIGINT",
    ColumnType.YEAR: "SMALLINT",
    ColumnType.BOOL: "BOOLEAN",
    ColumnType.TEXT: "TEXT",
    ColumnType.ENUM: "TEXT",
    ColumnType.SET: "TEXT",
    ColumnType.DATETIME: "TIMESTAMP",
    ColumnType.TIMESTAMP: "TIMESTAMP",
    ColumnType.DATE: "DATE",
    ColumnType.FLOAT: "REAL",
    ColumnType.DOUBLE: "DOUBLE PRECISION",
    ColumnType.JSON: "JSONB",
    ColumnType.BINARY: "BYTEA",
    ColumnType.VARBINARY: "BYTEA",
}


def resolve_sql_type(column: Column, dialect: DialectPort) -> str:
    """Map a column descriptor to the dialect's SQL type name."""

    dialect_name = getattr(dialect, "name", "").lower()
    if dialect_name == "mysql":
        return _mysql_type(column)
    if dialect_name == "postgres":
        if column.type in (ColumnType.CHAR, ColumnType.VARCHAR):
            return f"{column.type.value.upper()}({column.size or 1})"
        if column.type is ColumnType.DECIMAL:
            return f"NUMERIC({column.size or 10}, {column.scale or 0})"
        return _POSTGRES_TYPES[column.type]
    return _SQLITE_TYPES[column.type]


def _mysql_type(column: Column) -> str:
    kind = column.type
    if kind is ColumnType.BOOL:
        return "TINYINT(1)"
    if kind in OPTION_TYPES:
        options = ", ".join(_quote_literal(option) for option in column.options)
        sql = f"{kind.value.upper()}({options})"
    elif kind is ColumnType.DECIMAL:
        sql = f"DECIMAL({column.size or 10}, {column.scale or 0})"
    elif column.size and kind not in (ColumnType.TEXT, ColumnType.JSON, ColumnType.YEAR):
        sql = f"{kind.value.upper()}({column.size})"
    else:
        sql = kind.value.upper()

    if column.unsigned:
        sql += " UNSIGNED"
    if column.zerofill:
        sql += " ZEROFILL"
    if column.charset:
        sql += f" CHARACTER SET {column.charset}"
    if column.collate:
        sql += f" COLLATE {column.collate}"
    return sql


def column_sql(column: Column, dialect: DialectPort) -> str:
    """Build one column definition SQL fragment."""

    if column.autoincrement:
        return dialect.auto_pk_sql(column.name)

    sql_parts = [dialect.q(column.name), resolve_sql_type(column, dialect)]
    sql_parts.append("NULL" if column.nullable else "NOT NULL")
    if column.default is not None:
        sql_parts.append(f"DEFAULT {default_sql(column.default, dialect)}")
    if column.comment and getattr(dialect, "name", "").lower() == "mysql":
        sql_parts.append(f"COMMENT {_quote_literal(column.comment)}")
    return " ".join(sql_parts)


def default_sql(value: Any, dialect: DialectPort) -> str:
    """Render a declared default value as a SQL literal."""

    if value == CURRENT_TIMESTAMP:
        return CURRENT_TIMESTAMP
    if isinstance(value, bool):
        if getattr(dialect, "name", "").lower() == "postgres":
            return "TRUE" if value else "FALSE"
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return str(value)
    return _quote_literal(str(value))


def _quote_literal(value: str) -> str:
    escaped = value.replace("'", "''")
    return f"'{escaped}'"
