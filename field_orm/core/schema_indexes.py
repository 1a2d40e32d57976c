"""Index descriptors and index SQL helpers used by schema generation."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Tuple

from .contracts import DialectPort
from .errors import SchemaDeclarationError


@dataclass(frozen=True)
class Index:
    """Represents one (non-unique) index definition."""

    fields: Tuple[str, ...]
    name: Optional[str] = None

    is_unique: ClassVar[bool] = False
    is_primary_key: ClassVar[bool] = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", normalize_columns(self.fields))


class UniqueKey(Index):
    """Unique index definition."""

    is_unique = True


class PrimaryKey(UniqueKey):
    """Primary key definition."""

    is_primary_key = True


def normalize_columns(raw: Any) -> Tuple[str, ...]:
    if isinstance(raw, str):
        raw = (raw,)

    if not isinstance(raw, Sequence):
        raise SchemaDeclarationError(
            "Index columns must be a string or sequence of strings."
        )

    columns = tuple(raw)
    if not columns:
        raise SchemaDeclarationError("Index columns must not be empty.")
    if not all(isinstance(col, str) and col for col in columns):
        raise SchemaDeclarationError("All index column names must be non-empty strings.")
    return columns


def index_key(index: Index) -> Tuple[Any, ...]:
    """Identity of an index inside one table, used for duplicate detection."""

    return (index.is_primary_key, index.is_unique, index.fields)


def validate_index_columns(columns: Sequence[str], available_columns: set[str]) -> None:
    missing = [column for column in columns if column not in available_columns]
    if missing:
        raise SchemaDeclarationError(
            f"Index column(s) not found in table: {', '.join(missing)}"
        )


def default_index_name(table: str, columns: Sequence[str], unique: bool) -> str:
    prefix = "uidx" if unique else "idx"
    raw_name = f"{prefix}_{table}_{'_'.join(columns)}"
    safe = "".join(char if char.isalnum() or char == "_" else "_" for char in raw_name)
    return safe


def build_index_sql(
    table: str,
    index: Index,
    dialect: DialectPort,
    *,
    if_not_exists: bool = False,
) -> str:
    """Build one `CREATE INDEX` SQL statement from a non-primary index."""

    index_name = index.name or default_index_name(table, index.fields, index.is_unique)
    columns_sql = ", ".join(dialect.q(column) for column in index.fields)

    prefix = "CREATE UNIQUE INDEX" if index.is_unique else "CREATE INDEX"
    if if_not_exists and supports_index_if_not_exists(dialect):
        prefix += " IF NOT EXISTS"
    return f"{prefix} {dialect.q(index_name)} ON {dialect.q(table)} ({columns_sql});"


def primary_key_sql(index: Index, dialect: DialectPort) -> str:
    """Build a table-level `PRIMARY KEY (...)` constraint."""

    return "PRIMARY KEY (" + ", ".join(dialect.q(col) for col in index.fields) + ")"


def supports_index_if_not_exists(dialect: DialectPort) -> bool:
    name = getattr(dialect, "name", "").lower()
    return name in {"sqlite", "postgres"}
