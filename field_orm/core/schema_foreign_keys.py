"""Foreign-key relation descriptors and their SQL rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .contracts import DialectPort
from .errors import SchemaDeclarationError
from .schema_indexes import normalize_columns

_REFERENTIAL_ACTIONS = frozenset(
    {"CASCADE", "SET NULL", "SET DEFAULT", "RESTRICT", "NO ACTION"}
)


@dataclass(frozen=True)
class ForeignKey:
    """Represents a `FOREIGN KEY (...) REFERENCES table (...)` relation."""

    fields: Tuple[str, ...]
    ref_table: str
    ref_fields: Tuple[str, ...] = ("id",)
    name: Optional[str] = None
    on_delete: Optional[str] = None
    on_update: Optional[str] = None

    def __post_init__(self) -> None:
        fields = normalize_columns(self.fields)
        ref_fields = normalize_columns(self.ref_fields)
        if len(fields) != len(ref_fields):
            raise SchemaDeclarationError(
                "Foreign key must reference as many columns as it declares."
            )
        if not isinstance(self.ref_table, str) or not self.ref_table:
            raise SchemaDeclarationError("Foreign key requires a referenced table name.")
        object.__setattr__(self, "fields", fields)
        object.__setattr__(self, "ref_fields", ref_fields)
        object.__setattr__(self, "on_delete", _parse_action(self.on_delete))
        object.__setattr__(self, "on_update", _parse_action(self.on_update))


def relation_key(relation: ForeignKey) -> Tuple[Any, ...]:
    """Identity of a relation inside one table, used for duplicate detection."""

    return (relation.fields, relation.ref_table, relation.ref_fields)


def foreign_key_sql(relation: ForeignKey, dialect: DialectPort) -> str:
    """Build a table-level foreign key constraint."""

    local = ", ".join(dialect.q(col) for col in relation.fields)
    remote = ", ".join(dialect.q(col) for col in relation.ref_fields)
    sql = f"FOREIGN KEY ({local}) REFERENCES {dialect.q(relation.ref_table)} ({remote})"
    if relation.name:
        sql = f"CONSTRAINT {dialect.q(relation.name)} {sql}"
    if relation.on_delete:
        sql += f" ON DELETE {relation.on_delete}"
    if relation.on_update:
        sql += f" ON UPDATE {relation.on_update}"
    return sql


def _parse_action(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    action = raw.strip().upper()
    if action not in _REFERENTIAL_ACTIONS:
        allowed = ", ".join(sorted(_REFERENTIAL_ACTIONS))
        raise SchemaDeclarationError(f"Referential action must be one of: {allowed}.")
    return action
