"""Parameterized SQL statement builders.

Statements collect table, columns, and WHERE fragments, then compile to SQL
text plus bind values. Values only ever travel as bind parameters. Internally
every placeholder is named (`:name`); positional dialects get the names
rewritten to their own placeholder and the values listed in order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .contracts import DialectPort
from .criteria import Criteria
from .errors import OrmError
from .types import QueryParams

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_PLACEHOLDER = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")


@dataclass(frozen=True)
class CompiledStatement:
    """SQL text with its bound parameters."""

    sql: str
    params: QueryParams


@dataclass(frozen=True)
class _WherePart:
    conjunction: str
    cond: str
    binds: Mapping[str, Any]
    column: Optional[str] = None


class _BindNames:
    """Allocates unique bind names, suffixing on collision."""

    def __init__(self) -> None:
        self.values: Dict[str, Any] = {}

    def claim(self, base: str, value: Any) -> str:
        safe = "".join(ch if ch.isalnum() or ch == "_" else "_" for ch in base)
        name = safe
        counter = 1
        while name in self.values:
            counter += 1
            name = f"{safe}_{counter}"
        self.values[name] = value
        return name


class Statement:
    """Common WHERE handling and compilation for all statement kinds."""

    def __init__(self, dialect: DialectPort):
        self.dialect = dialect
        self._table: Optional[str] = None
        self._where: List[_WherePart] = []
        self._binds: Dict[str, Any] = {}

    def where(
        self,
        cond: str,
        binds: Optional[Mapping[str, Any]] = None,
        *,
        column: Optional[str] = None,
    ) -> "Statement":
        """Add a condition joined with `AND`.

        `column` names the identifier `cond` starts with; it is quoted for the
        dialect at compile time.
        """

        self._where.append(_WherePart("AND", cond, dict(binds or {}), column))
        return self

    def or_where(
        self,
        cond: str,
        binds: Optional[Mapping[str, Any]] = None,
        *,
        column: Optional[str] = None,
    ) -> "Statement":
        """Add a condition joined with `OR`."""

        self._where.append(_WherePart("OR", cond, dict(binds or {}), column))
        return self

    def bind_value(self, name: str, value: Any) -> "Statement":
        """Bind a value to a placeholder used in a raw condition."""

        self._binds[name] = value
        return self

    def bind_values(self, values: Mapping[str, Any]) -> "Statement":
        self._binds.update(values)
        return self

    def has_where(self) -> bool:
        return bool(self._where)

    def get_table(self) -> Optional[str]:
        return self._table

    def compile(self) -> CompiledStatement:
        """Compile statement text and bind values for the dialect."""

        names = _BindNames()
        for name, value in self._binds.items():
            names.claim(name, value)
        sql = self._build(names)

        if self.dialect.paramstyle == "named":
            return CompiledStatement(sql, dict(names.values))

        positional: List[Any] = []

        def _replace(match: "re.Match[str]") -> str:
            name = match.group(1)
            if name not in names.values:
                return match.group(0)
            positional.append(names.values[name])
            return self.dialect.placeholder(name)

        return CompiledStatement(_PLACEHOLDER.sub(_replace, sql), positional)

    def get_statement_text(self) -> str:
        return self.compile().sql

    def get_bound_values(self) -> QueryParams:
        return self.compile().params

    def _build(self, names: _BindNames) -> str:
        raise NotImplementedError

    def _table_sql(self) -> str:
        if not self._table:
            raise OrmError(f"{type(self).__name__} has no table.")
        return self.dialect.q(self._table)

    def _where_sql(self, names: _BindNames) -> str:
        if not self._where:
            return ""

        clauses: List[str] = []
        for index, part in enumerate(self._where):
            cond = _rename_binds(self._quote_leading(part), part.binds, names)
            clauses.append(cond if index == 0 else f"{part.conjunction} {cond}")
        return " WHERE " + " ".join(clauses)

    def _quote_leading(self, part: _WherePart) -> str:
        column = part.column
        if column and part.cond.startswith(column + " "):
            return self.dialect.q(column) + part.cond[len(column) :]
        return part.cond

    def _col_sql(self, col: str) -> str:
        return self.dialect.q(col) if _IDENTIFIER.match(col) else col

    def __str__(self) -> str:
        return self.get_statement_text()


class Select(Statement):
    """`SELECT` statement builder."""

    def __init__(self, dialect: DialectPort):
        super().__init__(dialect)
        self._cols: List[str] = []
        self._order_by: List[Tuple[str, bool]] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None

    def from_(self, table: str) -> "Select":
        self._table = table
        return self

    def cols(self, columns: Iterable[str]) -> "Select":
        self._cols.extend(columns)
        return self

    def get_cols(self) -> List[str]:
        return list(self._cols)

    def order_by(self, col: str, desc: bool = False) -> "Select":
        self._order_by.append((col, desc))
        return self

    def limit(self, limit: Optional[int]) -> "Select":
        self._limit = None if limit is None else int(limit)
        return self

    def offset(self, offset: Optional[int]) -> "Select":
        self._offset = None if offset is None else int(offset)
        return self

    def _build(self, names: _BindNames) -> str:
        cols_sql = ", ".join(self._col_sql(col) for col in self._cols) or "*"
        sql = f"SELECT {cols_sql} FROM {self._table_sql()}"
        sql += self._where_sql(names)
        if self._order_by:
            ordered = ", ".join(
                f"{self._col_sql(col)} {'DESC' if desc else 'ASC'}"
                for col, desc in self._order_by
            )
            sql += f" ORDER BY {ordered}"
        if self._limit is not None:
            sql += f" LIMIT :{names.claim('__limit', self._limit)}"
        if self._offset is not None:
            sql += f" OFFSET :{names.claim('__offset', self._offset)}"
        return sql


class _ValuesStatement(Statement):
    """Shared column/value handling for `INSERT` and `UPDATE`."""

    def __init__(self, dialect: DialectPort):
        super().__init__(dialect)
        self._values: Dict[str, Any] = {}

    def cols(self, values: Mapping[str, Any]) -> "_ValuesStatement":
        """Set column values; later calls override earlier ones per column."""

        self._values.update(values)
        return self

    def get_cols(self) -> Dict[str, Any]:
        return dict(self._values)

    def has_cols(self) -> bool:
        return bool(self._values)


class Insert(_ValuesStatement):
    """`INSERT` statement builder."""

    def into(self, table: str) -> "Insert":
        self._table = table
        return self

    def _build(self, names: _BindNames) -> str:
        table_sql = self._table_sql()
        if not self._values:
            return self.dialect.empty_insert_sql(table_sql)

        columns_sql = ", ".join(self.dialect.q(col) for col in self._values)
        placeholders = ", ".join(
            f":{names.claim(col, value)}" for col, value in self._values.items()
        )
        return f"INSERT INTO {table_sql} ({columns_sql}) VALUES ({placeholders})"


class Update(_ValuesStatement):
    """`UPDATE` statement builder."""

    def table(self, table: str) -> "Update":
        self._table = table
        return self

    def _build(self, names: _BindNames) -> str:
        if not self._values:
            raise OrmError("Update statement has no columns to set.")
        assignments = ", ".join(
            f"{self.dialect.q(col)} = :{names.claim(col, value)}"
            for col, value in self._values.items()
        )
        return f"UPDATE {self._table_sql()} SET {assignments}" + self._where_sql(names)


class Delete(Statement):
    """`DELETE` statement builder."""

    def from_(self, table: str) -> "Delete":
        self._table = table
        return self

    def _build(self, names: _BindNames) -> str:
        return f"DELETE FROM {self._table_sql()}" + self._where_sql(names)


class QueryFactory:
    """Creates statements bound to one dialect."""

    def __init__(self, dialect: DialectPort):
        self.dialect = dialect

    def new_select(self) -> Select:
        return Select(self.dialect)

    def new_insert(self) -> Insert:
        return Insert(self.dialect)

    def new_update(self) -> Update:
        return Update(self.dialect)

    def new_delete(self) -> Delete:
        return Delete(self.dialect)


def apply_criteria(statement: Statement, criteria: Sequence[Criteria]) -> Statement:
    """Fold criteria into a statement's WHERE clause, left to right.

    Each criteria is joined with `AND` or `OR` according to its own `is_and`
    flag; the first one becomes the base condition.
    """

    for item in criteria:
        if item.is_and:
            statement.where(item.cond, item.binds, column=item.column)
        else:
            statement.or_where(item.cond, item.binds, column=item.column)
    return statement


def _rename_binds(cond: str, binds: Mapping[str, Any], names: _BindNames) -> str:
    """Claim unique names for a condition's binds and rewrite its placeholders."""

    replacements: Dict[str, str] = {}
    for name, value in binds.items():
        if isinstance(value, (list, tuple)):
            expanded = [names.claim(f"{name}_{i}", item) for i, item in enumerate(value)]
            replacements[name] = ", ".join(f":{key}" for key in expanded) or "NULL"
        else:
            replacements[name] = f":{names.claim(name, value)}"

    def _replace(match: "re.Match[str]") -> str:
        return replacements.get(match.group(1), match.group(0))

    return _PLACEHOLDER.sub(_replace, cond)
