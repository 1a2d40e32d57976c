"""Show SQL generation differences across SQLite/Postgres/MySQL dialects."""

from __future__ import annotations

import sys
from pathlib import Path

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "field_orm").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from field_orm import (
    EnumField,
    IntField,
    Model,
    QueryFactory,
    UniqueKey,
    VarCharField,
    apply_criteria,
    create_schema_sql,
)
from field_orm.ports.db_api.dialects import MySQLDialect, PostgresDialect, SQLiteDialect


class PreviewUserModel(Model):
    engine = "InnoDB"
    charset = "utf8mb4"

    def __init__(self, row=None):
        super().__init__()
        self.id = IntField(self, "id", row, unsigned=True, autoincrement=True)
        self.email = VarCharField(self, "email", row)
        self.age = IntField(self, "age", row, nullable=True)
        self.role = EnumField(self, "role", row, ("member", "admin"), default="member")

    @classmethod
    def get_indexes(cls):
        return (UniqueKey("email"),)


def show_for_dialect(name: str, dialect) -> None:  # noqa: ANN001
    print(f"\n===== {name} =====")

    user = PreviewUserModel()
    select = (
        QueryFactory(dialect)
        .new_select()
        .cols(user.get_column_names())
        .from_(user.get_table_name())
        .order_by("age", desc=True)
        .limit(5)
        .offset(10)
    )
    apply_criteria(
        select,
        [
            user.email.like("%@example.com"),
            user.age.gte(18),
            user.age.is_null(and_=False),
            user.role.in_(["member", "admin"]),
        ],
    )

    print("SQL:", select.get_statement_text())
    print("Params:", select.get_bound_values())
    for sql in create_schema_sql(user.get_schema(), dialect):
        print("DDL:", sql)


def main() -> None:
    show_for_dialect("SQLiteDialect", SQLiteDialect())
    show_for_dialect("PostgresDialect", PostgresDialect())
    show_for_dialect("MySQLDialect", MySQLDialect())


if __name__ == "__main__":
    main()
