"""Basic active-record CRUD example for field_orm OrmModel."""

from __future__ import annotations

import logging
import sqlite3
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
    Database,
    IntField,
    NotFoundError,
    OrmModel,
    QueryFactory,
    ResultSetFactory,
    SQLiteDialect,
    UpdateError,
    VarCharField,
    apply_schema,
)


class UserModel(OrmModel):
    def __init__(self, row=None):
        super().__init__()
        # Autoincrement primary key: filled in after insert.
        self.id = IntField(self, "id", row, unsigned=True, autoincrement=True)
        self.email = VarCharField(self, "email", row)
        self.age = IntField(self, "age", row, nullable=True)


def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    # 1) Create DB adapter and wire result sets to it.
    conn = sqlite3.connect(":memory:")
    db = Database(conn, SQLiteDialect())
    OrmModel.result_set_factory = ResultSetFactory(db, QueryFactory(db.dialect))

    try:
        # 2) Create table from field declarations.
        apply_schema(db, UserModel)

        # 3) Insert rows; only dirty fields are written.
        alice = UserModel()
        alice.email.value = "alice@example.com"
        alice.age.value = 25
        alice.insert()

        bob = UserModel()
        bob.email.value = "bob@example.com"
        bob.insert()
        print("Inserted:", alice, bob)

        # 4) Find by criteria built from fields.
        users = UserModel()
        fetched = users.find(users.id.eq(alice.id.value)).first()
        print("Fetched by PK:", fetched)

        # 5) Update by PK.
        bob.age.value = 31
        print("Updated row count:", bob.update_by_pk().affected_rows())

        try:
            bob.update_by_pk()
        except UpdateError as exc:
            print("Second update rejected:", exc)

        # 6) List rows.
        print("All users:", users.find().order_by("id").all())

        # 7) Delete by PK.
        print("Deleted row count:", alice.delete_by_pk().affected_rows())
        try:
            users.find(users.id.eq(alice.id.value)).first()
        except NotFoundError:
            print("Alice is gone")
    finally:
        db.close()


if __name__ == "__main__":
    main()
