"""Repository and cached repository example."""

from __future__ import annotations

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
    CacheRepository,
    Database,
    InMemoryCacheStorage,
    IntField,
    Model,
    QueryFactory,
    SQLiteDialect,
    VarCharField,
    apply_schema,
)


class ProductModel(Model):
    def __init__(self, row=None):
        super().__init__()
        self.id = IntField(self, "id", row, autoincrement=True)
        self.name = VarCharField(self, "name", row, 80)
        self.stock = IntField(self, "stock", row, default=0)


def main() -> None:
    db = Database(sqlite3.connect(":memory:"), SQLiteDialect())
    repo = CacheRepository(
        db, QueryFactory(db.dialect), ProductModel(), InMemoryCacheStorage(prefix="shop:")
    )

    try:
        apply_schema(db, ProductModel)

        with repo.transaction():
            for name, stock in (("pen", 10), ("ink", 0), ("paper", 5)):
                product = ProductModel()
                product.name.value = name
                product.stock.value = stock
                print("Inserted id:", repo.execute_insert(repo.new_insert(product)))

        proto = ProductModel()
        in_stock = repo.new_select(proto.stock.gt(0)).order_by("name")
        print("Cache key:", repo.generate_cache_key(in_stock))
        print("First read:", repo.fetch_all_cache(in_stock))

        db.execute('UPDATE "product" SET "stock" = 3 WHERE "name" = :name', {"name": "ink"})
        print("Cached read:", repo.fetch_all_cache(in_stock))
        print("Forced read:", repo.fetch_all_cache(in_stock, force=True))
    finally:
        db.close()


if __name__ == "__main__":
    main()
