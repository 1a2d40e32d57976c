from __future__ import annotations

import unittest

from field_orm import (
    Column,
    ColumnType,
    DatabaseSchema,
    DuplicateColumnError,
    DuplicateIndexError,
    DuplicateRelationError,
    DuplicateTableError,
    FieldNotFoundError,
    ForeignKey,
    Index,
    IntField,
    Model,
    ModelDatabase,
    MySQLDialect,
    PostgresDialect,
    PrimaryKey,
    SchemaDeclarationError,
    SQLiteDialect,
    TableSchema,
    UniqueKey,
    VarCharField,
    apply_schema,
    create_schema_sql,
    create_table_sql,
    derive_table_name,
    reset_class_caches,
)
from tests.orm_test_models import (
    AuthorModel,
    BlogOrmModel,
    LogEntryModel,
    TagModel,
    sqlite_database,
)


class TableNameTests(unittest.TestCase):
    def test_derivation(self) -> None:
        self.assertEqual(derive_table_name("BlogOrmModel"), "blog_orm")
        self.assertEqual(derive_table_name("HTTPRequestModel"), "http_request")
        self.assertEqual(derive_table_name("User"), "user")
        self.assertEqual(derive_table_name("Model"), "model")
        self.assertEqual(derive_table_name("Order2Item"), "order2_item")

    def test_underivable_name_raises(self) -> None:
        with self.assertRaises(SchemaDeclarationError):
            derive_table_name("__")

    def test_model_table_name(self) -> None:
        self.assertEqual(BlogOrmModel().get_table_name(), "blog_orm")
        self.assertEqual(LogEntryModel().get_table_name(), "log_entries")


class ModelMetadataTests(unittest.TestCase):
    def setUp(self) -> None:
        reset_class_caches()

    def test_fields_keep_declaration_order(self) -> None:
        blog = BlogOrmModel()
        self.assertEqual(
            list(blog.get_fields()),
            ["id", "author_id", "title", "body", "published", "created_at"],
        )
        self.assertEqual(blog.get_column_names(), list(blog.get_fields()))
        self.assertIs(blog.get_field("title"), blog.title)

    def test_unknown_field_raises(self) -> None:
        with self.assertRaises(FieldNotFoundError):
            BlogOrmModel().get_field("nope")

    def test_schema_is_cached_per_class(self) -> None:
        first = BlogOrmModel().get_schema()
        second = BlogOrmModel().get_schema()
        self.assertIs(first, second)
        self.assertEqual(first.name, "blog_orm")
        self.assertEqual(first.indexes, (Index("title"),))
        self.assertEqual(first.relations[0].ref_table, "author")

    def test_fields_are_per_instance(self) -> None:
        first = BlogOrmModel({"title": "same"})
        second = BlogOrmModel({"title": "same"})
        self.assertIsNot(first.get_fields()["title"], second.get_fields()["title"])
        self.assertEqual(first.title.value, second.title.value)

    def test_autoincrement_wins_over_primary_key_index(self) -> None:
        class MixedKeyModel(Model):
            def __init__(self, row=None):
                super().__init__()
                self.code = VarCharField(self, "code", row)
                self.id = IntField(self, "id", row, autoincrement=True)

            @classmethod
            def get_indexes(cls):
                return (PrimaryKey("code"),)

        model = MixedKeyModel()
        self.assertIs(model.get_pk(), model.id)

        db = sqlite_database()
        try:
            with self.assertRaises(DuplicateIndexError):
                apply_schema(db, MixedKeyModel)
            tables = db.fetchall("SELECT name FROM sqlite_master WHERE type = 'table'")
        finally:
            db.close()
        self.assertFalse([row for row in tables if row["name"] == "mixed_key"])

    def test_primary_key_resolution(self) -> None:
        blog = BlogOrmModel()
        self.assertIs(blog.get_pk(), blog.id)

        tag = TagModel()
        self.assertIs(tag.get_pk(), tag.code)

        with self.assertRaises(FieldNotFoundError):
            LogEntryModel().get_pk()

    def test_new_from_row_is_persisted_and_clean(self) -> None:
        proto = BlogOrmModel()
        blog = proto.new_from_row({"id": 3, "title": "x"})
        self.assertIsInstance(blog, BlogOrmModel)
        self.assertFalse(blog.is_new)
        self.assertFalse(blog.is_dirty)
        self.assertEqual(blog.id.value, 3)
        self.assertTrue(proto.new().is_new)

        rows = proto.new_from_rows([{"id": 1}, {"id": 2}])
        self.assertEqual([row.id.value for row in rows], [1, 2])

    def test_duplicate_field_declaration_raises(self) -> None:
        class TwiceModel(Model):
            def __init__(self, row=None):
                super().__init__()
                self.a = IntField(self, "a", row)
                self.b = IntField(self, "a", row)

        with self.assertRaises(DuplicateColumnError):
            TwiceModel()

    def test_fields_before_base_init_raise(self) -> None:
        class EarlyModel(Model):
            def __init__(self, row=None):
                self.a = IntField(self, "a", row)
                super().__init__()

        with self.assertRaises(SchemaDeclarationError):
            EarlyModel()


class TableSchemaValidationTests(unittest.TestCase):
    def _columns(self):
        return (
            Column("id", ColumnType.INT, autoincrement=True),
            Column("email", ColumnType.VARCHAR, size=255),
        )

    def test_column_validation(self) -> None:
        with self.assertRaises(SchemaDeclarationError):
            Column("", ColumnType.INT)
        with self.assertRaises(SchemaDeclarationError):
            Column("name", ColumnType.VARCHAR, autoincrement=True)
        with self.assertRaises(SchemaDeclarationError):
            Column("kind", ColumnType.SET)
        with self.assertRaises(SchemaDeclarationError):
            Column("size", ColumnType.INT, size=-1)

    def test_duplicate_column(self) -> None:
        with self.assertRaises(DuplicateColumnError):
            TableSchema("t", self._columns() + (Column("email", ColumnType.TEXT),))

    def test_duplicate_index(self) -> None:
        with self.assertRaises(DuplicateIndexError):
            TableSchema("t", self._columns(), (Index("email"), Index(["email"])))
        with self.assertRaises(DuplicateIndexError):
            TableSchema("t", self._columns(), (Index("email", "i"), UniqueKey("id", "i")))
        with self.assertRaises(DuplicateIndexError):
            TableSchema("t", self._columns(), (PrimaryKey("id"), PrimaryKey("email")))

    def test_autoincrement_column_owns_the_primary_key(self) -> None:
        with self.assertRaises(DuplicateIndexError):
            TableSchema("t", self._columns(), (PrimaryKey("email"),))
        with self.assertRaises(DuplicateIndexError):
            TableSchema(
                "t", self._columns() + (Column("seq", ColumnType.BIGINT, autoincrement=True),)
            )

        schema = TableSchema("t", self._columns(), (PrimaryKey("id"),))
        sql = create_table_sql(schema, SQLiteDialect())
        self.assertEqual(sql.count("PRIMARY KEY"), 1)

    def test_index_on_unknown_column(self) -> None:
        with self.assertRaises(SchemaDeclarationError):
            TableSchema("t", self._columns(), (Index("missing"),))

    def test_duplicate_relation(self) -> None:
        with self.assertRaises(DuplicateRelationError):
            TableSchema(
                "t",
                self._columns(),
                relations=(ForeignKey("id", "other"), ForeignKey(("id",), "other", ("id",))),
            )

    def test_foreign_key_validation(self) -> None:
        with self.assertRaises(SchemaDeclarationError):
            ForeignKey(("a", "b"), "other", ("id",))
        with self.assertRaises(SchemaDeclarationError):
            ForeignKey("a", "other", on_delete="EXPLODE")

    def test_schema_lookups(self) -> None:
        schema = TableSchema("t", self._columns(), (PrimaryKey("id"),))
        self.assertTrue(schema.has_column("email"))
        self.assertEqual(schema.get_column("email").size, 255)
        self.assertEqual(schema.primary_key, PrimaryKey("id"))
        with self.assertRaises(KeyError):
            schema.get_column("missing")

    def test_duplicate_table(self) -> None:
        table = TableSchema("t", self._columns())
        with self.assertRaises(DuplicateTableError):
            DatabaseSchema("db", (table, table))


class DdlTests(unittest.TestCase):
    def test_sqlite_table(self) -> None:
        sql = create_table_sql(BlogOrmModel().get_schema(), SQLiteDialect())
        self.assertTrue(sql.startswith('CREATE TABLE "blog_orm" ('))
        self.assertIn('"id" INTEGER PRIMARY KEY AUTOINCREMENT', sql)
        self.assertIn('"title" TEXT NOT NULL', sql)
        self.assertIn('"body" TEXT NULL', sql)
        self.assertIn('"published" BOOLEAN NOT NULL DEFAULT 0', sql)
        self.assertIn('FOREIGN KEY ("author_id") REFERENCES "author" ("id")', sql)
        self.assertNotIn("PRIMARY KEY (", sql)

    def test_composite_primary_key_constraint(self) -> None:
        sql = create_table_sql(TagModel().get_schema(), PostgresDialect(), if_not_exists=True)
        self.assertTrue(sql.startswith('CREATE TABLE IF NOT EXISTS "tag" ('))
        self.assertIn('"code" VARCHAR(32) NOT NULL', sql)
        self.assertIn('PRIMARY KEY ("code")', sql)

    def test_mysql_types_and_table_options(self) -> None:
        class ShopModel(Model):
            engine = "InnoDB"
            charset = "utf8mb4"

            def __init__(self, row=None):
                super().__init__()
                self.id = IntField(self, "id", row, unsigned=True, autoincrement=True)
                self.name = VarCharField(self, "name", row, 64, comment="display name")

        sql = create_table_sql(ShopModel().get_schema(), MySQLDialect())
        self.assertIn("`id` INT AUTO_INCREMENT PRIMARY KEY", sql)
        self.assertIn("`name` VARCHAR(64) NOT NULL COMMENT 'display name'", sql)
        self.assertTrue(sql.endswith(" ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;"))

    def test_schema_sql_includes_indexes(self) -> None:
        statements = create_schema_sql(AuthorModel().get_schema(), SQLiteDialect())
        self.assertEqual(len(statements), 2)
        self.assertEqual(
            statements[1], 'CREATE UNIQUE INDEX "uidx_author_name" ON "author" ("name");'
        )


class BlogDatabase(ModelDatabase):
    database_name = "blog"
    models = (AuthorModel, BlogOrmModel, TagModel)


class NamelessDatabase(ModelDatabase):
    models = (AuthorModel,)


class ModelDatabaseTests(unittest.TestCase):
    def setUp(self) -> None:
        reset_class_caches()

    def test_schema_aggregates_models(self) -> None:
        schema = BlogDatabase().get_schema()
        self.assertEqual(schema.name, "blog")
        self.assertEqual([t.name for t in schema.tables], ["author", "blog_orm", "tag"])
        self.assertIs(BlogDatabase().get_schema(), schema)

    def test_create_schema_sql_orders_tables(self) -> None:
        statements = BlogDatabase().create_schema_sql(SQLiteDialect())
        self.assertTrue(statements[0].startswith('CREATE TABLE "author"'))
        self.assertTrue(any(sql.startswith('CREATE TABLE "tag"') for sql in statements))

    def test_apply_creates_every_table(self) -> None:
        db = sqlite_database()
        try:
            BlogDatabase().apply(db)
            rows = db.fetchall(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%'"
            )
        finally:
            db.close()
        self.assertEqual(sorted(row["name"] for row in rows), ["author", "blog_orm", "tag"])

    def test_missing_name_raises(self) -> None:
        with self.assertRaises(SchemaDeclarationError):
            NamelessDatabase().get_schema()


if __name__ == "__main__":
    unittest.main()
