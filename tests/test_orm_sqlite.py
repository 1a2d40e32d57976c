from __future__ import annotations

import unittest
from datetime import datetime

from field_orm import (
    DeleteError,
    InsertError,
    NotFoundError,
    OrmError,
    OrmModel,
    ResolvedError,
    UnresolvedError,
    UpdateError,
)
from tests.orm_test_models import (
    AuthorModel,
    BlogOrmModel,
    LogEntryModel,
    PlaylistItemModel,
    TagModel,
    configure,
    install,
    sqlite_database,
)


class OrmSqliteTestBase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = sqlite_database()
        install(self.db, AuthorModel, BlogOrmModel, TagModel, LogEntryModel, PlaylistItemModel)
        configure(self.db)

    def tearDown(self) -> None:
        OrmModel.result_set_factory = None
        self.db.close()

    def _insert_blog(self, title: str, **values) -> BlogOrmModel:
        blog = BlogOrmModel()
        blog.title.value = title
        for name, value in values.items():
            blog.get_field(name).value = value
        blog.insert()
        return blog


class InsertTests(OrmSqliteTestBase):
    def test_insert_echoes_generated_key_and_cleans_model(self) -> None:
        blog = BlogOrmModel()
        blog.title.value = "Hello"
        result = blog.insert()

        self.assertEqual(result.last_inserted_id(), "1")
        self.assertEqual(blog.id.value, 1)
        self.assertFalse(blog.is_dirty)
        self.assertFalse(blog.title.is_dirty)
        self.assertFalse(blog.id.is_dirty)

        second = self._insert_blog("World")
        self.assertEqual(second.id.value, 2)

    def test_insert_with_explicit_natural_key_keeps_it(self) -> None:
        tag = TagModel()
        tag.code.value = "py"
        tag.label.value = "Python"
        tag.insert()

        self.assertEqual(tag.code.value, "py")
        stored = TagModel().find(TagModel().code.eq("py")).first()
        self.assertEqual(stored.label.value, "Python")

    def test_insert_without_primary_key(self) -> None:
        entry = LogEntryModel()
        entry.message.value = "started"
        result = entry.insert()
        self.assertEqual(result.last_inserted_id(), "1")
        self.assertFalse(entry.is_dirty)

    def test_insert_failure_is_insert_error(self) -> None:
        blog = BlogOrmModel()
        blog.body.value = "no title"
        with self.assertRaises(InsertError) as ctx:
            blog.insert()
        self.assertIsNotNone(ctx.exception.__cause__)

    def test_result_set_refuses_second_execution(self) -> None:
        blog = BlogOrmModel()
        blog.title.value = "once"
        result = blog.new_insert()
        result.exec()
        with self.assertRaises(ResolvedError):
            result.exec()

    def test_last_inserted_id_requires_resolution(self) -> None:
        blog = BlogOrmModel()
        blog.title.value = "pending"
        with self.assertRaises(UnresolvedError):
            blog.new_insert().last_inserted_id()

    def test_exec_raw(self) -> None:
        result = BlogOrmModel().new_insert(with_dirty_fields=False)
        last_id = result.exec_raw(
            'INSERT INTO "blog_orm" ("title") VALUES (:title)', {"title": "raw"}
        )
        self.assertEqual(last_id, "1")


class SelectTests(OrmSqliteTestBase):
    def test_find_first_hydrates_persisted_model(self) -> None:
        created = datetime(2024, 1, 2, 3, 4, 5)
        self._insert_blog("Hello", created_at=created, published=True)

        proto = BlogOrmModel()
        blog = proto.find(proto.title.eq("Hello")).first()

        self.assertEqual(blog.id.value, 1)
        self.assertEqual(blog.created_at.value, created)
        self.assertIs(blog.published.value, True)
        self.assertIsNone(blog.body.value)
        self.assertFalse(blog.is_new)
        self.assertFalse(blog.is_dirty)

    def test_first_without_rows_raises_and_stays_unresolved(self) -> None:
        proto = BlogOrmModel()
        result = proto.find(proto.id.eq(999))
        with self.assertRaises(NotFoundError):
            result.first()
        self.assertFalse(result.is_resolved())
        with self.assertRaises(UnresolvedError):
            result.result_first()

    def test_all_with_in_and_or_criteria(self) -> None:
        for title in ("a", "b", "c", "d"):
            self._insert_blog(title)

        proto = BlogOrmModel()
        ids = [blog.id.value for blog in proto.find(proto.id.in_([1, 3])).order_by("id").all()]
        self.assertEqual(ids, [1, 3])

        either = proto.find(proto.title.eq("b"), proto.title.eq("d", and_=False)).all()
        self.assertEqual(sorted(blog.title.value for blog in either), ["b", "d"])

        none = proto.find(proto.title.eq("zzz")).all()
        self.assertEqual(none, [])

    def test_resolution_state_machine(self) -> None:
        self._insert_blog("x")
        result = BlogOrmModel().find()

        with self.assertRaises(UnresolvedError):
            result.result_all()

        first = result.first()
        self.assertIs(result.result_first(), first)
        self.assertEqual(result.result_all(), [first])
        with self.assertRaises(ResolvedError):
            result.first()
        with self.assertRaises(ResolvedError):
            result.all()

        self._insert_blog("y")
        self.assertEqual(len(result.unresolve().all()), 2)

    def test_limit_offset_and_like(self) -> None:
        for title in ("alpha", "beta", "alpine", "gamma"):
            self._insert_blog(title)

        proto = BlogOrmModel()
        page = proto.find(proto.title.like("al%")).order_by("title").limit(1).offset(1).all()
        self.assertEqual([blog.title.value for blog in page], ["alpine"])

        others = proto.find(proto.title.not_like("al%")).order_by("title").all()
        self.assertEqual([blog.title.value for blog in others], ["beta", "gamma"])

    def test_null_criteria(self) -> None:
        self._insert_blog("with body", body="text")
        self._insert_blog("without body")

        proto = BlogOrmModel()
        self.assertEqual(
            [b.title.value for b in proto.find(proto.body.is_null()).all()], ["without body"]
        )
        self.assertEqual(
            [b.title.value for b in proto.find(proto.body.is_not_null()).all()], ["with body"]
        )

    def test_fetch_raw(self) -> None:
        self._insert_blog("raw")
        result = BlogOrmModel().find()
        row = result.fetch_raw('SELECT "title" FROM "blog_orm" WHERE "id" = :id', {"id": 1})
        self.assertEqual(row["title"], "raw")
        with self.assertRaises(NotFoundError):
            result.fetch_raw('SELECT "title" FROM "blog_orm" WHERE "id" = :id', {"id": 2})
        self.assertEqual(len(result.fetch_all_raw('SELECT * FROM "blog_orm"')), 1)


class UpdateTests(OrmSqliteTestBase):
    def test_update_by_pk_writes_dirty_fields(self) -> None:
        self._insert_blog("old")
        proto = BlogOrmModel()
        blog = proto.find(proto.id.eq(1)).first()

        blog.title.value = "new"
        result = blog.update_by_pk()

        self.assertEqual(result.affected_rows(), 1)
        self.assertFalse(blog.is_dirty)
        self.assertEqual(proto.find(proto.id.eq(1)).first().title.value, "new")

    def test_update_criteria_on_changed_column(self) -> None:
        self._insert_blog("old")
        self._insert_blog("other")

        blog = BlogOrmModel()
        blog.title.value = "renamed"
        result = blog.update(blog.title.eq("old"))

        self.assertEqual(result.affected_rows(), 1)
        titles = sorted(b.title.value for b in BlogOrmModel().find().all())
        self.assertEqual(titles, ["other", "renamed"])

    def test_nothing_to_update(self) -> None:
        self._insert_blog("clean")
        blog = BlogOrmModel().find().first()
        with self.assertRaises(UpdateError) as ctx:
            blog.update_by_pk()
        self.assertEqual(str(ctx.exception), "Nothing to update")

    def test_update_without_primary_key(self) -> None:
        entry = LogEntryModel()
        entry.message.value = "x"
        with self.assertRaises(UpdateError):
            entry.update_by_pk()

    def test_affected_rows_requires_resolution(self) -> None:
        blog = BlogOrmModel()
        blog.title.value = "x"
        with self.assertRaises(UnresolvedError):
            blog.new_update(blog.id.eq(1)).affected_rows()


class DeleteTests(OrmSqliteTestBase):
    def test_delete_by_pk(self) -> None:
        blog = self._insert_blog("bye")
        result = blog.delete_by_pk()

        self.assertEqual(result.affected_rows(), 1)
        self.assertTrue(blog.is_deleted)
        self.assertEqual(BlogOrmModel().find().all(), [])

    def test_delete_with_criteria_counts_rows(self) -> None:
        for title in ("a", "b", "c"):
            self._insert_blog(title)
        proto = BlogOrmModel()
        result = proto.delete(proto.id.gte(2))
        self.assertEqual(result.affected_rows(), 2)

    def test_delete_failure_is_delete_error(self) -> None:
        class MissingTableModel(BlogOrmModel):
            table_name = "does_not_exist"

        with self.assertRaises(DeleteError):
            MissingTableModel().delete()


class ReservedWordColumnTests(OrmSqliteTestBase):
    def _insert_item(self, order: int, group=None) -> PlaylistItemModel:
        item = PlaylistItemModel()
        item.order.value = order
        item.group.value = group
        item.insert()
        return item

    def test_find_by_reserved_word_column(self) -> None:
        self._insert_item(3, "rock")
        self._insert_item(5)

        proto = PlaylistItemModel()
        found = proto.find(proto.order.eq(3)).first()
        self.assertEqual(found.group.value, "rock")

        rows = proto.find(proto.order.in_([3, 5]), proto.group.is_null()).all()
        self.assertEqual([item.order.value for item in rows], [5])

    def test_update_and_delete_by_pk_with_reserved_word_columns(self) -> None:
        item = self._insert_item(1)
        item.order.value = 2
        self.assertEqual(item.update_by_pk().affected_rows(), 1)

        proto = PlaylistItemModel()
        self.assertEqual(proto.find(proto.order.eq(2)).first().id.value, item.id.value)
        self.assertEqual(item.delete_by_pk().affected_rows(), 1)
        self.assertEqual(proto.find().all(), [])


class ConfigurationTests(unittest.TestCase):
    def setUp(self) -> None:
        OrmModel.result_set_factory = None

    def test_missing_factory(self) -> None:
        blog = BlogOrmModel()
        blog.title.value = "x"
        with self.assertRaises(OrmError):
            blog.find()
        with self.assertRaises(InsertError):
            blog.insert()
        with self.assertRaises(UpdateError):
            blog.update_by_pk()


if __name__ == "__main__":
    unittest.main()
