"""Model base class: a named collection of registered fields.

Subclasses declare their fields in `__init__`, after calling the base
constructor, and accept an optional raw row to hydrate from:

    class BlogModel(Model):
        def __init__(self, row=None):
            super().__init__()
            self.id = IntField(self, "id", row, unsigned=True, autoincrement=True)
            self.title = VarCharField(self, "title", row)

Everything structural (table name, columns, schema, field order) is derived
from the first instance and cached per concrete class.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from .errors import DuplicateColumnError, FieldNotFoundError, SchemaDeclarationError
from .registry import ClassCache
from .schema import TableSchema
from .schema_columns import Column
from .schema_foreign_keys import ForeignKey
from .schema_indexes import Index
from .types import RowMapping

if TYPE_CHECKING:
    from .fields import Field

M = TypeVar("M", bound="Model")

_MODEL_SUFFIX = "Model"
_WORDS = re.compile(r"[A-Z][A-Z0-9]*(?=$|[A-Z][a-z0-9])|[A-Za-z][a-z0-9]+")

_table_names: ClassCache[str] = ClassCache("model table names")
_field_names: ClassCache[Tuple[str, ...]] = ClassCache("model field names")
_columns: ClassCache[Tuple[Column, ...]] = ClassCache("model columns")
_schemas: ClassCache[TableSchema] = ClassCache("model schemas")


def derive_table_name(class_name: str) -> str:
    """Turn `BlogOrmModel` into `blog_orm`.

    Raises:
        SchemaDeclarationError: When no word can be extracted from the name.
    """

    base = class_name
    if base.endswith(_MODEL_SUFFIX) and len(base) > len(_MODEL_SUFFIX):
        base = base[: -len(_MODEL_SUFFIX)]
    words = _WORDS.findall(base)
    if not words:
        raise SchemaDeclarationError(f"Can not derive a table name from {class_name!r}.")
    return "_".join(word.lower() for word in words)


class Model:
    """Base class for table-backed records."""

    table_name: ClassVar[Optional[str]] = None
    engine: ClassVar[Optional[str]] = None
    charset: ClassVar[Optional[str]] = None
    collation: ClassVar[Optional[str]] = None

    def __init__(self) -> None:
        self._fields: Dict[str, "Field"] = {}
        self.is_dirty = False
        self.is_new = True

    @classmethod
    def get_indexes(cls) -> Sequence[Index]:
        return ()

    @classmethod
    def get_relations(cls) -> Sequence[ForeignKey]:
        return ()

    def _register_field(self, field: "Field") -> None:
        fields = self.__dict__.get("_fields")
        if fields is None:
            raise SchemaDeclarationError(
                f"{type(self).__name__} declares fields before calling Model.__init__()."
            )
        if field.name in fields:
            raise DuplicateColumnError(
                f"Duplicate column {field.name!r} in model {type(self).__name__}."
            )
        fields[field.name] = field

    def get_table_name(self) -> str:
        cls = type(self)
        if cls.table_name:
            return cls.table_name
        return _table_names.get_or_create(cls, lambda: derive_table_name(cls.__name__))

    def get_fields(self) -> Dict[str, "Field"]:
        """Return fields keyed by column name, in declaration order."""

        names = _field_names.get_or_create(type(self), lambda: tuple(self._fields))
        return {name: self._fields[name] for name in names}

    def get_field(self, name: str) -> "Field":
        try:
            return self._fields[name]
        except KeyError:
            raise FieldNotFoundError(
                f"Field {name} does not exist in model {type(self).__name__}."
            ) from None

    def get_columns(self) -> Tuple[Column, ...]:
        return _columns.get_or_create(
            type(self),
            lambda: tuple(field.get_column() for field in self.get_fields().values()),
        )

    def get_column_names(self) -> List[str]:
        return [column.name for column in self.get_columns()]

    def get_schema(self) -> TableSchema:
        """Return the table schema, built once per model class."""

        cls = type(self)
        return _schemas.get_or_create(
            cls,
            lambda: TableSchema(
                self.get_table_name(),
                self.get_columns(),
                tuple(cls.get_indexes()),
                tuple(cls.get_relations()),
                engine=cls.engine,
                charset=cls.charset,
                collation=cls.collation,
            ),
        )

    def get_pk(self) -> "Field":
        """Return the primary key field.

        The autoincrement field wins; otherwise a single-column primary key
        index names the field.

        Raises:
            FieldNotFoundError: When neither exists.
        """

        for field in self.get_fields().values():
            if field.get_column().autoincrement:
                return field

        pk = self.get_schema().primary_key
        if pk is not None and len(pk.fields) == 1:
            return self.get_field(pk.fields[0])
        raise FieldNotFoundError(f"Can not find primary key on model {type(self).__name__}.")

    def get_dirty_fields(self) -> Dict[str, "Field"]:
        return {name: field for name, field in self.get_fields().items() if field.is_dirty}

    def dirty_fields_to_query(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for field in self.get_dirty_fields().values():
            values.update(field.to_query())
        return values

    def new(self: M) -> M:
        return type(self)()

    def new_from_row(self: M, row: RowMapping) -> M:
        """Build a persisted (`is_new=False`), clean instance from a row."""

        model = type(self)(row)
        model.is_new = False
        return model

    def new_from_rows(self: M, rows: Iterable[RowMapping]) -> List[M]:
        return [self.new_from_row(row) for row in rows]

    def undirty(self) -> None:
        for field in self._fields.values():
            field.is_dirty = False
        self.is_dirty = False

    def __repr__(self) -> str:
        values = ", ".join(f"{name}={field.value!r}" for name, field in self._fields.items())
        return f"{type(self).__name__}({values})"
