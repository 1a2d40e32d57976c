"""Public core API for fields, models, statements, result sets, and repositories."""

from .cache import InMemoryCacheStorage
from .criteria import Criteria
from .errors import (
    CacheStorageError,
    DeleteError,
    DuplicateColumnError,
    DuplicateIndexError,
    DuplicateRelationError,
    DuplicateTableError,
    FieldNotFoundError,
    FieldValueError,
    InsertError,
    NotFoundError,
    OrmError,
    QueryExecutionError,
    ResolvedError,
    ResultSetStateError,
    SchemaDeclarationError,
    TransactionError,
    UnresolvedError,
    UpdateError,
)
from .field_types import (
    BigIntField,
    BinaryField,
    BoolField,
    CharField,
    DateField,
    DateTimeField,
    DecimalField,
    DoubleField,
    EnumField,
    FloatField,
    IntField,
    JsonField,
    MediumIntField,
    SetField,
    SmallIntField,
    TextField,
    TimestampField,
    TinyIntField,
    VarBinaryField,
    VarCharField,
    YearField,
)
from .fields import Field, ScalarField
from .model_database import ModelDatabase
from .models import Model, derive_table_name
from .orm import OrmModel
from .registry import ClassCache, reset_class_caches
from .repository import CacheRepository, RawRepository, Repository
from .result_sets import (
    DeleteResultSet,
    InsertResultSet,
    ResultSetFactory,
    SelectResultSet,
    UpdateResultSet,
)
from .schema import (
    DatabaseSchema,
    TableSchema,
    apply_schema,
    create_indexes_sql,
    create_schema_sql,
    create_table_sql,
    database_schema_sql,
)
from .schema_columns import CURRENT_TIMESTAMP, Column, ColumnType
from .schema_foreign_keys import ForeignKey
from .schema_indexes import Index, PrimaryKey, UniqueKey
from .statements import Delete, Insert, QueryFactory, Select, Update, apply_criteria

__all__ = [
    "BigIntField",
    "BinaryField",
    "BoolField",
    "CURRENT_TIMESTAMP",
    "CacheRepository",
    "CacheStorageError",
    "CharField",
    "ClassCache",
    "Column",
    "ColumnType",
    "Criteria",
    "DatabaseSchema",
    "DateField",
    "DateTimeField",
    "DecimalField",
    "Delete",
    "DeleteError",
    "DeleteResultSet",
    "DoubleField",
    "DuplicateColumnError",
    "DuplicateIndexError",
    "DuplicateRelationError",
    "DuplicateTableError",
    "EnumField",
    "Field",
    "FieldNotFoundError",
    "FieldValueError",
    "FloatField",
    "ForeignKey",
    "InMemoryCacheStorage",
    "Index",
    "Insert",
    "InsertError",
    "InsertResultSet",
    "IntField",
    "JsonField",
    "MediumIntField",
    "Model",
    "ModelDatabase",
    "NotFoundError",
    "OrmError",
    "OrmModel",
    "PrimaryKey",
    "QueryExecutionError",
    "QueryFactory",
    "RawRepository",
    "Repository",
    "ResolvedError",
    "ResultSetFactory",
    "ResultSetStateError",
    "ScalarField",
    "SchemaDeclarationError",
    "Select",
    "SelectResultSet",
    "SetField",
    "SmallIntField",
    "TableSchema",
    "TextField",
    "TimestampField",
    "TinyIntField",
    "TransactionError",
    "UniqueKey",
    "UnresolvedError",
    "Update",
    "UpdateError",
    "UpdateResultSet",
    "VarBinaryField",
    "VarCharField",
    "YearField",
    "apply_criteria",
    "apply_schema",
    "create_indexes_sql",
    "create_schema_sql",
    "create_table_sql",
    "database_schema_sql",
    "derive_table_name",
    "reset_class_caches",
]
