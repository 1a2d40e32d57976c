"""Groups model classes into one database schema."""

from __future__ import annotations

from typing import ClassVar, List, Optional, Sequence, Type

from .contracts import DatabasePort, DialectPort
from .errors import SchemaDeclarationError
from .models import Model
from .registry import ClassCache
from .schema import DatabaseSchema, TableSchema, database_schema_sql

_database_schemas: ClassCache[DatabaseSchema] = ClassCache("database schemas")


class ModelDatabase:
    """Declarative database made of model classes.

    Example:
        class BlogDatabase(ModelDatabase):
            database_name = "blog"
            models = (AuthorModel, PostModel)
    """

    database_name: ClassVar[str] = ""
    models: ClassVar[Sequence[Type[Model]]] = ()
    engine: ClassVar[Optional[str]] = None
    charset: ClassVar[Optional[str]] = None
    collation: ClassVar[Optional[str]] = None

    def get_tables(self) -> List[TableSchema]:
        return [model_cls().get_schema() for model_cls in self.models]

    def get_schema(self) -> DatabaseSchema:
        """Return the database schema, built once per subclass.

        Raises:
            SchemaDeclarationError: When the name is missing or a table is
                declared twice.
        """

        return _database_schemas.get_or_create(type(self), self._build_schema)

    def _build_schema(self) -> DatabaseSchema:
        if not self.database_name:
            raise SchemaDeclarationError(f"{type(self).__name__} has no database_name.")
        return DatabaseSchema(
            self.database_name,
            tuple(self.get_tables()),
            engine=self.engine,
            charset=self.charset,
            collation=self.collation,
        )

    def create_schema_sql(self, dialect: DialectPort, *, if_not_exists: bool = False) -> List[str]:
        return database_schema_sql(self.get_schema(), dialect, if_not_exists=if_not_exists)

    def apply(self, db: DatabasePort, *, if_not_exists: bool = False) -> List[str]:
        """Create every table and index in one transaction."""

        statements = self.create_schema_sql(db.dialect, if_not_exists=if_not_exists)
        with db.transaction():
            for sql in statements:
                db.execute(sql)
        return statements
