"""Error hierarchy raised by the ORM core and its driver adapter.

Every error derives from `OrmError`, so callers can catch everything at once
or pick the narrowest kind. Wrapped errors always chain the original cause.
"""

from __future__ import annotations

from typing import Any, Optional


class OrmError(Exception):
    """Base class for all ORM errors."""


class SchemaDeclarationError(OrmError):
    """Raised when table or column metadata cannot be derived."""


class DuplicateColumnError(SchemaDeclarationError):
    """Raised when a table declares the same column twice."""


class DuplicateIndexError(SchemaDeclarationError):
    """Raised when a table declares the same index twice."""


class DuplicateRelationError(SchemaDeclarationError):
    """Raised when a table declares the same relation twice."""


class DuplicateTableError(SchemaDeclarationError):
    """Raised when a database declares the same table twice."""


class FieldNotFoundError(OrmError, LookupError):
    """Raised when a model has no field for a column or no primary key."""


class FieldValueError(OrmError, ValueError):
    """Raised when a raw value cannot be converted to a field type."""


class NotFoundError(OrmError):
    """Raised when a read expected at least one row and got none."""


class ResultSetStateError(OrmError):
    """Base class for result set state misuse."""


class ResolvedError(ResultSetStateError):
    """Raised when executing a result set that was already resolved."""


class UnresolvedError(ResultSetStateError):
    """Raised when reading results from a result set not yet resolved."""


class QueryExecutionError(OrmError):
    """Raised when the driver fails to execute a statement.

    Attributes:
        code: Driver-specific error code when one is available.
    """

    def __init__(self, message: str, code: Optional[Any] = None):
        super().__init__(message)
        self.code = code


class InsertError(QueryExecutionError):
    """Raised when an insert fails."""


class UpdateError(QueryExecutionError):
    """Raised when an update fails."""


class DeleteError(QueryExecutionError):
    """Raised when a delete fails."""


class CacheStorageError(OrmError):
    """Raised by cache storage backends."""


class TransactionError(OrmError):
    """Raised when a transaction operation is called in an invalid state."""
