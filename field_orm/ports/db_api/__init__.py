"""DB-API adapter and SQL dialects."""

from .database import Database
from .dialects import Dialect, MySQLDialect, PostgresDialect, SQLiteDialect

__all__ = ["Database", "Dialect", "MySQLDialect", "PostgresDialect", "SQLiteDialect"]
