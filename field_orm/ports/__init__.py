"""Adapter implementations for the core ports."""

from .db_api import Database, Dialect, MySQLDialect, PostgresDialect, SQLiteDialect

__all__ = ["Database", "Dialect", "MySQLDialect", "PostgresDialect", "SQLiteDialect"]
