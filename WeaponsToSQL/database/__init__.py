from .connection import DatabaseConfig, SqlServerClient
from .schema import SchemaManager
from .sql_writer import SqlServerWeaponsWriter
from .validator import DataValidator, ValidationReport

__all__ = [
    'DatabaseConfig',
    'SqlServerClient',
    'SchemaManager',
    'SqlServerWeaponsWriter',
    'DataValidator',
    'ValidationReport',
]
