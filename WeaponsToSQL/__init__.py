from .core.normalizer import WeaponsNormalizer
from .core.analyzer import WeaponDocumentAnalyzer
from .core.table_builder import TableBuilder, NormalizedTables
from .database.connection import DatabaseConfig
from .database.schema import SchemaManager
from .database.sql_writer import SqlServerWeaponsWriter
from .database.validator import DataValidator, ValidationReport
from .errors import WeaponsToSQLError, DocumentError, LoadError, ConfigurationError

from .main.weapons_to_sql import WeaponsDatabaseManager, generate_sql_script, process_weapons_to_sql_server

__all__ = [
    "WeaponsDatabaseManager",
    "process_weapons_to_sql_server",
    "generate_sql_script",
    "WeaponsNormalizer",
    "WeaponDocumentAnalyzer",
    "TableBuilder",
    "NormalizedTables",
    "DatabaseConfig",
    "SchemaManager",
    "SqlServerWeaponsWriter",
    "DataValidator",
    "ValidationReport",
    "WeaponsToSQLError",
    "DocumentError",
    "LoadError",
    "ConfigurationError",
]
