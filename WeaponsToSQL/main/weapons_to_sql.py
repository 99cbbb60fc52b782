# Contains the main entry points
import argparse
import datetime
import json
import logging
import sys

import pyodbc

from ..core.normalizer import WeaponsNormalizer
from ..database.connection import DatabaseConfig, connect, read_only
from ..database.schema import SchemaManager
from ..database.sql_writer import SqlServerWeaponsWriter
from ..database.validator import DataValidator
from ..errors import WeaponsToSQLError

logger = logging.getLogger(__name__)


class WeaponsDatabaseManager:
    """
    Schema, load and validation operations for one weapons database.

    Each operation opens its own connection and runs as one transaction, so
    loads, resets and clears are all-or-nothing. Only one writer should run
    against a schema at a time.
    """

    def __init__(self, conn_str, schema="dbo", connect_fn=None):
        """
        Args:
            conn_str: ODBC connection string for SQL Server
            schema: SQL Server schema holding the weapon tables
            connect_fn: Callable taking conn_str and returning a DB-API connection
        """
        self.conn_str = conn_str
        self.schema = schema
        self.connect_fn = connect_fn or connect

    @classmethod
    def from_config(cls, config: DatabaseConfig, connect_fn=None):
        return cls(config.conn_str, schema=config.schema, connect_fn=connect_fn)

    def test_connection(self):
        with read_only(self.connect_fn, self.conn_str) as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        logger.info("Database connection test successful")

    def create_schema(self):
        self._schema_manager().create_schema()

    def reset_database(self):
        self._schema_manager().reset_database()

    def clear_data(self):
        self._schema_manager().clear_data()

    def populate(self, document):
        """
        Normalize a weapons document and load it in one transaction.

        The document is fully normalized before a connection is opened, so a
        malformed document never touches the database.

        Args:
            document: Weapons document as a dict, or JSON string/bytes

        Returns:
            NormalizedTables: The rows that were submitted, with their ID maps

        Raises:
            DocumentError: If the document is malformed
            LoadError: If a statement failed; nothing was committed
        """
        tables = WeaponsNormalizer.normalize_weapons_to_nf(document)
        writer = SqlServerWeaponsWriter(self.conn_str, schema=self.schema, connect_fn=self.connect_fn)
        writer.insert_tables(tables)
        return tables

    def populate_from_file(self, path):
        logger.info(f"Populating database from {path}")
        with open(path, "rb") as f:
            return self.populate(f.read())

    def validate_data(self):
        validator = DataValidator(self.conn_str, schema=self.schema, connect_fn=self.connect_fn)
        return validator.validate_data()

    def generate_script(self, document):
        return generate_sql_script(document, schema=self.schema)

    def _schema_manager(self):
        return SchemaManager(self.conn_str, schema=self.schema, connect_fn=self.connect_fn)


def generate_sql_script(document, schema="dbo"):
    """
    Render schema creation plus the full load of a document as one T-SQL script.

    No connection is needed.

    Args:
        document: Weapons document as a dict, or JSON string/bytes
        schema: SQL Server schema name

    Returns:
        str: The script
    """
    tables = WeaponsNormalizer.normalize_weapons_to_nf(document)

    schema_manager = SchemaManager(schema=schema, collect_script=True)
    schema_manager.sql_script.append(f"-- Generated SQL Script for {schema_manager.schema} schema")
    schema_manager.sql_script.append(f"-- Generated on {datetime.datetime.now()}")
    schema_manager.sql_script.append("")
    schema_manager.create_schema()

    writer = SqlServerWeaponsWriter(schema=schema, collect_script=True)
    writer.sql_script = schema_manager.sql_script
    writer.insert_tables(tables)

    return writer.script()


def process_weapons_to_sql_server(json_data, server, port, username, password, db, schema="dbo"):
    """
    Creates the weapon tables if needed and loads a weapons document into SQL Server.

    Args:
        json_data: The weapons document to load (string or dict)
        server: Server name or IP address
        port: port number
        username: Server username
        password: Server password
        db: Database name
        schema: SQL Server schema name

    Returns:
        NormalizedTables: The rows that were loaded, with their ID maps
    """
    config = DatabaseConfig(
        server=server, port=port, username=username, password=password, database=db, schema=schema
    )
    manager = WeaponsDatabaseManager.from_config(config)
    manager.create_schema()
    return manager.populate(json_data)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="weapons-to-sql",
        description="Load a weapons JSON document into normalized SQL Server tables",
    )
    parser.add_argument("--env-file", help="Path to a .env file with WEAPONS_DB_* settings (default: .env)")
    parser.add_argument("--schema", help="SQL Server schema (overrides WEAPONS_DB_SCHEMA)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("create-schema", help="Create missing tables and indexes")
    populate = commands.add_parser("populate", help="Load a weapons JSON file")
    populate.add_argument("json", help="Weapons JSON file")
    commands.add_parser("reset", help="Drop and recreate all tables")
    commands.add_parser("clear", help="Delete all rows, keep the schema")
    commands.add_parser("validate", help="Check row counts and references")
    script = commands.add_parser("script", help="Print the T-SQL that would create and load the tables")
    script.add_argument("json", help="Weapons JSON file")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "script":
            with open(args.json, "rb") as f:
                print(generate_sql_script(f.read(), schema=args.schema or "dbo"))
            return 0

        config = DatabaseConfig.from_env(args.env_file)
        if args.schema:
            config.schema = args.schema
        manager = WeaponsDatabaseManager.from_config(config)

        if args.command == "create-schema":
            manager.create_schema()
        elif args.command == "populate":
            manager.populate_from_file(args.json)
        elif args.command == "reset":
            manager.reset_database()
        elif args.command == "clear":
            manager.clear_data()
        elif args.command == "validate":
            report = manager.validate_data()
            print(json.dumps(report.to_dict(), indent=2))
            return 0 if report.is_valid else 1
    except (WeaponsToSQLError, pyodbc.Error, OSError) as e:
        logger.error(str(e))
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
