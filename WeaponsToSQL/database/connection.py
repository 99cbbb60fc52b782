# Contains SQL Server connection settings and transaction handling
import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pyodbc
from dotenv import load_dotenv

from ..errors import ConfigurationError
from .script import ScriptCursor
from .tables import make_sql_safe

logger = logging.getLogger(__name__)


@dataclass
class DatabaseConfig:
    """Settings for the SQL Server database the weapons are loaded into."""

    server: str
    username: str
    password: str
    database: str
    port: int = 1433
    schema: str = "dbo"
    driver: str = "ODBC Driver 17 for SQL Server"

    @property
    def conn_str(self) -> str:
        return (
            f"DRIVER={{{self.driver}}};SERVER={self.server},{self.port};"
            f"DATABASE={self.database};UID={self.username};PWD={self.password}"
        )

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "DatabaseConfig":
        """
        Build settings from WEAPONS_DB_* environment variables.

        A .env file is loaded first if present; variables already set in the
        environment win over it.

        Raises:
            ConfigurationError: If a required variable is missing
        """
        path = Path(env_file) if env_file else Path(".env")
        if path.exists():
            load_dotenv(dotenv_path=path)

        missing = [
            name for name in ("WEAPONS_DB_SERVER", "WEAPONS_DB_USER", "WEAPONS_DB_PASSWORD", "WEAPONS_DB_NAME")
            if not os.environ.get(name)
        ]
        if missing:
            raise ConfigurationError(f"Missing database settings: {', '.join(missing)}")

        try:
            port = int(os.environ.get("WEAPONS_DB_PORT", "1433"))
        except ValueError:
            raise ConfigurationError("WEAPONS_DB_PORT must be an integer")

        return cls(
            server=os.environ["WEAPONS_DB_SERVER"],
            username=os.environ["WEAPONS_DB_USER"],
            password=os.environ["WEAPONS_DB_PASSWORD"],
            database=os.environ["WEAPONS_DB_NAME"],
            port=port,
            schema=os.environ.get("WEAPONS_DB_SCHEMA", "dbo"),
            driver=os.environ.get("WEAPONS_DB_DRIVER", "ODBC Driver 17 for SQL Server"),
        )


def connect(conn_str):
    """Open a pyodbc connection with autocommit off, so every operation is one transaction."""
    return pyodbc.connect(conn_str, autocommit=False)


@contextmanager
def transaction(connect_fn, conn_str):
    """
    Yield a cursor whose work is committed on success and rolled back on error.

    The connection is always closed afterwards.
    """
    conn = connect_fn(conn_str)
    try:
        cursor = conn.cursor()
        yield cursor
        conn.commit()
    except Exception:
        logger.debug("Rolling back transaction")
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def read_only(connect_fn, conn_str):
    """Yield a cursor for queries; whatever happened is rolled back afterwards."""
    conn = connect_fn(conn_str)
    try:
        yield conn.cursor()
    finally:
        conn.rollback()
        conn.close()


class SqlServerClient:
    """
    Shared wiring for classes that talk to the weapons database.

    With collect_script=True nothing is executed: statements are rendered into
    `sql_script` instead.
    """

    def __init__(self, conn_str=None, schema="dbo", collect_script=False, connect_fn=None):
        """
        Args:
            conn_str: ODBC connection string for SQL Server
            schema: SQL Server schema holding the weapon tables
            collect_script: If True, collect SQL script instead of executing
            connect_fn: Callable taking conn_str and returning a DB-API connection
        """
        if conn_str is None and not collect_script:
            raise ConfigurationError("A connection string is required unless collecting a script")
        self.conn_str = conn_str
        self.schema = make_sql_safe(schema)
        self.collect_script = collect_script
        self.connect_fn = connect_fn or connect
        self.sql_script = []

    @contextmanager
    def _transaction(self):
        if self.collect_script:
            self.sql_script.append("BEGIN TRANSACTION;")
            self.sql_script.append("")
            yield ScriptCursor(self.sql_script)
            self.sql_script.append("COMMIT TRANSACTION;")
            self.sql_script.append("")
        else:
            with transaction(self.connect_fn, self.conn_str) as cursor:
                yield cursor

    def script(self):
        """The statements collected so far, as one script."""
        return "\n".join(self.sql_script)
