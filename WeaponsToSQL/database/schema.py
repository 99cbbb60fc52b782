# Contains schema operations for the weapons database
import logging

from .connection import SqlServerClient
from .tables import (
    INDEXES,
    TABLES,
    create_index_sql,
    create_schema_sql,
    create_sequence_sql,
    create_table_sql,
    sequence_name,
)

logger = logging.getLogger(__name__)


class SchemaManager(SqlServerClient):
    """
    Creates, drops and empties the weapon tables.

    Every statement is guarded (IF NOT EXISTS / IF EXISTS), so each operation
    can be repeated safely.
    """

    def create_schema(self):
        """Create the schema, sequences, tables and indexes that are missing."""
        logger.info("Creating database schema", extra={"schema": self.schema})

        with self._transaction() as cursor:
            self._create_schema(cursor)

        logger.info("Database schema created successfully")

    def reset_database(self):
        """
        Drop every table and sequence, then create the schema again.

        Tables are dropped in reverse dependency order so no foreign key is left
        pointing at a dropped table.
        """
        logger.info("Resetting database (drop and recreate schema)", extra={"schema": self.schema})

        with self._transaction() as cursor:
            for table in reversed(TABLES):
                cursor.execute(f"DROP TABLE IF EXISTS [{self.schema}].[{table.name}]")
            for table in TABLES:
                sequence = sequence_name(table)
                if sequence:
                    cursor.execute(f"DROP SEQUENCE IF EXISTS [{self.schema}].[{sequence}]")

        logger.info("All tables and sequences dropped successfully")

        self.create_schema()

        logger.info("Database reset completed successfully")

    def clear_data(self):
        """Delete all rows, children first, in one transaction. Schema and sequences stay."""
        logger.info("Clearing all data from database", extra={"schema": self.schema})

        with self._transaction() as cursor:
            for table in reversed(TABLES):
                cursor.execute(f"DELETE FROM [{self.schema}].[{table.name}]")
                logger.debug(f"Cleared table '{table.name}'")

        logger.info("All data cleared successfully")

    def _create_schema(self, cursor):
        cursor.execute(create_schema_sql(self.schema))

        # Sequences first: the ID columns take their defaults from them
        for table in TABLES:
            sequence = sequence_name(table)
            if sequence:
                cursor.execute(create_sequence_sql(self.schema, sequence))

        for table in TABLES:
            cursor.execute(create_table_sql(self.schema, table))
            logger.debug(f"Ensured table '{table.name}'")

        for index, table_name, column in INDEXES:
            cursor.execute(create_index_sql(self.schema, index, table_name, column))
