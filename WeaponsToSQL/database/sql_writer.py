# Contains SQL Server load operations
import logging

import pandas as pd

from ..core.table_builder import INSERT_ORDER
from ..errors import LoadError
from .connection import SqlServerClient
from .tables import TABLES_BY_NAME, insert_ignore_sql

logger = logging.getLogger(__name__)


class SqlServerWeaponsWriter(SqlServerClient):
    """
    Inserts normalized weapon tables into SQL Server, or generates the SQL script.

    All rows of one load go through a single transaction: either every table is
    written or, on the first failing statement, nothing is.
    """

    def insert_tables(self, tables):
        """
        Insert every row set in dependency order.

        Rows whose natural key already exists are left as they are; the insert
        is simply skipped.

        Args:
            tables: Row sets keyed by table name (see WeaponsNormalizer)

        Returns:
            dict: Number of rows submitted per table

        Raises:
            LoadError: If any statement fails; the transaction has been rolled back
        """
        submitted = {}
        logger.info("Loading normalized weapon tables", extra={"schema": self.schema})

        with self._transaction() as cursor:
            for table_name in INSERT_ORDER:
                rows = tables.get(table_name) or []
                self._insert_rows(cursor, table_name, rows)
                submitted[table_name] = len(rows)
                logger.debug(f"Inserted {len(rows)} rows into '{table_name}'")

        logger.info(
            "Database populated successfully",
            extra={"row_counts": submitted, "collect_script": self.collect_script}
        )
        return submitted

    def _insert_rows(self, cursor, table_name, rows):
        table = TABLES_BY_NAME[table_name]
        insert_sql = insert_ignore_sql(self.schema, table)

        for row in rows:
            params = [self._clean_value(row.get(column)) for column in table.columns]
            params += [self._clean_value(row.get(column)) for column in table.key_columns]
            try:
                cursor.execute(insert_sql, params)
            except Exception as e:
                logger.error(
                    f"Insert into '{table_name}' failed, rolling back the load",
                    extra={"table": table_name, "row": row, "error": str(e)}
                )
                raise LoadError(table_name, row, e) from e

    @staticmethod
    def _clean_value(value):
        """Map missing values (None, NaN) to None so the driver sends NULL."""
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return None
        return value
