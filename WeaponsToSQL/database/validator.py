# Contains post-load integrity checks
import logging
from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd

from ..errors import ConfigurationError
from .connection import connect, read_only
from .tables import TABLES, count_rows_sql, make_sql_safe

logger = logging.getLogger(__name__)

# (query, description); each query counts the rows breaking one foreign key rule
INTEGRITY_CHECKS = (
    (
        "SELECT COUNT_BIG(*) FROM [{schema}].[weapons] w WHERE NOT EXISTS "
        "(SELECT 1 FROM [{schema}].[categories] c WHERE c.[category_id] = w.[category_id])",
        "weapons reference non-existent categories",
    ),
    (
        "SELECT COUNT_BIG(*) FROM [{schema}].[configurations] c WHERE NOT EXISTS "
        "(SELECT 1 FROM [{schema}].[weapons] w WHERE w.[weapon_id] = c.[weapon_id]) "
        "OR NOT EXISTS (SELECT 1 FROM [{schema}].[barrels] b WHERE b.[barrel_id] = c.[barrel_id]) "
        "OR NOT EXISTS (SELECT 1 FROM [{schema}].[ammo_types] a WHERE a.[ammo_id] = c.[ammo_id])",
        "configurations have invalid references",
    ),
    (
        "SELECT COUNT_BIG(*) FROM [{schema}].[config_dropoffs] cd WHERE NOT EXISTS "
        "(SELECT 1 FROM [{schema}].[configurations] c WHERE c.[config_id] = cd.[config_id])",
        "dropoffs reference non-existent configurations",
    ),
    (
        "SELECT COUNT_BIG(*) FROM [{schema}].[weapon_ammo_stats] was WHERE NOT EXISTS "
        "(SELECT 1 FROM [{schema}].[weapons] w WHERE w.[weapon_id] = was.[weapon_id]) "
        "OR NOT EXISTS (SELECT 1 FROM [{schema}].[ammo_types] a WHERE a.[ammo_id] = was.[ammo_id])",
        "ammo stats have invalid references",
    ),
)


@dataclass
class ValidationReport:
    """Result of validating the weapons database."""

    is_valid: bool = True
    issues: List[str] = field(default_factory=list)
    table_counts: Dict[str, int] = field(default_factory=dict)

    def add_issue(self, issue: str) -> None:
        self.is_valid = False
        self.issues.append(issue)

    def to_dict(self) -> dict:
        """Report in its wire shape: isValid, issues, tableCounts."""
        return {
            "isValid": self.is_valid,
            "issues": list(self.issues),
            "tableCounts": dict(self.table_counts),
        }

    def to_frame(self) -> pd.DataFrame:
        """Row counts as a DataFrame with 'table' and 'row_count' columns."""
        return pd.DataFrame(
            list(self.table_counts.items()), columns=["table", "row_count"]
        ).astype({"row_count": "int64"})


class DataValidator:
    """
    Checks row counts and foreign key integrity of the weapon tables.

    Only runs SELECT statements; the connection is rolled back and closed when done.
    """

    def __init__(self, conn_str, schema="dbo", connect_fn=None):
        if conn_str is None:
            raise ConfigurationError("A connection string is required to validate data")
        self.conn_str = conn_str
        self.schema = make_sql_safe(schema)
        self.connect_fn = connect_fn or connect

    def validate_data(self) -> ValidationReport:
        """
        Count every table and run the integrity checks.

        Every table is expected to have rows after a load, so an empty one is
        reported as an issue.

        Returns:
            ValidationReport: Validity flag, issues in check order, and row counts
        """
        logger.info("Validating database data integrity", extra={"schema": self.schema})
        report = ValidationReport()

        with read_only(self.connect_fn, self.conn_str) as cursor:
            for table in TABLES:
                count = self._scalar(cursor, count_rows_sql(self.schema, table.name))
                report.table_counts[table.name] = count
                if count == 0:
                    report.add_issue(f"Table '{table.name}' is empty")

            for query, description in INTEGRITY_CHECKS:
                count = self._scalar(cursor, query.format(schema=self.schema))
                if count > 0:
                    report.add_issue(f"{count} {description}")

        if report.is_valid:
            logger.info("Database validation passed - all integrity checks successful")
        else:
            logger.warning(
                f"Database validation failed - {len(report.issues)} issues found",
                extra={"issues": report.issues}
            )
        return report

    @staticmethod
    def _scalar(cursor, query):
        cursor.execute(query)
        row = cursor.fetchone()
        return int(row[0]) if row else 0
