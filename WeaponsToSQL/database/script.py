# Contains the cursor used to turn operations into a T-SQL script
import datetime
import decimal
import math

import pandas as pd


def format_value(value):
    """
    Render a Python value as a T-SQL literal.

    Args:
        value: A row value (None, NaN, bool, number or string)

    Returns:
        str: The literal, e.g. NULL, 1, 25.0 or N'5.56mm'
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return "NULL"
    # bool is an int subclass, so it has to be checked first
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float, decimal.Decimal)):
        if not math.isfinite(value):
            raise ValueError(f"{value} has no T-SQL literal")
        return str(value)
    if isinstance(value, (datetime.datetime, datetime.date)):
        return f"'{value.isoformat()}'"
    # Escape single quotes in strings (prevents SQL injection)
    escaped = str(value).replace("'", "''")
    return f"N'{escaped}'"


class ScriptCursor:
    """Cursor that collects SQL statements instead of executing them."""

    def __init__(self, sql_script):
        self.sql_script = sql_script

    def execute(self, sql, *params):
        """Append the statement with its `?` placeholders replaced by literals."""
        if len(params) == 1 and isinstance(params[0], (list, tuple)):
            params = tuple(params[0])

        pieces = sql.strip().split("?")
        if len(pieces) - 1 != len(params):
            raise ValueError(f"Statement expects {len(pieces) - 1} parameters, got {len(params)}")

        formatted_sql = pieces[0]
        for value, piece in zip(params, pieces[1:]):
            formatted_sql += format_value(value) + piece

        # Strip all trailing semicolons and whitespace
        formatted_sql = formatted_sql.rstrip(";").strip()
        if formatted_sql:
            # Add exactly one semicolon and append to script
            self.sql_script.append(formatted_sql + ";")
            self.sql_script.append("")
        return self

    def fetchone(self):
        # Nothing is executed while collecting, so queries have no rows
        return None
