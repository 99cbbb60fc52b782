# Exceptions raised by the weapons loader


class WeaponsToSQLError(Exception):
    """Base class for every error raised by this package."""


class DocumentError(WeaponsToSQLError, ValueError):
    """
    The weapons document is malformed.

    Raised before any statement reaches the database, so a bad document never
    leaves partial state behind.
    """

    def __init__(self, message, path=None):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class LoadError(WeaponsToSQLError):
    """
    A statement failed while loading normalized rows.

    The whole load has been rolled back by the time this is raised. `table` and
    `row` identify what was being inserted; the driver error is the __cause__.
    """

    def __init__(self, table, row, error):
        self.table = table
        self.row = row
        super().__init__(f"Failed to insert into '{table}' ({row}): {error}")


class ConfigurationError(WeaponsToSQLError):
    """Database settings are missing or unusable."""
