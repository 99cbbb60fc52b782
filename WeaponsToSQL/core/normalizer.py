# Contains main normalization logic
import json
import logging

from ..errors import DocumentError
from .analyzer import WeaponDocumentAnalyzer
from .table_builder import TableBuilder

logger = logging.getLogger(__name__)


class WeaponsNormalizer:
    """
    Handles the normalization of a weapons document into relational tables.
    """

    @staticmethod
    def normalize_weapons_to_nf(json_data):
        """
        Convert a weapons document to normalized tables with deterministic IDs.

        Categories and weapons are numbered in document order; barrels and ammo
        types in sorted name order. Configurations are numbered as they are found.

        Args:
            json_data: The weapons document (a dict, or a JSON string/bytes)

        Returns:
            NormalizedTables: Rows per table in insert order, with `id_maps` attached

        Raises:
            DocumentError: If the JSON is invalid or the document shape is wrong
        """
        # Parse JSON if it's a string
        if isinstance(json_data, (str, bytes, bytearray)):
            try:
                json_data = json.loads(json_data)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise DocumentError(f"Invalid JSON string provided: {e}") from e

        # First pass: collect entities and names, nothing numbered by name yet
        analyzer = WeaponDocumentAnalyzer()
        analyzer.analyze(json_data)

        # Second pass: number barrels/ammo and resolve every reference
        tables = TableBuilder(analyzer).build_tables()

        logger.info(
            f"Normalized {len(tables['weapons'])} weapons into {len(tables['configurations'])} configurations",
            extra={"row_counts": tables.row_counts()}
        )
        return tables
