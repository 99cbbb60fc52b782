# Contains the first pass over a weapons document
import logging
import math

from ..errors import DocumentError

logger = logging.getLogger(__name__)

# Accepted types for numeric fields that may carry decimals
NUMBER = (int, float)


class WeaponDocumentAnalyzer:
    """
    Walks a weapons document once and collects everything that needs an ID.

    Categories and weapons are numbered here because their IDs follow document
    order. Barrel and ammo names are only gathered into sets; they get their IDs
    later, from sorted order, in TableBuilder.
    """

    def __init__(self):
        self.categories = []  # (category_id, category_name) in document order
        self.weapons = []  # (weapon_id, weapon_name, category_id) in document order
        self.barrel_names = set()  # Every barrel_type seen in any stat
        self.ammo_names = set()  # Every ammo_type seen in stats or ammo_stats keys
        self.ammo_stat_drafts = []  # Weapon ammo stats still keyed by ammo name
        self.weapon_stats = []  # (weapon_id, stat) pairs kept for the second pass

    def analyze(self, document):
        """
        Analyze the document and fill in the collected entities.

        Args:
            document: Parsed weapons document (a dict with a 'categories' list)

        Raises:
            DocumentError: If the document does not have the expected shape
        """
        if not isinstance(document, dict):
            raise DocumentError("Weapons document must be a JSON object")

        categories = document.get("categories")
        if not isinstance(categories, list):
            raise DocumentError("Weapons document must contain a 'categories' list")

        for category_index, category in enumerate(categories):
            path = f"categories[{category_index}]"
            category_id = category_index + 1  # Document order, starting at 1
            self.categories.append((category_id, self._require(category, "name", path, str)))

            for weapon_index, weapon in enumerate(self._list(category, "weapons", path)):
                self._process_weapon(weapon, category_id, f"{path}.weapons[{weapon_index}]")

        logger.debug(
            f"Analyzed {len(self.categories)} categories and {len(self.weapons)} weapons",
            extra={
                "category_count": len(self.categories),
                "weapon_count": len(self.weapons),
                "barrel_count": len(self.barrel_names),
                "ammo_count": len(self.ammo_names),
            }
        )

    def _process_weapon(self, weapon, category_id, path):
        """Record one weapon, its stats and its per-ammo profiles."""
        # Weapons are numbered across all categories, not per category
        weapon_id = len(self.weapons) + 1
        self.weapons.append((weapon_id, self._require(weapon, "name", path, str), category_id))

        for stat_index, stat in enumerate(self._list(weapon, "stats", path)):
            stat_path = f"{path}.stats[{stat_index}]"
            self.barrel_names.add(self._require(stat, "barrel_type", stat_path, str))
            self.ammo_names.add(self._require(stat, "ammo_type", stat_path, str))
            self._require(stat, "velocity", stat_path, int)
            for key in ("rpm_single", "rpm_burst", "rpm_auto"):
                self._optional(stat, key, stat_path, int)
            for dropoff_index, dropoff in enumerate(self._list(stat, "dropoffs", stat_path)):
                dropoff_path = f"{stat_path}.dropoffs[{dropoff_index}]"
                self._require(dropoff, "range", dropoff_path, int)
                self._require(dropoff, "damage", dropoff_path, NUMBER)
            self.weapon_stats.append((weapon_id, stat))

        ammo_stats = weapon.get("ammo_stats") or {}
        if not isinstance(ammo_stats, dict):
            raise DocumentError("'ammo_stats' must be an object keyed by ammo name", path)

        for ammo_name, ammo_stat in ammo_stats.items():
            ammo_path = f"{path}.ammo_stats[{ammo_name!r}]"
            self.ammo_names.add(ammo_name)
            pellet_count = self._optional(ammo_stat, "pellet_count", ammo_path, int)
            self.ammo_stat_drafts.append({
                "weapon_id": weapon_id,
                "ammo_name": ammo_name,
                "magazine_size": self._require(ammo_stat, "mag_size", ammo_path, int),
                "empty_reload_time": self._optional(ammo_stat, "empty_reload", ammo_path, NUMBER),
                "tactical_reload_time": self._optional(ammo_stat, "tactical_reload", ammo_path, NUMBER),
                "headshot_multiplier": self._require(ammo_stat, "headshot_multiplier", ammo_path, NUMBER),
                "pellet_count": 1 if pellet_count is None else pellet_count,
            })

    @classmethod
    def _require(cls, node, key, path, expected):
        """Get a required value of the expected type from a document node."""
        value = cls._optional(node, key, path, expected)
        if value is None:
            raise DocumentError(f"Missing required field '{key}'", path)
        return value

    @staticmethod
    def _optional(node, key, path, expected):
        """Get an optional value from a document node; None if absent, checked if present."""
        if not isinstance(node, dict):
            raise DocumentError("Expected a JSON object", path)
        value = node.get(key)
        if value is None:
            return None
        # JSON true/false would otherwise pass as the integers 1 and 0
        if isinstance(value, bool) or not isinstance(value, expected):
            expected_name = "number" if expected is NUMBER else expected.__name__
            raise DocumentError(f"Field '{key}' must be {expected_name}, got {type(value).__name__}", path)
        if isinstance(value, float) and not math.isfinite(value):
            raise DocumentError(f"Field '{key}' must be a finite number", path)
        return value

    @staticmethod
    def _list(node, key, path):
        """Get an optional list from a document node; absent means empty."""
        value = node.get(key)
        if value is None:
            return []
        if not isinstance(value, list):
            raise DocumentError(f"'{key}' must be a list", path)
        return value
