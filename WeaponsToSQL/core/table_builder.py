# Contains class for building normalized weapon tables
import logging
from collections import OrderedDict
from typing import Dict, List

import pandas as pd

logger = logging.getLogger(__name__)

# Order in which tables must be inserted so every foreign key already exists
INSERT_ORDER = (
    "categories",
    "barrels",
    "ammo_types",
    "weapons",
    "weapon_ammo_stats",
    "configurations",
    "config_dropoffs",
)


class NormalizedTables(OrderedDict):
    """
    Row sets for every table, keyed by table name in insert order.

    Each value is a list of row dicts whose keys are column names. `id_maps`
    holds the lookups used while resolving references:

    - `barrels`, `ammo_types`: name -> id (names are deduplicated)
    - `categories`, `weapons`: id -> name (names may repeat in a document,
      so only the id is a unique key)
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.id_maps = {}

    def row_counts(self) -> Dict[str, int]:
        return {name: len(rows) for name, rows in self.items()}

    def to_dataframes(self) -> Dict[str, pd.DataFrame]:
        """One DataFrame per table, handy for eyeballing a document before loading it."""
        return {name: pd.DataFrame(rows) for name, rows in self.items()}


class TableBuilder:
    """
    Builds weapon tables from an analyzed document with deterministic integer IDs.
    """

    def __init__(self, analyzer):
        # Input from the first pass
        self.analyzer = analyzer
        # Output containers
        self.tables = NormalizedTables((name, []) for name in INSERT_ORDER)
        self.id_maps = self.tables.id_maps

    def build_tables(self) -> NormalizedTables:
        """
        Assign barrel/ammo IDs from sorted names, then resolve every reference.
        """
        self._process_named_entities()
        self._process_weapon_ammo_stats()
        self._process_configurations()

        logger.debug("Built normalized tables", extra={"row_counts": self.tables.row_counts()})
        return self.tables

    def _process_named_entities(self):
        """Create category, weapon, barrel and ammo type rows."""
        self.tables["categories"] = [
            {"category_id": category_id, "category_name": name}
            for category_id, name in self.analyzer.categories
        ]
        self.tables["weapons"] = [
            {"weapon_id": weapon_id, "weapon_name": name, "category_id": category_id}
            for weapon_id, name, category_id in self.analyzer.weapons
        ]
        self.id_maps["categories"] = dict(self.analyzer.categories)
        self.id_maps["weapons"] = {weapon_id: name for weapon_id, name, _ in self.analyzer.weapons}

        # IDs follow sorted name order, not first appearance
        self.id_maps["barrels"] = self._number_sorted(self.analyzer.barrel_names)
        self.id_maps["ammo_types"] = self._number_sorted(self.analyzer.ammo_names)

        self.tables["barrels"] = [
            {"barrel_id": barrel_id, "barrel_name": name}
            for name, barrel_id in self.id_maps["barrels"].items()
        ]
        self.tables["ammo_types"] = [
            {"ammo_id": ammo_id, "ammo_type_name": name}
            for name, ammo_id in self.id_maps["ammo_types"].items()
        ]

    def _process_weapon_ammo_stats(self):
        """Swap ammo names for ammo IDs; drafts that don't resolve are dropped."""
        ammo_ids = self.id_maps["ammo_types"]
        rows = []
        for draft in self.analyzer.ammo_stat_drafts:
            ammo_id = ammo_ids.get(draft["ammo_name"])
            if ammo_id is None:
                continue
            row = {"weapon_id": draft["weapon_id"], "ammo_id": ammo_id}
            row.update((key, value) for key, value in draft.items() if key not in ("weapon_id", "ammo_name"))
            rows.append(row)
        self.tables["weapon_ammo_stats"] = rows

    def _process_configurations(self):
        """Second pass over the stats: one configuration per resolvable stat."""
        barrel_ids = self.id_maps["barrels"]
        ammo_ids = self.id_maps["ammo_types"]
        configurations: List[dict] = []
        dropoffs: List[dict] = []

        for weapon_id, stat in self.analyzer.weapon_stats:
            barrel_id = barrel_ids.get(stat["barrel_type"])
            ammo_id = ammo_ids.get(stat["ammo_type"])
            if barrel_id is None or ammo_id is None:
                # Unresolved names drop the stat along with its dropoffs
                logger.debug(
                    f"Skipping stat for weapon {weapon_id}: unresolved barrel or ammo",
                    extra={"barrel_type": stat["barrel_type"], "ammo_type": stat["ammo_type"]}
                )
                continue

            config_id = len(configurations) + 1
            configurations.append({
                "config_id": config_id,
                "weapon_id": weapon_id,
                "barrel_id": barrel_id,
                "ammo_id": ammo_id,
                "velocity": stat["velocity"],
                "rpm_single": stat.get("rpm_single"),
                "rpm_burst": stat.get("rpm_burst"),
                "rpm_auto": stat.get("rpm_auto"),
            })
            for dropoff in stat.get("dropoffs") or []:
                dropoffs.append({
                    "config_id": config_id,
                    "range": dropoff["range"],
                    "damage": dropoff["damage"],
                })

        self.tables["configurations"] = configurations
        self.tables["config_dropoffs"] = dropoffs

    @staticmethod
    def _number_sorted(names) -> Dict[str, int]:
        """Map each distinct name to its 1-based position in sorted order."""
        return {name: index for index, name in enumerate(sorted(names), start=1)}
