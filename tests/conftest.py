"""Pytest configuration and fixtures."""

import copy
import re

import pytest


class FakeDbError(Exception):
    """Raised by the fake database in place of a pyodbc error."""


class FakeDatabase:
    """
    In-memory stand-in for SQL Server that understands the statements this package issues.

    Each connection works on a copy of the committed tables; commit publishes
    the copy, rollback throws it away.
    """

    INSERT_RE = re.compile(r"^INSERT INTO \[\w+\]\.\[(\w+)\] \((.*?)\) SELECT .*? WHERE NOT EXISTS .*? WHERE (.*)\)$")
    KEY_RE = re.compile(r"\[(\w+)\] = \?")
    CREATE_TABLE_RE = re.compile(r"CREATE TABLE \[\w+\]\.\[(\w+)\]")
    CREATE_SEQUENCE_RE = re.compile(r"CREATE SEQUENCE \[\w+\]\.\[(\w+)\]")
    CREATE_INDEX_RE = re.compile(r"CREATE INDEX \[(\w+)\]")
    DROP_TABLE_RE = re.compile(r"^DROP TABLE IF EXISTS \[\w+\]\.\[(\w+)\]$")
    DROP_SEQUENCE_RE = re.compile(r"^DROP SEQUENCE IF EXISTS \[\w+\]\.\[(\w+)\]$")
    DELETE_RE = re.compile(r"^DELETE FROM \[\w+\]\.\[(\w+)\]$")
    COUNT_RE = re.compile(r"^SELECT COUNT_BIG\(\*\) FROM \[\w+\]\.\[(\w+)\]$")
    ORPHAN_RE = re.compile(r"^SELECT COUNT_BIG\(\*\) FROM \[\w+\]\.\[(\w+)\] \w+ WHERE NOT EXISTS")

    def __init__(self):
        self.state = {"tables": {}, "sequences": set(), "indexes": set()}
        self.statements = []
        self.commits = 0
        self.rollbacks = 0
        self.closed = 0
        self.fail_on = None  # Optional predicate(sql, params) -> bool

    def connect(self, conn_str):
        return FakeConnection(self)

    @property
    def tables(self):
        return self.state["tables"]

    def count(self, table_name):
        return len(self.tables[table_name])


class FakeConnection:
    def __init__(self, db):
        self.db = db
        self.working = copy.deepcopy(db.state)

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.db.state = copy.deepcopy(self.working)
        self.db.commits += 1

    def rollback(self):
        self.working = copy.deepcopy(self.db.state)
        self.db.rollbacks += 1

    def close(self):
        self.db.closed += 1


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.result = None

    def fetchone(self):
        return self.result

    def execute(self, sql, *params):
        if len(params) == 1 and isinstance(params[0], (list, tuple)):
            params = tuple(params[0])
        sql = " ".join(sql.split())
        db = self.conn.db
        db.statements.append((sql, params))
        if db.fail_on and db.fail_on(sql, params):
            raise FakeDbError(f"Simulated failure: {sql[:60]}")

        state = self.conn.working
        tables = state["tables"]
        self.result = None

        match = self.conn.db.INSERT_RE.match(sql)
        if match:
            table_name, column_list, where = match.groups()
            columns = re.findall(r"\[(\w+)\]", column_list)
            keys = FakeDatabase.KEY_RE.findall(where)
            row = dict(zip(columns, params[:len(columns)]))
            key_values = dict(zip(keys, params[len(columns):]))
            rows = self._table(tables, table_name)
            if not any(all(r[k] == v for k, v in key_values.items()) for r in rows):
                rows.append(row)
            return self

        match = FakeDatabase.ORPHAN_RE.match(sql)
        if match:
            self.result = (self._orphans(tables, match.group(1)),)
            return self

        match = FakeDatabase.COUNT_RE.match(sql)
        if match:
            self.result = (len(self._table(tables, match.group(1))),)
            return self

        match = FakeDatabase.DELETE_RE.match(sql)
        if match:
            self._table(tables, match.group(1)).clear()
            return self

        match = FakeDatabase.DROP_TABLE_RE.match(sql)
        if match:
            tables.pop(match.group(1), None)
            return self

        match = FakeDatabase.DROP_SEQUENCE_RE.match(sql)
        if match:
            state["sequences"].discard(match.group(1))
            return self

        for regex, bucket in (
            (FakeDatabase.CREATE_TABLE_RE, None),
            (FakeDatabase.CREATE_SEQUENCE_RE, "sequences"),
            (FakeDatabase.CREATE_INDEX_RE, "indexes"),
        ):
            match = regex.search(sql)
            if match:
                if bucket is None:
                    tables.setdefault(match.group(1), [])
                else:
                    state[bucket].add(match.group(1))
                return self

        if sql == "SELECT 1":
            self.result = (1,)
        return self

    @staticmethod
    def _table(tables, name):
        if name not in tables:
            raise FakeDbError(f"Invalid object name '{name}'")
        return tables[name]

    def _orphans(self, tables, name):
        def ids(table, column):
            return {row[column] for row in self._table(tables, table)}

        if name == "weapons":
            categories = ids("categories", "category_id")
            return sum(1 for w in tables["weapons"] if w["category_id"] not in categories)
        if name == "configurations":
            weapons, barrels, ammo = ids("weapons", "weapon_id"), ids("barrels", "barrel_id"), ids("ammo_types", "ammo_id")
            return sum(
                1 for c in tables["configurations"]
                if c["weapon_id"] not in weapons or c["barrel_id"] not in barrels or c["ammo_id"] not in ammo
            )
        if name == "config_dropoffs":
            configs = ids("configurations", "config_id")
            return sum(1 for d in tables["config_dropoffs"] if d["config_id"] not in configs)
        if name == "weapon_ammo_stats":
            weapons, ammo = ids("weapons", "weapon_id"), ids("ammo_types", "ammo_id")
            return sum(
                1 for s in tables["weapon_ammo_stats"]
                if s["weapon_id"] not in weapons or s["ammo_id"] not in ammo
            )
        raise AssertionError(f"Unexpected integrity query on {name}")


@pytest.fixture
def fake_db():
    """Empty fake SQL Server database."""
    return FakeDatabase()


@pytest.fixture
def conn_str():
    return "DRIVER={Fake};SERVER=localhost,1433;DATABASE=weapons;UID=sa;PWD=secret"


@pytest.fixture
def m4_document():
    """Single category, single weapon, single stat."""
    return {
        "categories": [
            {
                "name": "Assault Rifles",
                "weapons": [
                    {
                        "name": "M4",
                        "stats": [
                            {
                                "barrel_type": "Standard",
                                "ammo_type": "5.56mm",
                                "velocity": 800,
                                "dropoffs": [
                                    {"range": 10, "damage": 25.0},
                                    {"range": 50, "damage": 18.0},
                                ],
                            }
                        ],
                        "ammo_stats": {},
                    }
                ],
            }
        ]
    }


@pytest.fixture
def weapons_document():
    """Two categories with shared barrels and ammo, listed out of alphabetical order."""
    return {
        "categories": [
            {
                "name": "SMGs",
                "weapons": [
                    {
                        "name": "PP-29",
                        "stats": [
                            {
                                "barrel_type": "Long",
                                "ammo_type": "Standard",
                                "velocity": 420,
                                "rpm_auto": 900,
                                "dropoffs": [{"range": 0, "damage": 20.0}, {"range": 20, "damage": 16.0}],
                            },
                            {
                                "barrel_type": "Factory",
                                "ammo_type": "Subsonic",
                                "velocity": 330,
                                "rpm_single": 300,
                                "rpm_auto": 900,
                                "dropoffs": [],
                            },
                        ],
                        "ammo_stats": {
                            "Standard": {
                                "mag_size": 30,
                                "empty_reload": 2.35,
                                "tactical_reload": 1.9,
                                "headshot_multiplier": 1.5,
                            },
                            "Subsonic": {"mag_size": 30, "headshot_multiplier": 1.8, "pellet_count": 1},
                        },
                    }
                ],
            },
            {
                "name": "Shotguns",
                "weapons": [
                    {
                        "name": "MCS-880",
                        "stats": [
                            {
                                "barrel_type": "Factory",
                                "ammo_type": "Buckshot",
                                "velocity": 380,
                                "rpm_single": 70,
                                "dropoffs": [{"range": 5, "damage": 12.5}],
                            }
                        ],
                        "ammo_stats": {
                            "Buckshot": {"mag_size": 8, "headshot_multiplier": 1.0, "pellet_count": 8},
                            "Flechette": {"mag_size": 8, "headshot_multiplier": 1.0, "pellet_count": 12},
                        },
                    },
                    {"name": "Training Dummy"},
                ],
            },
        ]
    }
