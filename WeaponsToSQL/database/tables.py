# Contains the table catalog and the T-SQL built from it
import re
from collections import namedtuple

TableSpec = namedtuple("TableSpec", ["name", "columns", "key_columns", "id_column", "definition"])

# Tables in creation (dependency) order
TABLES = (
    TableSpec(
        name="categories",
        columns=("category_id", "category_name"),
        key_columns=("category_name",),
        id_column="category_id",
        definition="""
            [category_id] INT NOT NULL {id_default},
            [category_name] NVARCHAR(50) NOT NULL,
            CONSTRAINT [PK_categories] PRIMARY KEY ([category_id]),
            CONSTRAINT [UQ_categories_name] UNIQUE ([category_name])
        """,
    ),
    TableSpec(
        name="weapons",
        columns=("weapon_id", "weapon_name", "category_id"),
        key_columns=("weapon_name",),
        id_column="weapon_id",
        definition="""
            [weapon_id] INT NOT NULL {id_default},
            [weapon_name] NVARCHAR(100) NOT NULL,
            [category_id] INT NOT NULL,
            CONSTRAINT [PK_weapons] PRIMARY KEY ([weapon_id]),
            CONSTRAINT [UQ_weapons_name] UNIQUE ([weapon_name]),
            CONSTRAINT [FK_weapons_category] FOREIGN KEY ([category_id])
                REFERENCES [{schema}].[categories] ([category_id])
        """,
    ),
    TableSpec(
        name="barrels",
        columns=("barrel_id", "barrel_name"),
        key_columns=("barrel_name",),
        id_column="barrel_id",
        definition="""
            [barrel_id] INT NOT NULL {id_default},
            [barrel_name] NVARCHAR(100) NOT NULL,
            CONSTRAINT [PK_barrels] PRIMARY KEY ([barrel_id]),
            CONSTRAINT [UQ_barrels_name] UNIQUE ([barrel_name])
        """,
    ),
    TableSpec(
        name="ammo_types",
        columns=("ammo_id", "ammo_type_name"),
        key_columns=("ammo_type_name",),
        id_column="ammo_id",
        definition="""
            [ammo_id] INT NOT NULL {id_default},
            [ammo_type_name] NVARCHAR(100) NOT NULL,
            CONSTRAINT [PK_ammo_types] PRIMARY KEY ([ammo_id]),
            CONSTRAINT [UQ_ammo_types_name] UNIQUE ([ammo_type_name])
        """,
    ),
    TableSpec(
        name="weapon_ammo_stats",
        columns=(
            "weapon_id", "ammo_id", "magazine_size", "empty_reload_time",
            "tactical_reload_time", "headshot_multiplier", "pellet_count",
        ),
        key_columns=("weapon_id", "ammo_id"),
        id_column=None,
        definition="""
            [weapon_id] INT NOT NULL,
            [ammo_id] INT NOT NULL,
            [magazine_size] SMALLINT NOT NULL,
            [empty_reload_time] DECIMAL(4,2) NULL,
            [tactical_reload_time] DECIMAL(4,2) NULL,
            [headshot_multiplier] DECIMAL(3,1) NOT NULL,
            [pellet_count] SMALLINT NULL DEFAULT 1,
            CONSTRAINT [PK_weapon_ammo_stats] PRIMARY KEY ([weapon_id], [ammo_id]),
            CONSTRAINT [FK_weapon_ammo_stats_weapon] FOREIGN KEY ([weapon_id])
                REFERENCES [{schema}].[weapons] ([weapon_id]),
            CONSTRAINT [FK_weapon_ammo_stats_ammo] FOREIGN KEY ([ammo_id])
                REFERENCES [{schema}].[ammo_types] ([ammo_id])
        """,
    ),
    TableSpec(
        name="configurations",
        columns=("config_id", "weapon_id", "barrel_id", "ammo_id", "velocity", "rpm_single", "rpm_burst", "rpm_auto"),
        key_columns=("weapon_id", "barrel_id", "ammo_id"),
        id_column="config_id",
        definition="""
            [config_id] INT NOT NULL {id_default},
            [weapon_id] INT NOT NULL,
            [barrel_id] INT NOT NULL,
            [ammo_id] INT NOT NULL,
            [velocity] SMALLINT NOT NULL,
            [rpm_single] SMALLINT NULL,
            [rpm_burst] SMALLINT NULL,
            [rpm_auto] SMALLINT NULL,
            CONSTRAINT [PK_configurations] PRIMARY KEY ([config_id]),
            CONSTRAINT [UQ_configurations_combo] UNIQUE ([weapon_id], [barrel_id], [ammo_id]),
            CONSTRAINT [FK_configurations_weapon] FOREIGN KEY ([weapon_id])
                REFERENCES [{schema}].[weapons] ([weapon_id]),
            CONSTRAINT [FK_configurations_barrel] FOREIGN KEY ([barrel_id])
                REFERENCES [{schema}].[barrels] ([barrel_id]),
            CONSTRAINT [FK_configurations_ammo] FOREIGN KEY ([ammo_id])
                REFERENCES [{schema}].[ammo_types] ([ammo_id])
        """,
    ),
    TableSpec(
        name="config_dropoffs",
        columns=("config_id", "range", "damage"),
        key_columns=("config_id", "range"),
        id_column=None,
        definition="""
            [config_id] INT NOT NULL,
            [range] SMALLINT NOT NULL,
            [damage] DECIMAL(5,1) NOT NULL,
            CONSTRAINT [PK_config_dropoffs] PRIMARY KEY ([config_id], [range]),
            CONSTRAINT [FK_config_dropoffs_config] FOREIGN KEY ([config_id])
                REFERENCES [{schema}].[configurations] ([config_id])
        """,
    ),
)

TABLES_BY_NAME = {table.name: table for table in TABLES}

# (index name, table, column)
INDEXES = (
    ("idx_weapons_category", "weapons", "category_id"),
    ("idx_configurations_weapon", "configurations", "weapon_id"),
    ("idx_config_dropoffs_config", "config_dropoffs", "config_id"),
    ("idx_config_dropoffs_range", "config_dropoffs", "range"),
    ("idx_weapon_ammo_stats_weapon", "weapon_ammo_stats", "weapon_id"),
)


def sequence_name(table):
    """Name of the sequence backing a table's surrogate key, or None."""
    if table.id_column is None:
        return None
    return f"{table.name}_{table.id_column}_seq"


def make_sql_safe(name):
    """
    Make a name SQL-safe by removing special characters and ensuring valid SQL identifier rules.

    Args:
        name: Original name
    Returns:
        str: SQL-safe name that follows SQL Server identifier rules
    """
    if not name:
        return '_empty' if name == '' else '_null'

    # Single pass conversion using translation table
    trans = str.maketrans({
        char: '_' for char in '`~!@#$%^&*()+={}[]|\\:;"\'<>,.?/ '
    })
    safe_name = str(name).translate(trans)

    # Prefix with underscore if starts with digit (single if check)
    safe_name = f"_{safe_name}" if safe_name[0].isdigit() else safe_name

    # Single regex to collapse multiple underscores
    safe_name = re.sub('_+', '_', safe_name)[:128].rstrip('_')

    return safe_name


def create_schema_sql(schema):
    return f"IF NOT EXISTS (SELECT * FROM sys.schemas WHERE name = '{schema}') EXEC('CREATE SCHEMA [{schema}]')"


def create_sequence_sql(schema, sequence):
    return f"""
        IF NOT EXISTS (
            SELECT * FROM sys.sequences
            WHERE object_id = OBJECT_ID(N'[{schema}].[{sequence}]')
        )
        EXEC('CREATE SEQUENCE [{schema}].[{sequence}] AS INT START WITH 1 INCREMENT BY 1')
    """


def create_table_sql(schema, table):
    sequence = sequence_name(table)
    id_default = (
        f"CONSTRAINT [DF_{table.name}_{table.id_column}] DEFAULT (NEXT VALUE FOR [{schema}].[{sequence}])"
        if sequence else ""
    )
    definition = table.definition.format(schema=schema, id_default=id_default).strip()
    return f"""
        IF NOT EXISTS (
            SELECT * FROM sys.objects
            WHERE object_id = OBJECT_ID(N'[{schema}].[{table.name}]')
            AND type in (N'U')
        )
        BEGIN
            CREATE TABLE [{schema}].[{table.name}] (
                {definition}
            )
        END
    """


def create_index_sql(schema, index, table_name, column):
    return f"""
        IF NOT EXISTS (
            SELECT * FROM sys.indexes
            WHERE name = N'{index}' AND object_id = OBJECT_ID(N'[{schema}].[{table_name}]')
        )
        CREATE INDEX [{index}] ON [{schema}].[{table_name}] ([{column}])
    """


def insert_ignore_sql(schema, table):
    """
    Conflict-tolerant insert for one row of `table`.

    Parameters are the row's columns in catalog order followed by its natural
    key columns. Nothing is written when a row with the same key exists.
    """
    columns = ", ".join(f"[{column}]" for column in table.columns)
    placeholders = ", ".join("?" for _ in table.columns)
    key_match = " AND ".join(f"[{column}] = ?" for column in table.key_columns)
    return (
        f"INSERT INTO [{schema}].[{table.name}] ({columns}) "
        f"SELECT {placeholders} "
        f"WHERE NOT EXISTS (SELECT 1 FROM [{schema}].[{table.name}] WHERE {key_match})"
    )


def count_rows_sql(schema, table_name):
    return f"SELECT COUNT_BIG(*) FROM [{schema}].[{table_name}]"
