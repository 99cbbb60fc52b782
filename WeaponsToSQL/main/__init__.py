from .weapons_to_sql import (
    WeaponsDatabaseManager,
    generate_sql_script,
    process_weapons_to_sql_server,
)

__all__ = [
    'WeaponsDatabaseManager',
    'generate_sql_script',
    'process_weapons_to_sql_server',
]
