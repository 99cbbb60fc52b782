from WeaponsToSQL import DatabaseConfig, WeaponsDatabaseManager

# Settings come from WEAPONS_DB_* variables (or a .env file)
config = DatabaseConfig.from_env()
manager = WeaponsDatabaseManager.from_config(config)

# Step 1: Start from an empty schema
manager.reset_database()

# Step 2: Normalize the JSON file and load it in one transaction
manager.populate_from_file("weapons.json")

# Step 3: Check row counts and references
report = manager.validate_data()
print(report.to_frame())
for issue in report.issues:
    print(f"Issue: {issue}")
