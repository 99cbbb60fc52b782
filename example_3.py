from WeaponsToSQL import WeaponsNormalizer, generate_sql_script
import json

schema = "my_schema"

with open("weapons.json", "r") as f:
    json_data = json.load(f)

# Step 1: Inspect the normalized tables before touching a database
tables = WeaponsNormalizer.normalize_weapons_to_nf(json_data)
for name, frame in tables.to_dataframes().items():
    print(name, len(frame))

# Step 2: Generate the SQL that would create the tables and insert the data
sql_script = generate_sql_script(json_data, schema=schema)
print(sql_script)
