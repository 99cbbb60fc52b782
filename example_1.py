import json
from WeaponsToSQL import process_weapons_to_sql_server

# Load your weapons data
with open("weapons.json", "r") as f:
    json_data = json.load(f)

# Define SQL Server credentials
server = "your_server"
port = "your_port"
username = "your_username"
password = "your_password"
db = "your_database"
schema = "dbo"

# Basic Example: create the tables if needed and load the weapons in one step
tables = process_weapons_to_sql_server(
    json_data, server, port, username, password, db, schema
)

print(f"Loaded {len(tables['weapons'])} weapons into SQL Server.")
