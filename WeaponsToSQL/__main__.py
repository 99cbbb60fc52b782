import sys

from .main.weapons_to_sql import main

sys.exit(main())
