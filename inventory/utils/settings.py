# inventory/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()

DATA_DIR = os.getenv("DATA_DIR", "data")
ON_CONFLICT = os.getenv("ON_CONFLICT", "reject")
SQLITE_TIMEOUT = float(os.getenv("SQLITE_TIMEOUT", 20))
SQL_ECHO = os.getenv("SQL_ECHO", "false").strip().lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE")
