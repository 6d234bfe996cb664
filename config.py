# config.py
# Role: Runtime configuration for the ledger.
#       Loads an optional .env file, then reads LEDGER_* environment variables.
#       Everything else imports its settings from here.

"""
Configuration for the personal ledger.

All values come from environment variables (optionally via a .env file):

- LEDGER_DATABASE_URL        SQLAlchemy URL, SQLite or PostgreSQL
                             (default: SQLite at <project_root>/database/ledger.db)
- LEDGER_DISPLAY_TIMEZONE    IANA timezone used for displaying / editing timestamps (default: UTC)
- LEDGER_BEGINNING_OF_TIME   default start of a date range, YYYY-MM-DD (default: 2023-01-01)
- LEDGER_LOG_LEVEL           debug / info / warning / error (default: info)
- LEDGER_LOG_JSON            1/true → JSON log lines instead of console output
- LEDGER_SQL_ECHO            1/true → echo SQL statements
- LEDGER_HOST / LEDGER_PORT  where `python main.py` serves the app
"""

import os
from datetime import date, datetime

from dotenv import load_dotenv

load_dotenv()

# Base directory of the project (where this module lives)
BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _env_truthy(name: str, default: str = "0") -> bool:
    v = os.getenv(name, default)
    return str(v).strip().lower() in ("1", "true", "yes", "y", "on")


def _default_database_url() -> str:
    # Folder for the SQLite DB (created on startup if missing)
    db_dir = os.path.join(BASE_DIR, "database")
    os.makedirs(db_dir, exist_ok=True)
    return f"sqlite:///{os.path.join(db_dir, 'ledger.db')}"


DATABASE_URL = os.getenv("LEDGER_DATABASE_URL") or _default_database_url()

SQL_ECHO = _env_truthy("LEDGER_SQL_ECHO")

DISPLAY_TIMEZONE = os.getenv("LEDGER_DISPLAY_TIMEZONE", "UTC").strip() or "UTC"

# Default "start date" of a range when the caller does not give one
BEGINNING_OF_TIME: date = datetime.strptime(
    os.getenv("LEDGER_BEGINNING_OF_TIME", "2023-01-01").strip(), "%Y-%m-%d"
).date()

LOG_LEVEL = os.getenv("LEDGER_LOG_LEVEL", "info").strip().lower()
LOG_JSON = _env_truthy("LEDGER_LOG_JSON")

HOST = os.getenv("LEDGER_HOST", "0.0.0.0")
PORT = int(os.getenv("LEDGER_PORT", "3000"))
