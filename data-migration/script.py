"""
This script imports transactions from CSV files into the ledger database.

Each file is imported as one unit of work (see app/services/csv_import.py for
the expected columns). Accounts and tags are matched by name and created when
missing.

Usage:
    python data-migration/script.py data-migration/normalized
    python data-migration/script.py statements/2024-05.csv
"""


from __future__ import annotations

import sys
from pathlib import Path

# allow running as `python data-migration/script.py` from the project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from db import SessionLocal, engine, init_db  # noqa: E402
from app.log import configure_logging, get_logger  # noqa: E402
from app.services.csv_import import import_transactions_csv  # noqa: E402


NORMALIZED_DIR = Path("data-migration/normalized")

logger = get_logger("data-migration")


def import_normalized_csvs_to_db(source: Path = NORMALIZED_DIR) -> int:
    source = Path(source)
    csv_files = [source] if source.is_file() else sorted(source.glob("*.csv"))
    if not csv_files:
        raise FileNotFoundError(f"No CSV files found in: {source.resolve()}")

    init_db(engine)

    session = SessionLocal()
    total_inserted = 0

    try:
        for f in csv_files:
            count = import_transactions_csv(session, f)
            total_inserted += count
            logger.info("migration.file_imported", file=f.name, rows=count)

        logger.info("migration.done", total=total_inserted)
        return total_inserted
    finally:
        session.close()


if __name__ == "__main__":
    configure_logging()
    import_normalized_csvs_to_db(Path(sys.argv[1]) if len(sys.argv) > 1 else NORMALIZED_DIR)
