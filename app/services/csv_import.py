# app/services/csv_import.py
"""
Bulk import of transactions from a CSV file into the ledger.

Expected columns (header names are case-insensitive):
- date          YYYY-MM-DD, optionally followed by " HH:MM" (UTC)
- description
- amount        signed major units, e.g. -12.50 (a comma decimal separator is accepted)
- account       optional, account name (created if missing, default "Imported")
- tags          optional, tag names separated by ";" (created if missing)
- notes         optional

The whole file is one unit of work: a bad row aborts the import and nothing is
written.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd
from sqlalchemy.orm import Session

from app.log import get_logger
from app.services.errors import InvalidInput
from app.services.store import unit_of_work
from app.services.transactions import insert_transaction, signed_amount
from models import Account, Tag

logger = get_logger(__name__)

REQUIRED_COLUMNS = {"date", "description", "amount"}
DEFAULT_ACCOUNT = "Imported"
_DATE_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M", "%Y-%m-%d")


def _none_if_nan(x) -> Optional[str]:
    if x is None or pd.isna(x):
        return None
    s = str(x).strip()
    return None if s == "" or s.lower() == "nan" else s


def _parse_timestamp(s: str) -> datetime:
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    raise ValueError(f"invalid date {s!r}")


def _parse_amount(s: str) -> int:
    s = s.replace(" ", "").replace(",", ".")
    if s.startswith("-"):
        return signed_amount("expense", s[1:])
    return signed_amount("income", s.lstrip("+"))


class _NameCache:
    """Looks up accounts / tags by name, creating the missing ones."""

    def __init__(self, db: Session, model):
        self._db = db
        self._model = model
        self._ids: Dict[str, int] = {}
        for obj in db.query(model).order_by(model.id).all():
            self._ids.setdefault(obj.name, obj.id)

    def id_for(self, name: str) -> int:
        if name not in self._ids:
            obj = self._model(name=name)
            self._db.add(obj)
            self._db.flush()
            self._ids[name] = obj.id
        return self._ids[name]


def read_transactions_csv(path: str | Path) -> pd.DataFrame:
    df = pd.read_csv(path, dtype=str)

    # normalize headers
    df.columns = df.columns.str.strip().str.lower()

    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise InvalidInput(f"{Path(path).name}: missing required columns: {sorted(missing)}")

    for optional in ("account", "tags", "notes"):
        if optional not in df.columns:
            df[optional] = None

    # drop fully empty rows
    return df.dropna(how="all").copy()


def import_transactions_csv(db: Session, path: str | Path) -> int:
    """Import every row of the CSV at `path`; returns the number of transactions."""
    df = read_transactions_csv(path)
    imported: List[int] = []

    with unit_of_work(db):
        accounts = _NameCache(db, Account)
        tags = _NameCache(db, Tag)

        # +2: header line, 1-based numbering
        for line_no, row in zip(df.index + 2, df.itertuples(index=False)):
            date_raw = _none_if_nan(row.date)
            amount_raw = _none_if_nan(row.amount)
            description = _none_if_nan(row.description) or ""
            if date_raw is None or amount_raw is None:
                raise InvalidInput(f"line {line_no}: date and amount are required")

            try:
                timestamp = _parse_timestamp(date_raw)
                amount = _parse_amount(amount_raw)
            except (ValueError, InvalidInput) as e:
                raise InvalidInput(f"line {line_no}: {e}") from e

            account_id = accounts.id_for(_none_if_nan(row.account) or DEFAULT_ACCOUNT)
            tag_names = [t.strip() for t in (_none_if_nan(row.tags) or "").split(";") if t.strip()]
            tag_ids = [tags.id_for(name) for name in tag_names]

            txn = insert_transaction(
                db,
                timestamp,
                amount,
                description,
                account_id,
                notes=_none_if_nan(row.notes),
                tag_ids=tag_ids,
            )
            imported.append(txn.id)

    logger.info("csv_import.done", path=str(path), imported=len(imported))
    return len(imported)
