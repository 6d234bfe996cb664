# app/services/schemas.py
#
# Read models returned by the ledger services to the web layer.

from datetime import datetime
from typing import List, Optional, Set

from pydantic import BaseModel


class SelectOption(BaseModel):
    """An account or tag as an entry of an edit form's <select>."""

    id: int
    name: str
    selected: bool = False


class TransactionRow(BaseModel):
    """One line of a transaction listing."""

    id: int
    timestamp: datetime
    amount: int
    description: str
    account_id: int
    account_name: str
    notes: Optional[str] = None
    # Comma-joined tag names, "" when untagged
    tags: str = ""


class TransactionDetail(BaseModel):
    """A transaction plus everything its edit form needs."""

    id: int
    timestamp: datetime
    amount: int
    description: str
    account_id: int
    notes: Optional[str] = None
    tag_ids: Set[int]
    accounts: List[SelectOption]
    tags: List[SelectOption]


class TransferResult(BaseModel):
    debit_id: int
    credit_id: int
