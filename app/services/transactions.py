# app/services/transactions.py
#
# Transaction manager
# Create / update / delete / fetch a transaction. The tag association rows are
# always written in the same commit as the transaction row they belong to.

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, List, Optional, Union

from sqlalchemy.orm import Session

from app.log import get_logger
from app.services.errors import InvalidInput, InvalidReference
from app.services.schemas import SelectOption, TransactionDetail
from app.services.store import get_or_404, list_accounts, list_tags, unit_of_work
from models import Account, Tag, Transaction, TransactionTag

logger = get_logger(__name__)

# Direction of a form entry → sign of the stored amount
MULTIPLIERS = {
    "income": 1,
    "expense": -1,
}

# Amounts are stored in a signed 64-bit column
MAX_AMOUNT = 2**63 - 1


# ---- Helpers ----

def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(ts: Optional[datetime]) -> datetime:
    if ts is None:
        return utcnow()
    if ts.tzinfo is None:
        return ts
    return ts.astimezone(timezone.utc).replace(tzinfo=None)


def signed_amount(direction: str, magnitude: Union[str, int, Decimal]) -> int:
    """
    direction ("income" / "expense") + unsigned major units → signed cents.

    signed_amount("expense", "12.50") == -1250
    """
    try:
        multiplier = MULTIPLIERS[direction]
    except (KeyError, TypeError):
        raise InvalidInput(f"unknown direction {direction!r}, expected income or expense")

    if isinstance(magnitude, float):
        magnitude = repr(magnitude)
    try:
        value = Decimal(str(magnitude).strip())
    except InvalidOperation:
        raise InvalidInput(f"invalid amount {magnitude!r}")
    if not value.is_finite() or value < 0:
        raise InvalidInput(f"invalid amount {magnitude!r}, expected a non-negative number")

    cents = int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    if cents > MAX_AMOUNT:
        raise InvalidInput(f"amount {magnitude!r} is too large")
    return multiplier * cents


def _check_amount(amount) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidInput(f"amount must be an integer number of cents, got {amount!r}")
    if abs(amount) > MAX_AMOUNT:
        raise InvalidInput(f"amount {amount} is out of range")
    return amount


def _check_description(description) -> str:
    if description is None:
        raise InvalidInput("description is required")
    return str(description)


def _require_account(db: Session, account_id: int) -> Account:
    account = db.get(Account, account_id)
    if account is None:
        raise InvalidReference(f"account {account_id} does not exist")
    return account


def _require_tags(db: Session, tag_ids: Iterable[int]) -> List[int]:
    # Set semantics, first occurrence wins
    try:
        unique = list(dict.fromkeys(int(t) for t in tag_ids))
    except (TypeError, ValueError):
        raise InvalidInput(f"invalid tag ids {tag_ids!r}")
    if not unique:
        return []

    found = {row[0] for row in db.query(Tag.id).filter(Tag.id.in_(unique)).all()}
    missing = [t for t in unique if t not in found]
    if missing:
        raise InvalidReference(f"tag(s) {missing} do not exist")
    return unique


def _tag_ids_of(db: Session, trans_id: int) -> set:
    rows = db.query(TransactionTag.tag_id).filter(TransactionTag.trans_id == trans_id).all()
    return {row[0] for row in rows}


def insert_transaction(
    db: Session,
    timestamp: Optional[datetime],
    amount: int,
    description: str,
    account_id: int,
    notes: Optional[str] = None,
    tag_ids: Iterable[int] = (),
) -> Transaction:
    """
    Validate and stage one transaction plus its tag rows, without committing.
    Callers wrap this in unit_of_work.
    """
    amount = _check_amount(amount)
    description = _check_description(description)
    _require_account(db, account_id)
    tags = _require_tags(db, tag_ids)

    txn = Transaction(
        timestamp=as_naive_utc(timestamp),
        amount=amount,
        description=description,
        account_id=account_id,
        notes=notes or None,
    )
    db.add(txn)
    db.flush()  # assigns txn.id

    for tag_id in tags:
        db.add(TransactionTag(trans_id=txn.id, tag_id=tag_id))
    db.flush()
    return txn


# ---- Operations ----

def create_transaction(
    db: Session,
    timestamp: Optional[datetime],
    amount: int,
    description: str,
    account_id: int,
    notes: Optional[str] = None,
    tag_ids: Iterable[int] = (),
) -> int:
    """Insert a transaction and its tags; returns the new id."""
    with unit_of_work(db):
        txn = insert_transaction(db, timestamp, amount, description, account_id, notes, tag_ids)

    logger.info(
        "transaction.created",
        transaction_id=txn.id,
        account_id=txn.account_id,
        amount=txn.amount,
    )
    return txn.id


def update_transaction(
    db: Session,
    trans_id: int,
    amount: int,
    description: str,
    account_id: int,
    notes: Optional[str] = None,
    timestamp: Optional[datetime] = None,
    tag_ids: Optional[Iterable[int]] = None,
) -> None:
    """
    Overwrite a transaction in place.

    tag_ids=None leaves the stored tags alone; any iterable (even an empty one)
    replaces them. timestamp=None keeps the stored timestamp.
    """
    with unit_of_work(db):
        txn = get_or_404(db, Transaction, trans_id)
        amount = _check_amount(amount)
        description = _check_description(description)
        _require_account(db, account_id)
        tags = _require_tags(db, tag_ids) if tag_ids is not None else None

        txn.amount = amount
        txn.description = description
        txn.account_id = account_id
        txn.notes = notes or None
        if timestamp is not None:
            txn.timestamp = as_naive_utc(timestamp)
        db.flush()

        if tags is not None:
            db.query(TransactionTag).filter(TransactionTag.trans_id == trans_id).delete(
                synchronize_session="evaluate"
            )
            for tag_id in tags:
                db.add(TransactionTag(trans_id=trans_id, tag_id=tag_id))

    logger.info(
        "transaction.updated",
        transaction_id=trans_id,
        account_id=account_id,
        amount=amount,
        tags_replaced=tags is not None,
    )


def delete_transaction(db: Session, trans_id: int) -> int:
    """Delete a transaction (tags first); returns the account it belonged to."""
    with unit_of_work(db):
        txn = get_or_404(db, Transaction, trans_id)
        account_id = txn.account_id
        db.query(TransactionTag).filter(TransactionTag.trans_id == trans_id).delete(
            synchronize_session="evaluate"
        )
        db.delete(txn)

    logger.info("transaction.deleted", transaction_id=trans_id, account_id=account_id)
    return account_id


def get_transaction(db: Session, trans_id: int) -> TransactionDetail:
    """
    A transaction, its tag ids, and all accounts / tags flagged `selected`
    the way the edit form shows them.
    """
    txn = get_or_404(db, Transaction, trans_id)
    tag_ids = _tag_ids_of(db, trans_id)

    accounts = [
        SelectOption(id=a.id, name=a.name, selected=a.id == txn.account_id)
        for a in list_accounts(db)
    ]
    tags = [
        SelectOption(id=t.id, name=t.name, selected=t.id in tag_ids)
        for t in list_tags(db)
    ]

    return TransactionDetail(
        id=txn.id,
        timestamp=txn.timestamp,
        amount=txn.amount,
        description=txn.description,
        account_id=txn.account_id,
        notes=txn.notes,
        tag_ids=tag_ids,
        accounts=accounts,
        tags=tags,
    )
