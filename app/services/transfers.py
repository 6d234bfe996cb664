# app/services/transfers.py
#
# Transfer coordinator
# Moves money between two accounts as a pair of linked transactions:
# an expense leg on the source and an income leg on the destination.

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.log import get_logger
from app.services.errors import InvalidInput, InvalidReference
from app.services.schemas import TransferResult
from app.services.store import unit_of_work
from app.services.transactions import as_naive_utc, insert_transaction, signed_amount
from models import Account

logger = get_logger(__name__)


def _account_name(db: Session, account_id: int) -> str:
    account = db.get(Account, account_id)
    if account is None:
        raise InvalidReference(f"account {account_id} does not exist")
    return account.name


def transfer(
    db: Session,
    from_account_id: int,
    to_account_id: int,
    magnitude,
    timestamp: Optional[datetime] = None,
) -> TransferResult:
    """
    Record a transfer of `magnitude` major units from one account to another.

    Both legs carry the same timestamp and no tags, and are committed together:
    either both exist afterwards or neither does.
    """
    if from_account_id == to_account_id:
        raise InvalidInput("cannot transfer from an account to itself")

    debit_amount = signed_amount("expense", magnitude)
    credit_amount = signed_amount("income", magnitude)
    ts = as_naive_utc(timestamp)

    with unit_of_work(db):
        from_name = _account_name(db, from_account_id)
        to_name = _account_name(db, to_account_id)

        debit = insert_transaction(
            db, ts, debit_amount, f"transfer to {to_name}", from_account_id
        )
        credit = insert_transaction(
            db, ts, credit_amount, f"transfer from {from_name}", to_account_id
        )

    logger.info(
        "transfer.recorded",
        from_account_id=from_account_id,
        to_account_id=to_account_id,
        amount=credit_amount,
        debit_id=debit.id,
        credit_id=credit.id,
    )
    return TransferResult(debit_id=debit.id, credit_id=credit.id)
