# app/services/store.py
#
# Entity store helpers
# Accounts and tags (create / get / list), plus the small pieces every other
# service shares: id lookups that raise NotFound and the commit-or-rollback
# unit of work.

from contextlib import contextmanager
from typing import Iterator, List, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.log import get_logger
from app.services.errors import InvalidInput, LedgerError, NotFound, StorageFailure
from models import Account, Tag

logger = get_logger(__name__)

T = TypeVar("T")


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Run a group of writes as one all-or-nothing commit.

    Any error rolls the session back; SQLAlchemy errors are re-raised as
    StorageFailure, everything else propagates unchanged.
    """
    try:
        yield db
        db.commit()
    except LedgerError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("store.write_failed", error=repr(e))
        raise StorageFailure(str(e)) from e
    except Exception:
        db.rollback()
        raise


def get_or_404(db: Session, model: Type[T], obj_id: int) -> T:
    try:
        obj = db.get(model, obj_id)
    except SQLAlchemyError as e:
        raise StorageFailure(str(e)) from e
    if obj is None:
        raise NotFound(f"{model.__name__} {obj_id} not found")
    return obj


def _clean_name(name: str, what: str) -> str:
    name = (name or "").strip()
    if not name:
        raise InvalidInput(f"{what} name must not be empty")
    return name


# ---- Accounts ----

def create_account(db: Session, name: str) -> Account:
    account = Account(name=_clean_name(name, "account"))
    with unit_of_work(db):
        db.add(account)
        db.flush()
    logger.info("account.created", account_id=account.id, name=account.name)
    return account


def get_account(db: Session, account_id: int) -> Account:
    return get_or_404(db, Account, account_id)


def list_accounts(db: Session) -> List[Account]:
    return db.query(Account).order_by(Account.id).all()


# ---- Tags ----

def create_tag(db: Session, name: str) -> Tag:
    tag = Tag(name=_clean_name(name, "tag"))
    with unit_of_work(db):
        db.add(tag)
        db.flush()
    logger.info("tag.created", tag_id=tag.id, name=tag.name)
    return tag


def get_tag(db: Session, tag_id: int) -> Tag:
    return get_or_404(db, Tag, tag_id)


def list_tags(db: Session) -> List[Tag]:
    return db.query(Tag).order_by(Tag.id).all()
