# app/services/queries.py
#
# Range query engine
# Resolves the date range of a listing, filters transactions by scope
# (all / one account / one tag) and computes lifetime and in-range totals.

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

import config
from app.services.errors import InvalidInput
from app.services.formatting import get_timezone
from app.services.schemas import TransactionRow
from models import Account, Tag, Transaction, TransactionTag


# ---- Scope ----

@dataclass(frozen=True)
class Scope:
    """Which transactions a listing or total considers."""

    kind: str = "all"
    id: Optional[int] = None

    @classmethod
    def all(cls) -> "Scope":
        return cls("all")

    @classmethod
    def by_account(cls, account_id: int) -> "Scope":
        return cls("account", account_id)

    @classmethod
    def by_tag(cls, tag_id: int) -> "Scope":
        return cls("tag", tag_id)

    def criteria(self) -> list:
        if self.kind == "all":
            return []
        if self.kind == "account":
            return [Transaction.account_id == self.id]
        if self.kind == "tag":
            tagged = select(TransactionTag.trans_id).where(TransactionTag.tag_id == self.id)
            return [Transaction.id.in_(tagged)]
        raise InvalidInput(f"unknown scope {self.kind!r}")


# ---- Date range ----

@dataclass(frozen=True)
class DateRange:
    """
    Inclusive range of calendar days [start, end], as seen in the display
    timezone `tz` (config.DISPLAY_TIMEZONE when None).

    `explicit` is True when the caller supplied at least one of the bounds;
    only then is an in-range total worth showing.
    """

    start: date
    end: date
    explicit: bool = False
    tz: Optional[tzinfo] = None

    def _midnight_utc(self, day: date) -> datetime:
        # Local midnight as the naive UTC instant timestamps are stored in
        local = datetime.combine(day, time.min, tzinfo=self.tz or get_timezone())
        return local.astimezone(timezone.utc).replace(tzinfo=None)

    @property
    def start_at(self) -> datetime:
        return self._midnight_utc(self.start)

    @property
    def end_before(self) -> datetime:
        # First instant after the end day
        return self._midnight_utc(self.end + timedelta(days=1))

    def criteria(self) -> list:
        return [Transaction.timestamp >= self.start_at, Transaction.timestamp < self.end_before]


def parse_optional_date(s: Optional[str]) -> Optional[date]:
    if not s:
        return None
    s = s.strip()
    if not s:
        return None
    try:
        return datetime.strptime(s, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidInput(f"invalid date {s!r}, expected YYYY-MM-DD")


def resolve_range(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    today: Optional[date] = None,
    tz: Optional[tzinfo] = None,
) -> DateRange:
    """
    start_date / end_date: 'YYYY-MM-DD' or None/"".

    Missing start → config.BEGINNING_OF_TIME.
    Missing end → tomorrow, so that everything recorded today is included
    whatever its time of day. "Today" is the current date in the display
    timezone.
    """
    start = parse_optional_date(start_date)
    end = parse_optional_date(end_date)
    explicit = start is not None or end is not None

    if start is None:
        start = config.BEGINNING_OF_TIME
    if end is None:
        if today is None:
            today = datetime.now(tz or get_timezone()).date()
        end = today + timedelta(days=1)

    return DateRange(start=start, end=end, explicit=explicit, tz=tz)


# ---- Listings & totals ----

def tag_names_aggregate(dialect_name: str):
    """
    Tag names of a group joined by ", " (empty string when there are none).
    SQLite spells it group_concat; PostgreSQL and SQL Server spell it string_agg.
    """
    if dialect_name == "sqlite":
        joined = func.group_concat(Tag.name, ", ")
    else:
        joined = func.string_agg(Tag.name, ", ")
    return func.coalesce(joined, "")


def list_transactions(db: Session, scope: Scope, date_range: DateRange) -> List[TransactionRow]:
    """
    Transactions of `scope` inside `date_range`, newest first (ties by id),
    each with its account name and its tag names joined by ", ".
    """
    tag_names = tag_names_aggregate(db.get_bind().dialect.name)

    rows = (
        db.query(
            Transaction.id,
            Transaction.timestamp,
            Transaction.amount,
            Transaction.description,
            Transaction.account_id,
            Transaction.notes,
            Account.name.label("account_name"),
            tag_names.label("tags"),
        )
        .join(Account, Account.id == Transaction.account_id)
        .outerjoin(TransactionTag, TransactionTag.trans_id == Transaction.id)
        .outerjoin(Tag, Tag.id == TransactionTag.tag_id)
        .filter(*scope.criteria(), *date_range.criteria())
        .group_by(Transaction.id, Account.name)
        .order_by(Transaction.timestamp.desc(), Transaction.id.asc())
        .all()
    )

    return [TransactionRow(**row._asdict()) for row in rows]


def total(db: Session, scope: Scope) -> int:
    """Lifetime sum of amounts in scope (cents), whatever the date range."""
    value = (
        db.query(func.coalesce(func.sum(Transaction.amount), 0))
        .filter(*scope.criteria())
        .scalar()
    )
    return int(value)


def range_total(db: Session, scope: Scope, date_range: DateRange) -> Optional[int]:
    """
    Sum of amounts in scope inside the range, or None when the range was not
    given explicitly (the lifetime total already says it all).
    """
    if not date_range.explicit:
        return None

    value = (
        db.query(func.coalesce(func.sum(Transaction.amount), 0))
        .filter(*scope.criteria(), *date_range.criteria())
        .scalar()
    )
    return int(value)
