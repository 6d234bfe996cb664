# models.py
# Role: SQLAlchemy ORM models for the ledger domain.
#       Accounts, tags, transactions and the transaction <-> tag association.

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)

from db import Base


class Account(Base):
    """A place money lives in (bank account, wallet, card, ...)."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)


class Tag(Base):
    """A free-form label; many-to-many with transactions."""

    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)


class Transaction(Base):
    """
    ORM model representing a single ledger transaction.

    Amounts are integer minor units (cents). The sign is the direction:
    positive = income, negative = expense. Timestamps are naive UTC.
    """

    __tablename__ = "transactions"

    # Primary key
    id = Column(Integer, primary_key=True, index=True)

    # When the transaction happened (UTC)
    timestamp = Column(DateTime, nullable=False, index=True)

    # Signed amount in cents
    amount = Column(BigInteger, nullable=False)

    description = Column(String, nullable=False)

    # Account this transaction belongs to
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)

    # Optional free-text notes
    notes = Column(Text, nullable=True)


class TransactionTag(Base):
    """Association row; (trans_id, tag_id) is unique."""

    __tablename__ = "transaction_tags"

    trans_id = Column(Integer, ForeignKey("transactions.id"), primary_key=True)
    tag_id = Column(Integer, ForeignKey("tags.id"), primary_key=True, index=True)
