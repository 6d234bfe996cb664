"""
Tests for the transaction manager: amount signs, create / get / update / delete
and the tag association rows that travel with a transaction.
"""

import pytest

from app.services.errors import InvalidInput, InvalidReference, NotFound
from app.services.queries import Scope, list_transactions, resolve_range, total
from app.services.transactions import (
    create_transaction,
    delete_transaction,
    get_transaction,
    signed_amount,
    update_transaction,
)
from app.services.store import unit_of_work
from models import Transaction, TransactionTag


class TestSignedAmount:
    """direction + magnitude → signed cents."""

    def test_expense_is_negative(self):
        assert signed_amount("expense", "12.50") == -1250

    def test_income_is_positive(self):
        assert signed_amount("income", "50") == 5000

    def test_accepts_numbers(self):
        assert signed_amount("income", 7) == 700
        assert signed_amount("expense", 0.1) == -10

    def test_sub_cent_rounds_half_up(self):
        assert signed_amount("income", "12.345") == 1235
        assert signed_amount("expense", "0.005") == -1

    def test_unknown_direction_rejected(self):
        with pytest.raises(InvalidInput):
            signed_amount("refund", "1.00")

    def test_too_large_rejected(self):
        with pytest.raises(InvalidInput):
            signed_amount("income", "1e20")

    def test_largest_storable_amount(self):
        assert signed_amount("expense", "92233720368547758.07") == -(2**63 - 1)

    @pytest.mark.parametrize("magnitude", ["abc", "-5", "", "NaN", "Infinity"])
    def test_bad_magnitude_rejected(self, magnitude):
        with pytest.raises(InvalidInput):
            signed_amount("income", magnitude)


class TestCreateTransaction:

    def test_checking_food_scenario(self, db, checking, food, ts):
        """Expense of 12.50 tagged Food is stored as -1250 and shows up under the tag."""
        trans_id = create_transaction(
            db,
            ts(2024, 5, 3, 12, 0),
            signed_amount("expense", "12.50"),
            "lunch",
            checking.id,
            None,
            [food.id],
        )

        assert db.get(Transaction, trans_id).amount == -1250
        assert total(db, Scope.by_account(checking.id)) == -1250

        rows = list_transactions(db, Scope.by_tag(food.id), resolve_range())
        assert len(rows) == 1
        assert rows[0].tags == "Food"
        assert rows[0].account_name == "Checking"

    def test_round_trip_through_get(self, db, checking, food, rent, ts):
        trans_id = create_transaction(
            db, ts(2024, 1, 1, 9, 30), -9900, "January rent", checking.id, "paid late", [rent.id, food.id]
        )

        detail = get_transaction(db, trans_id)

        assert detail.amount == -9900
        assert detail.description == "January rent"
        assert detail.account_id == checking.id
        assert detail.notes == "paid late"
        assert detail.timestamp == ts(2024, 1, 1, 9, 30)
        assert detail.tag_ids == {food.id, rent.id}

    def test_duplicate_tag_ids_are_stored_once(self, db, checking, food, ts):
        trans_id = create_transaction(db, ts(2024, 1, 1), 100, "x", checking.id, None, [food.id, food.id])

        links = db.query(TransactionTag).filter(TransactionTag.trans_id == trans_id).all()
        assert len(links) == 1

    def test_unknown_account_is_invalid_reference(self, db, ts):
        with pytest.raises(InvalidReference):
            create_transaction(db, ts(2024, 1, 1), 100, "x", 999)
        assert db.query(Transaction).count() == 0

    def test_unknown_tag_writes_nothing(self, db, checking, food, ts):
        with pytest.raises(InvalidReference):
            create_transaction(db, ts(2024, 1, 1), 100, "x", checking.id, None, [food.id, 42])

        assert db.query(Transaction).count() == 0
        assert db.query(TransactionTag).count() == 0

    def test_out_of_range_cents_rejected(self, db, checking, ts):
        with pytest.raises(InvalidInput):
            create_transaction(db, ts(2024, 1, 1), 2**63, "x", checking.id)
        assert db.query(Transaction).count() == 0

    def test_amount_must_be_integer_cents(self, db, checking, ts):
        with pytest.raises(InvalidInput):
            create_transaction(db, ts(2024, 1, 1), 12.5, "x", checking.id)

    def test_missing_timestamp_defaults_to_now(self, db, checking):
        trans_id = create_transaction(db, None, 100, "x", checking.id)
        assert db.get(Transaction, trans_id).timestamp is not None


class TestUpdateTransaction:

    @pytest.fixture
    def trans_id(self, db, checking, food, ts):
        return create_transaction(db, ts(2024, 2, 1, 8, 0), -500, "coffee", checking.id, None, [food.id])

    def test_without_tags_keeps_tags(self, db, trans_id, savings, food):
        update_transaction(db, trans_id, -700, "coffee x2", savings.id, "notes")

        detail = get_transaction(db, trans_id)
        assert detail.amount == -700
        assert detail.description == "coffee x2"
        assert detail.account_id == savings.id
        assert detail.notes == "notes"
        assert detail.tag_ids == {food.id}

    def test_empty_tags_clear_associations(self, db, trans_id, checking):
        update_transaction(db, trans_id, -500, "coffee", checking.id, tag_ids=[])

        assert get_transaction(db, trans_id).tag_ids == set()
        assert db.query(TransactionTag).count() == 0

    def test_tags_are_replaced(self, db, trans_id, checking, rent):
        update_transaction(db, trans_id, -500, "coffee", checking.id, tag_ids=[rent.id])

        assert get_transaction(db, trans_id).tag_ids == {rent.id}

    def test_same_tags_resubmitted(self, db, trans_id, checking, food, rent):
        update_transaction(db, trans_id, -500, "coffee", checking.id, tag_ids=[food.id, rent.id])

        assert get_transaction(db, trans_id).tag_ids == {food.id, rent.id}
        assert db.query(TransactionTag).count() == 2

    def test_timestamp_kept_unless_given(self, db, trans_id, checking, ts):
        update_transaction(db, trans_id, -500, "coffee", checking.id)
        assert get_transaction(db, trans_id).timestamp == ts(2024, 2, 1, 8, 0)

        update_transaction(db, trans_id, -500, "coffee", checking.id, timestamp=ts(2024, 3, 1, 10, 0))
        assert get_transaction(db, trans_id).timestamp == ts(2024, 3, 1, 10, 0)

    def test_missing_transaction_is_not_found(self, db, checking):
        with pytest.raises(NotFound):
            update_transaction(db, 123, -500, "coffee", checking.id)

    def test_unknown_tag_leaves_row_untouched(self, db, trans_id, checking, food):
        with pytest.raises(InvalidReference):
            update_transaction(db, trans_id, -1, "changed", checking.id, tag_ids=[77])

        db.expire_all()
        detail = get_transaction(db, trans_id)
        assert detail.amount == -500
        assert detail.description == "coffee"
        assert detail.tag_ids == {food.id}

    def test_unknown_account_is_invalid_reference(self, db, trans_id):
        with pytest.raises(InvalidReference):
            update_transaction(db, trans_id, -500, "coffee", 999)


class TestDeleteTransaction:

    def test_removes_row_and_tags(self, db, checking, food, rent, ts):
        trans_id = create_transaction(db, ts(2024, 1, 1), -100, "x", checking.id, None, [food.id, rent.id])

        assert delete_transaction(db, trans_id) == checking.id

        with pytest.raises(NotFound):
            get_transaction(db, trans_id)
        assert db.query(TransactionTag).count() == 0

    def test_missing_transaction_is_not_found(self, db):
        with pytest.raises(NotFound):
            delete_transaction(db, 5)


class TestGetTransaction:

    def test_selected_flags(self, db, checking, savings, food, rent, ts):
        trans_id = create_transaction(db, ts(2024, 1, 1), 100, "x", savings.id, None, [rent.id])

        detail = get_transaction(db, trans_id)

        assert [(a.name, a.selected) for a in detail.accounts] == [("Checking", False), ("Savings", True)]
        assert [(t.name, t.selected) for t in detail.tags] == [("Food", False), ("Rent", True)]

    def test_missing_is_not_found(self, db):
        with pytest.raises(NotFound):
            get_transaction(db, 1)


class TestUnitOfWork:

    def test_unexpected_error_rolls_back(self, db, checking, ts):
        with pytest.raises(RuntimeError):
            with unit_of_work(db):
                db.add(Transaction(timestamp=ts(2024, 1, 1), amount=1, description="x", account_id=checking.id))
                db.flush()
                raise RuntimeError("boom")

        assert db.query(Transaction).count() == 0
