"""
Tests for bulk CSV import.
"""

from datetime import datetime

import pytest

from app.services.csv_import import import_transactions_csv
from app.services.errors import InvalidInput
from app.services.queries import Scope, list_transactions, resolve_range, total
from app.services.store import list_accounts, list_tags
from models import Transaction


def write_csv(tmp_path, text, name="statement.csv"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


class TestImportTransactionsCsv:

    def test_imports_rows_and_creates_names(self, db, checking, tmp_path):
        path = write_csv(
            tmp_path,
            "Date,Description,Amount,Account,Tags,Notes\n"
            "2024-01-05,groceries,-45.50,Checking,Food;Home,weekly shop\n"
            "2024-01-01 09:00,salary,\"3000,00\",Checking,,\n"
            "2024-01-10,interest,1.25,Savings,,\n"
            "2024-01-11,cash,-20,,,\n",
        )

        assert import_transactions_csv(db, path) == 4

        assert [a.name for a in list_accounts(db)] == ["Checking", "Savings", "Imported"]
        assert [t.name for t in list_tags(db)] == ["Food", "Home"]
        assert total(db, Scope.by_account(checking.id)) == -4550 + 300000

        rows = list_transactions(db, Scope.all(), resolve_range())
        groceries = next(r for r in rows if r.description == "groceries")
        assert groceries.amount == -4550
        assert groceries.notes == "weekly shop"
        assert sorted(groceries.tags.split(", ")) == ["Food", "Home"]

        salary = next(r for r in rows if r.description == "salary")
        assert salary.timestamp == datetime(2024, 1, 1, 9, 0)

    def test_missing_columns(self, db, tmp_path):
        path = write_csv(tmp_path, "date,amount\n2024-01-01,1\n")
        with pytest.raises(InvalidInput, match="missing required columns"):
            import_transactions_csv(db, path)

    def test_bad_row_aborts_whole_file(self, db, tmp_path):
        path = write_csv(
            tmp_path,
            "date,description,amount,account\n"
            "2024-01-01,ok,10,Cash\n"
            "01.02.2024,bad date,10,Cash\n",
        )

        with pytest.raises(InvalidInput, match="line 3"):
            import_transactions_csv(db, path)

        assert db.query(Transaction).count() == 0
        assert list_accounts(db) == []
