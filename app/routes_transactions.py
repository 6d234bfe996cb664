# routes_transactions.py
"""
Routes for creating, editing and deleting single transactions.

Form fields:
- type         "income" | "expense"
- amount       unsigned amount in major units, e.g. 12.50
- description, account_id, notes
- tags         multi-select; arrives as one or many values, FastAPI hands us a list
- timestamp    (edit only) datetime-local value, optional
"""

from typing import List

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from app.deps import get_db, templates
from app.services import transactions as transaction_service
from app.services.formatting import format_for_input, parse_form_input
from app.services.schemas import SelectOption
from app.services.store import get_or_404, list_accounts, list_tags
from app.services.transactions import signed_amount
from models import Transaction

router = APIRouter(prefix="/transactions")


@router.get("/new", response_class=HTMLResponse)
def new_transaction_page(
    request: Request,
    account_id: int | None = Query(None),
    db: Session = Depends(get_db),
):
    accounts = [
        SelectOption(id=a.id, name=a.name, selected=a.id == account_id)
        for a in list_accounts(db)
    ]
    return templates.TemplateResponse(
        request,
        "transaction-new.html",
        {"accounts": accounts, "tags": list_tags(db)},
    )


@router.post("/new")
def new_transaction(
    type: str = Form(...),
    amount: str = Form(...),
    description: str = Form(""),
    account_id: int = Form(...),
    notes: str = Form(""),
    tags: List[int] = Form(default=[]),
    db: Session = Depends(get_db),
):
    transaction_service.create_transaction(
        db,
        timestamp=None,
        amount=signed_amount(type, amount),
        description=description,
        account_id=account_id,
        notes=notes,
        tag_ids=tags,
    )
    return RedirectResponse(url=f"/accounts/{account_id}", status_code=303)


@router.get("/{trans_id}", response_class=HTMLResponse)
def transaction_page(request: Request, trans_id: int, db: Session = Depends(get_db)):
    detail = transaction_service.get_transaction(db, trans_id)
    return templates.TemplateResponse(
        request,
        "transaction.html",
        {
            "transaction": detail,
            "accounts": detail.accounts,
            "tags": detail.tags,
        },
    )


def _submitted_timestamp(db: Session, trans_id: int, value: str):
    """
    The timestamp to store, or None when the form sent back the stored one.
    The form only has minute precision, so an untouched field must not
    overwrite seconds and microseconds.
    """
    value = value.strip()
    if not value:
        return None
    stored = get_or_404(db, Transaction, trans_id)
    if value == format_for_input(stored.timestamp):
        return None
    return parse_form_input(value)


@router.post("/{trans_id}")
def edit_transaction(
    trans_id: int,
    type: str = Form(...),
    amount: str = Form(...),
    description: str = Form(""),
    account_id: int = Form(...),
    notes: str = Form(""),
    timestamp: str = Form(""),
    tags: List[int] = Form(default=[]),
    db: Session = Depends(get_db),
):
    transaction_service.update_transaction(
        db,
        trans_id,
        amount=signed_amount(type, amount),
        description=description,
        account_id=account_id,
        notes=notes,
        timestamp=_submitted_timestamp(db, trans_id, timestamp),
        # Tags are only touched when a selection was submitted
        tag_ids=tags or None,
    )
    return RedirectResponse(url=f"/transactions/{trans_id}", status_code=303)


@router.post("/{trans_id}/delete")
def delete_transaction(trans_id: int, db: Session = Depends(get_db)):
    account_id = transaction_service.delete_transaction(db, trans_id)
    return RedirectResponse(url=f"/accounts/{account_id}", status_code=303)
