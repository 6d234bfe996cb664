# routes_accounts.py
"""
Routes for creating accounts and viewing one account's transactions.
"""

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from app.deps import get_db, templates
from app.services import queries
from app.services.queries import Scope
from app.services.store import create_account, get_account

router = APIRouter(prefix="/accounts")


@router.get("/new", response_class=HTMLResponse)
def new_account_page(request: Request):
    return templates.TemplateResponse(request, "account-new.html", {})


@router.post("/new")
def new_account(name: str = Form(...), db: Session = Depends(get_db)):
    create_account(db, name)
    return RedirectResponse(url="/", status_code=303)


@router.get("/{account_id}", response_class=HTMLResponse)
def account_page(
    request: Request,
    account_id: int,
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
):
    account = get_account(db, account_id)
    date_range = queries.resolve_range(start_date, end_date)
    scope = Scope.by_account(account_id)

    return templates.TemplateResponse(
        request,
        "account.html",
        {
            "account": account,
            "transactions": queries.list_transactions(db, scope, date_range),
            "total": queries.total(db, scope),
            "range_total": queries.range_total(db, scope, date_range),
            "date_range": date_range,
        },
    )
