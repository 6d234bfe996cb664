# routes_root.py
"""
Root endpoints: the ledger overview and a health check.
"""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from app.deps import get_db, templates
from app.services import queries
from app.services.queries import Scope
from app.services.store import list_accounts, list_tags

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
def index_page(
    request: Request,
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
):
    """
    Overview: accounts, tags, every transaction in the range, lifetime total,
    and the in-range total when a range was asked for.
    """
    date_range = queries.resolve_range(start_date, end_date)
    scope = Scope.all()

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "accounts": list_accounts(db),
            "tags": list_tags(db),
            "transactions": queries.list_transactions(db, scope, date_range),
            "total": queries.total(db, scope),
            "range_total": queries.range_total(db, scope, date_range),
            "date_range": date_range,
        },
    )


@router.get("/health")
def health():
    return {"status": "ok"}
