# routes_tags.py
"""
Routes for creating tags and viewing the transactions carrying one tag.
"""

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from app.deps import get_db, templates
from app.services import queries
from app.services.queries import Scope
from app.services.store import create_tag, get_tag

router = APIRouter(prefix="/tags")


@router.get("/new", response_class=HTMLResponse)
def new_tag_page(request: Request):
    return templates.TemplateResponse(request, "tag-new.html", {})


@router.post("/new")
def new_tag(name: str = Form(...), db: Session = Depends(get_db)):
    create_tag(db, name)
    return RedirectResponse(url="/", status_code=303)


@router.get("/{tag_id}", response_class=HTMLResponse)
def tag_page(
    request: Request,
    tag_id: int,
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
):
    tag = get_tag(db, tag_id)
    date_range = queries.resolve_range(start_date, end_date)
    scope = Scope.by_tag(tag_id)

    return templates.TemplateResponse(
        request,
        "tag.html",
        {
            "tag": tag,
            "transactions": queries.list_transactions(db, scope, date_range),
            "total": queries.total(db, scope),
            "range_total": queries.range_total(db, scope, date_range),
            "date_range": date_range,
        },
    )
