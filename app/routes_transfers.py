# routes_transfers.py
"""
Routes for moving money between two accounts.
"""

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from app.deps import get_db, templates
from app.services.store import list_accounts
from app.services.transfers import transfer

router = APIRouter(prefix="/transfers")


@router.get("/new", response_class=HTMLResponse)
def new_transfer_page(request: Request, db: Session = Depends(get_db)):
    return templates.TemplateResponse(
        request,
        "transfer-new.html",
        {"accounts": list_accounts(db)},
    )


@router.post("/new")
def new_transfer(
    from_account_id: int = Form(...),
    to_account_id: int = Form(...),
    amount: str = Form(...),
    db: Session = Depends(get_db),
):
    transfer(db, from_account_id, to_account_id, amount)
    return RedirectResponse(url="/", status_code=303)
