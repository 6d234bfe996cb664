# app/deps.py
# Role: Shared application-level dependencies.
#       Provides the Jinja2 templates loader (with the money / datetime formatters
#       registered as template globals) and the standard SQLAlchemy session dependency.

"""
Shared dependencies for the ledger web app.
"""

import os
from typing import Generator

from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from db import SessionLocal
from app.services.formatting import format_amount, format_display_datetime, format_for_input

# -------------------------------------------------------------------
# Templates
# -------------------------------------------------------------------

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")
STATIC_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "static")

# Jinja2 templates loader (used by all HTML-rendering routes)
templates = Jinja2Templates(directory=TEMPLATES_DIR)
templates.env.globals.update(
    currency=format_amount,
    datetime=format_display_datetime,
    input_datetime=format_for_input,
)

# -------------------------------------------------------------------
# Database dependency
# -------------------------------------------------------------------

def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session and ensures it is closed.

    Typical usage in routes:
        db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
