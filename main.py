# main.py
# Role: Application entry point for the ledger.
#       Initializes logging and the FastAPI app, creates database tables,
#       mounts static assets, maps ledger errors to error pages,
#       and registers all route modules.

"""
Main FastAPI app for the personal ledger.

Here we only:
- create the FastAPI app
- set up static files
- create DB tables
- map ledger errors to responses
- include route modules
"""

import time

import uvicorn
from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles

import config
from db import engine, init_db
from app.deps import STATIC_DIR, templates
from app.log import configure_logging, get_logger
from app.routes_root import router as root_router
from app.routes_accounts import router as accounts_router
from app.routes_tags import router as tags_router
from app.routes_transactions import router as transactions_router
from app.routes_transfers import router as transfers_router
from app.services.errors import LedgerError


# -------------------------------------------------------------------
# App & DB setup
# -------------------------------------------------------------------

configure_logging()
logger = get_logger("ledger.web")

# Create database tables (only if they don't exist yet).
init_db(engine)

# FastAPI application instance
app = FastAPI(title="Ledger")

# Serve static files (CSS) from /static
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "request",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 1),
    )
    return response


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    logger.warning(
        "ledger.error",
        error=type(exc).__name__,
        detail=str(exc),
        path=request.url.path,
    )
    return templates.TemplateResponse(
        request,
        "error.html",
        {"error": type(exc).__name__, "detail": str(exc)},
        status_code=exc.status_code,
    )


# -------------------------------------------------------------------
# Include routers
# -------------------------------------------------------------------

# Overview + health
app.include_router(root_router)

# Accounts: create, per-account view
app.include_router(accounts_router)

# Tags: create, per-tag view
app.include_router(tags_router)

# Transactions: new / edit / delete
app.include_router(transactions_router)

# Transfers between accounts
app.include_router(transfers_router)


def run():
    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    run()
