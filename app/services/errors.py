# app/services/errors.py
#
# Ledger errors
# Typed failures raised by the core services. The web layer maps them to
# HTTP responses (see app/main.py).


class LedgerError(Exception):
    """Base class for every failure the ledger core reports."""

    status_code = 500


class NotFound(LedgerError):
    """An id lookup missed."""

    status_code = 404


class InvalidReference(LedgerError):
    """A referenced account / tag / transaction does not exist."""

    status_code = 400


class InvalidInput(LedgerError):
    """Malformed direction, amount, date or name."""

    status_code = 400


class StorageFailure(LedgerError):
    """The store is unavailable or rejected a write for an unclassified reason."""

    status_code = 500
