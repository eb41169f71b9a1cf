"""
Domain exceptions and their HTTP mapping.

Services and repositories raise these plain exceptions; the handlers
registered on the app turn them into JSON error responses. Internal
details of store failures are logged, never returned.
"""
import logging
from typing import List

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base class for ledger generation errors."""


class InvalidQuery(LedgerError):
    """Ledger query is missing a required filter or carries a malformed value."""


class StoreUnavailable(LedgerError):
    """The invoice, payment or customer store failed to respond."""


class InvoiceValidationError(Exception):
    """Invoice or payment data breaks a business rule."""


class DuplicateInvoiceNumber(Exception):
    """No free invoice number could be drawn."""


class ImportFileError(Exception):
    """An uploaded import file is unreadable or one of its rows is invalid."""

    def __init__(self, message: str, details: List[str] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or []


async def _invalid_query_handler(request: Request, exc: InvalidQuery) -> JSONResponse:
    logger.info(f"Rejected ledger query on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


async def _store_unavailable_handler(request: Request, exc: StoreUnavailable) -> JSONResponse:
    logger.error(f"Store unavailable on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Data store unavailable, try again later"},
    )


async def _invoice_validation_handler(request: Request, exc: InvoiceValidationError) -> JSONResponse:
    logger.info(f"Validation error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


async def _duplicate_number_handler(request: Request, exc: DuplicateInvoiceNumber) -> JSONResponse:
    logger.warning(f"Invoice number collision on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc)},
    )


async def _import_file_handler(request: Request, exc: ImportFileError) -> JSONResponse:
    logger.info(f"Import rejected on {request.url.path}: {exc.message} ({len(exc.details)} row errors)")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message, "errors": exc.details},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidQuery, _invalid_query_handler)
    app.add_exception_handler(StoreUnavailable, _store_unavailable_handler)
    app.add_exception_handler(InvoiceValidationError, _invoice_validation_handler)
    app.add_exception_handler(DuplicateInvoiceNumber, _duplicate_number_handler)
    app.add_exception_handler(ImportFileError, _import_file_handler)
