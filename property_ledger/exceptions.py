"""
Error taxonomy for the ledger.

Services raise these; the API layer turns them into HTTP
responses through ledger_exception_handler. ValidationError
also subclasses ValueError so callers that only care about
bad input can keep catching ValueError.
"""

from dataclasses import dataclass
import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base class for every error the ledger raises on purpose."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "LEDGER_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(LedgerError, ValueError):
    """Bad input: non-positive amount, missing id, unknown account code."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"


class NotFoundError(LedgerError):
    """A referenced lease, schedule, increase or account does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id=None):
        self.resource = resource
        self.resource_id = resource_id
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} {resource_id} not found"
        super().__init__(message)


class PostingError(LedgerError):
    """
    The store failed while writing a transaction.

    Raised only after the session has been rolled back, so no
    half-posted transaction is ever left behind.
    """

    error_code = "POSTING_ERROR"


@dataclass
class BatchItemError:
    """
    One failed item of a batch run.

    Collected into the batch result instead of being raised, so
    the rest of the batch keeps going.
    """
    item_id: int
    reason: str
    lease_id: int | None = None
    period: str | None = None


async def ledger_exception_handler(
    request: Request, exc: LedgerError
) -> JSONResponse:
    """Render a LedgerError as a JSON error payload."""
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s", request.method, request.url.path, exc.message
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error_code, "detail": exc.message},
    )
