"""
Error taxonomy for the billing core and its HTTP translation.

Domain code raises BillingError subclasses. The API layer turns them into
HTTPExceptions through BusinessError so that messages stay user-facing and
internal details (SQL errors, stack traces) only reach the logs.
"""
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class BillingError(Exception):
    """Base class. Every billing failure is recoverable by the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BillingError):
    """A required field is missing or malformed. Nothing was mutated."""


class NotFoundError(BillingError):
    """Update/lookup target does not exist in the store or catalog."""


class SyncError(BillingError):
    """
    Transient I/O failure talking to the backing store.

    The caller keeps its in-memory draft so the save can be retried
    without re-entering data.
    """


class BusinessError:
    """Billing exceptions as HTTP responses with safe messages."""

    @staticmethod
    def not_found(resource: str = "Resource", reason: str = "") -> HTTPException:
        if reason:
            logger.info(f"Not found: {resource} - {reason}")
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )

    @staticmethod
    def bad_request(detail: str) -> HTTPException:
        """
        400 for input validation errors.

        OK to include specific details here since user caused the issue.
        Examples: "Customer name required", "Price cannot be negative"
        """
        logger.info(f"Bad request: {detail}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )

    @staticmethod
    def sync_failed(original_error: Exception = None) -> HTTPException:
        """
        503 for store failures. Non-fatal: the client should keep its draft and retry.
        """
        if original_error:
            logger.warning(
                f"Store unavailable: {type(original_error).__name__}: {original_error}"
            )
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not reach the invoice store. Your changes were not saved, please retry.",
        )

    @staticmethod
    def server_error(original_error: Exception = None) -> HTTPException:
        """
        Generic 500 - logs actual error internally, hides from user.
        """
        if original_error:
            logger.error(
                f"Internal server error: {type(original_error).__name__}: {str(original_error)}",
                exc_info=True
            )
        else:
            logger.error("Internal server error occurred", exc_info=True)

        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An internal error occurred. Please try again later.",
        )

    @staticmethod
    def from_billing_error(error: BillingError) -> HTTPException:
        """Map a domain exception onto its HTTP counterpart."""
        if isinstance(error, ValidationError):
            return BusinessError.bad_request(error.message)
        if isinstance(error, NotFoundError):
            return BusinessError.not_found(reason=error.message)
        if isinstance(error, SyncError):
            return BusinessError.sync_failed(error.__cause__ or error)
        return BusinessError.server_error(error)
