"""FastAPI dependencies: the billing context built at startup."""
from fastapi import HTTPException, status
from fastapi.requests import HTTPConnection

from billing.services.context import BillingContext


def get_context(connection: HTTPConnection) -> BillingContext:
    """Works for both HTTP requests and WebSocket connections."""
    ctx = getattr(connection.app.state, "context", None)
    if ctx is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting up",
        )
    return ctx
