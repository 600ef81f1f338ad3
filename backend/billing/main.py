"""
Happy Greeting Billing Backend.

ARCHITECTURE:
- Invoice core (services/): line-item cart, derived totals, payment status
- Invoice store: SQL persistence with full-list live updates to every reader
- Catalog & company profile: JSON blobs loaded at startup, rewritten on change
- HTTP/WebSocket API: thin layer over the core for the billing frontend

Rendering, printing and PDF export happen in the frontend from the
/invoices/{id}/summary read surface; totals are never recomputed there.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from billing.api.routes import analytics, invoices, products
from billing.api.routes import settings as settings_routes
from billing.core.config import settings
from billing.core.exceptions import BillingError, BusinessError
from billing.db.init_db import init_db
from billing.db.session import SessionLocal, engine
from billing.services.context import BillingContext

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
    1. Create tables
    2. Load catalog and company profile into the billing context
    """
    logger.info("[*] Initializing database...")
    init_db(engine)
    app.state.context = BillingContext.from_session_factory(SessionLocal)
    logger.info("[OK] Billing context ready")

    yield

    logger.info("[*] Shutting down")


app = FastAPI(
    title="Happy Greeting Billing API",
    description="Invoices, product catalog and company profile for a small card shop.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Accept", "Origin"],
    max_age=600,
)


@app.exception_handler(BillingError)
async def billing_error_handler(request: Request, exc: BillingError):
    http_exc = BusinessError.from_billing_error(exc)
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


app.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
app.include_router(products.router, prefix="/products", tags=["products"])
app.include_router(settings_routes.router, prefix="/settings", tags=["settings"])
app.include_router(analytics.router, prefix="/analytics", tags=["analytics"])


@app.get("/health")
def health():
    return {"status": "ok"}
