"""
Shared fixtures: an isolated in-memory SQLite database per test, the
billing context built on it, and a TestClient wired to that context.
"""
import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from billing.api.deps import get_context
from billing.db.init_db import init_db
from billing.main import app
from billing.schemas.invoice import Invoice, LineItem
from billing.services.context import BillingContext


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def context(session_factory):
    return BillingContext.from_session_factory(session_factory)


@pytest.fixture
def client(context):
    app.dependency_overrides[get_context] = lambda: context
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def run():
    """Drive a coroutine to completion from a sync test."""
    return asyncio.run


@pytest.fixture
def make_invoice():
    def _make(number="1405", customer="Priya Raman", items=((2, 250), (1, 50)), **fields):
        return Invoice(
            invoice_number=number,
            date="2026-03-14",
            customer_name=customer,
            items=[
                LineItem(id=f"l{i}", description=f"Card {i}", quantity=q, rate=r)
                for i, (q, r) in enumerate(items)
            ],
            **fields,
        )
    return _make
