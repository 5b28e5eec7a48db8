"""Web test fixtures: TestClient with shared in-memory SQLite."""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.pool import StaticPool

from billrecon.models.bill import CompanyBill, VendorBill
from billrecon.repositories.sqlalchemy import SQLAlchemyBillRepository
from tests.conftest import apply_schema


def _make_test_engine():
    """Create a fresh in-memory SQLite engine with shared connection pool."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    with engine.connect() as conn:
        apply_schema(conn)

    return engine


def create_bill_in_db(engine, bill: CompanyBill | VendorBill) -> CompanyBill | VendorBill:
    """Store a bill in the test DB. Shared helper for web route tests."""
    with engine.connect() as conn:
        return SQLAlchemyBillRepository(conn).create(bill)


@pytest.fixture(autouse=True)
def web_test_db(monkeypatch):
    """Set up in-memory DB and patch the web app to use it."""
    engine = _make_test_engine()

    import web.deps as deps_module

    monkeypatch.setattr(deps_module, "get_engine", lambda: engine)

    import web.app as app_module

    monkeypatch.setattr(app_module, "initialize_db", lambda: None)

    yield engine

    engine.dispose()


@pytest.fixture()
def test_engine(web_test_db):
    return web_test_db


@pytest.fixture()
def client():
    from starlette.testclient import TestClient

    from web.app import app

    return TestClient(app)
