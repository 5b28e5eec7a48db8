"""Root conftest: in-memory SQLite engine and bill fixtures."""

from __future__ import annotations

import pytest
from sqlalchemy import Connection, create_engine, event, text
from sqlalchemy.engine import Engine

from billrecon.models.bill import CompanyBill, VendorBill

# Matches Alembic head: 4c1d2e3f5a6b (create purchase_invoices)
SCHEMA_DDL = """
CREATE TABLE purchase_invoices (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    invoice_number VARCHAR(64),
    bill_type VARCHAR(10) NOT NULL,
    purchase_order_id INTEGER,
    order_number VARCHAR(64),
    supplier_id INTEGER,
    supplier_name VARCHAR(255),
    invoice_date VARCHAR(10),
    due_date VARCHAR(10),
    invoice_amount NUMERIC(15, 3),
    paid_amount NUMERIC(15, 3),
    balance_due NUMERIC(15, 3),
    payment_status VARCHAR(20) NOT NULL DEFAULT 'unpaid',
    covers_company_bills TEXT,
    covers_purchase_orders TEXT,
    notes TEXT,
    project_id INTEGER,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL
);

CREATE TABLE bill_payments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    bill_id INTEGER NOT NULL REFERENCES purchase_invoices(id) ON DELETE CASCADE,
    amount NUMERIC(15, 3) NOT NULL,
    payment_method VARCHAR(20) NOT NULL,
    reference VARCHAR(255) NOT NULL DEFAULT '',
    payment_date VARCHAR(10) NOT NULL,
    notes TEXT NOT NULL DEFAULT '',
    created_at DATETIME NOT NULL
)
"""


def apply_schema(conn: Connection) -> None:
    for statement in SCHEMA_DDL.strip().split(";"):
        stmt = statement.strip()
        if stmt:
            conn.execute(text(stmt))
    conn.commit()


@pytest.fixture()
def db_engine() -> Engine:
    engine = create_engine("sqlite:///:memory:")

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    return engine


@pytest.fixture()
def db_connection(db_engine: Engine) -> Connection:
    conn = db_engine.connect()
    apply_schema(conn)
    yield conn
    conn.close()


def _company_bill(**overrides) -> CompanyBill:
    defaults = dict(
        id=1,
        invoice_number="CB-0001",
        invoice_amount="100.000",
        paid_amount="0",
        balance_due="100.000",
        payment_status="unpaid",
        supplier_id=7,
        supplier_name="Gulf Lubricants LLC",
        purchase_order_id=50,
        order_number="PO-2026-050",
        invoice_date="2026-09-01",
        due_date="2026-10-01",
    )
    defaults.update(overrides)
    return CompanyBill(**defaults)


def _vendor_bill(**overrides) -> VendorBill:
    defaults = dict(
        id=2,
        invoice_number="VB-0001",
        invoice_amount="100.000",
        paid_amount="0",
        balance_due="100.000",
        payment_status="unpaid",
        supplier_id=7,
        supplier_name="Gulf Lubricants LLC",
        invoice_date="2026-09-05",
        covers_company_bills=[1],
    )
    defaults.update(overrides)
    return VendorBill(**defaults)


@pytest.fixture()
def company_bill():
    return _company_bill


@pytest.fixture()
def vendor_bill():
    return _vendor_bill
