from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import Connection, text
from sqlalchemy.engine import RowMapping

from billrecon.constants import MATCH_TOLERANCE, local_tz
from billrecon.models.bill import CompanyBill, Payment, PaymentData, PaymentStatus, VendorBill, parse_bill
from billrecon.models.summary import BillFilters
from billrecon.repositories.base import BillRepository

_BILL_COLUMNS = (
    "invoice_number",
    "bill_type",
    "purchase_order_id",
    "order_number",
    "supplier_id",
    "supplier_name",
    "invoice_date",
    "due_date",
    "invoice_amount",
    "paid_amount",
    "balance_due",
    "payment_status",
    "covers_company_bills",
    "covers_purchase_orders",
    "notes",
    "project_id",
)

# Text binds compare as strings unless cast.
_AMOUNT = "CAST(:amount AS DECIMAL(15, 3))"
_BALANCE = "COALESCE(balance_due, COALESCE(invoice_amount, 0) - COALESCE(paid_amount, 0))"


def _now() -> datetime:
    return datetime.now(local_tz())


def _amount_param(value: Decimal | None) -> str | None:
    # Bound as text so every driver keeps the exact decimal digits.
    return None if value is None else str(value)


def _ids_param(ids: list[int] | None) -> str | None:
    return None if ids is None else json.dumps(ids)


def _ids_column(raw: Any) -> list[int] | None:
    if raw is None or raw == "":
        return None
    return json.loads(raw)


class SQLAlchemyBillRepository(BillRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @staticmethod
    def _bill_params(bill: CompanyBill | VendorBill) -> dict[str, Any]:
        return {
            "invoice_number": bill.invoice_number,
            "bill_type": bill.bill_type,
            "purchase_order_id": getattr(bill, "purchase_order_id", None),
            "order_number": bill.order_number,
            "supplier_id": bill.supplier_id,
            "supplier_name": bill.supplier_name,
            "invoice_date": bill.invoice_date,
            "due_date": bill.due_date,
            "invoice_amount": _amount_param(bill.invoice_amount),
            "paid_amount": _amount_param(bill.paid_amount),
            "balance_due": _amount_param(bill.balance_due),
            "payment_status": bill.payment_status,
            "covers_company_bills": _ids_param(getattr(bill, "covers_company_bills", None)),
            "covers_purchase_orders": _ids_param(getattr(bill, "covers_purchase_orders", None)),
            "notes": bill.notes,
            "project_id": bill.project_id,
        }

    def create(self, bill: CompanyBill | VendorBill) -> CompanyBill | VendorBill:
        now = _now()
        params = self._bill_params(bill)
        params.update(created_at=now, updated_at=now)
        columns = ", ".join((*_BILL_COLUMNS, "created_at", "updated_at"))
        placeholders = ", ".join(f":{name}" for name in (*_BILL_COLUMNS, "created_at", "updated_at"))
        result = self.conn.execute(
            text(f"INSERT INTO purchase_invoices ({columns}) VALUES ({placeholders})"),
            params,
        )
        bill_id = result.lastrowid
        self.conn.commit()
        created = self.get_by_id(bill_id)
        if created is None:
            raise RuntimeError(f"Failed to retrieve bill after create (id={bill_id})")
        return created

    @staticmethod
    def _row_to_bill(row: RowMapping) -> CompanyBill | VendorBill:
        data = dict(row)
        data["covers_company_bills"] = _ids_column(data.get("covers_company_bills"))
        data["covers_purchase_orders"] = _ids_column(data.get("covers_purchase_orders"))
        return parse_bill(data)

    def get_by_id(self, bill_id: int) -> CompanyBill | VendorBill | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM purchase_invoices WHERE id = :id"),
                {"id": bill_id},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_bill(row)

    def list_all(self, filters: BillFilters | None = None) -> list[CompanyBill | VendorBill]:
        clauses: list[str] = []
        params: dict[str, Any] = {}
        if filters is not None:
            if filters.bill_type != "all":
                clauses.append("bill_type = :bill_type")
                params["bill_type"] = filters.bill_type
            if filters.payment_status != "all":
                clauses.append("payment_status = :payment_status")
                params["payment_status"] = filters.payment_status
            if filters.project_id is not None:
                clauses.append("project_id = :project_id")
                params["project_id"] = filters.project_id
            if filters.supplier_id is not None:
                clauses.append("supplier_id = :supplier_id")
                params["supplier_id"] = filters.supplier_id
            if filters.search.strip():
                clauses.append(
                    "(LOWER(invoice_number) LIKE :search OR LOWER(supplier_name) LIKE :search "
                    "OR LOWER(order_number) LIKE :search)"
                )
                params["search"] = f"%{filters.search.strip().lower()}%"

        query = "SELECT * FROM purchase_invoices"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY id"

        rows = self.conn.execute(text(query), params).mappings().fetchall()
        return [self._row_to_bill(row) for row in rows]

    def update_payment(
        self,
        bill_id: int,
        paid_amount: Decimal,
        balance_due: Decimal,
        payment_status: str,
    ) -> None:
        self.conn.execute(
            text(
                "UPDATE purchase_invoices SET paid_amount = :paid_amount, balance_due = :balance_due, "
                "payment_status = :payment_status, updated_at = :updated_at WHERE id = :id"
            ),
            {
                "paid_amount": _amount_param(paid_amount),
                "balance_due": _amount_param(balance_due),
                "payment_status": payment_status,
                "updated_at": _now(),
                "id": bill_id,
            },
        )
        self.conn.commit()

    def update_invoice_number(self, bill_id: int, invoice_number: str) -> None:
        self.conn.execute(
            text("UPDATE purchase_invoices SET invoice_number = :invoice_number, updated_at = :updated_at WHERE id = :id"),
            {"invoice_number": invoice_number, "updated_at": _now(), "id": bill_id},
        )
        self.conn.commit()

    def record_payment(self, bill_id: int, payment: PaymentData) -> Payment | None:
        """Store the payment and settle the bill in one transaction.

        Returns None, writing nothing, when the bill's balance no longer covers the amount.
        """
        now = _now()
        params = {
            "id": bill_id,
            "amount": _amount_param(payment.amount),
            "tolerance": _amount_param(MATCH_TOLERANCE),
            "paid": PaymentStatus.PAID.value,
            "partial": PaymentStatus.PARTIAL.value,
            "updated_at": now,
        }
        try:
            updated = self.conn.execute(
                text(
                    f"UPDATE purchase_invoices SET "
                    f"paid_amount = COALESCE(paid_amount, 0) + {_AMOUNT}, "
                    f"balance_due = {_BALANCE} - {_AMOUNT}, "
                    f"payment_status = CASE WHEN {_BALANCE} - {_AMOUNT} < CAST(:tolerance AS DECIMAL(15, 3)) "
                    f"THEN :paid ELSE :partial END, "
                    f"updated_at = :updated_at "
                    f"WHERE id = :id AND {_BALANCE} >= {_AMOUNT}"
                ),
                params,
            )
            if updated.rowcount != 1:
                self.conn.rollback()
                return None
            result = self.conn.execute(
                text(
                    "INSERT INTO bill_payments (bill_id, amount, payment_method, reference, payment_date, notes, created_at) "
                    "VALUES (:bill_id, :amount, :payment_method, :reference, :payment_date, :notes, :created_at)"
                ),
                {
                    "bill_id": bill_id,
                    "amount": _amount_param(payment.amount),
                    "payment_method": payment.payment_method.value,
                    "reference": payment.reference,
                    "payment_date": payment.payment_date.isoformat(),
                    "notes": payment.notes,
                    "created_at": now,
                },
            )
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise
        return Payment(id=result.lastrowid, bill_id=bill_id, created_at=now, **payment.model_dump())

    def list_payments(self, bill_id: int) -> list[Payment]:
        rows = (
            self.conn.execute(
                text("SELECT * FROM bill_payments WHERE bill_id = :bill_id ORDER BY id"),
                {"bill_id": bill_id},
            )
            .mappings()
            .fetchall()
        )
        return [
            Payment(
                id=row["id"],
                bill_id=row["bill_id"],
                amount=Decimal(str(row["amount"])),
                payment_method=row["payment_method"],
                reference=row["reference"],
                payment_date=row["payment_date"],
                notes=row["notes"],
                created_at=row["created_at"],
            )
            for row in rows
        ]
