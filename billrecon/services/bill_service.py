from __future__ import annotations

import logging
from decimal import Decimal

from billrecon.constants import COMPANY_PREFIX, MATCH_TOLERANCE, VENDOR_PREFIX
from billrecon.models import ZERO, format_currency, to_amount
from billrecon.models.bill import BillType, CompanyBill, Payment, PaymentData, PaymentStatus, VendorBill
from billrecon.models.reconciliation import GroupedBillsResult
from billrecon.models.summary import BillFilters, BillSummary, SyncReport
from billrecon.repositories.base import BillRepository
from billrecon.services.grouping import calculate_bill_summary, find_over_covered_bills, group_bills_for_display

logger = logging.getLogger(__name__)


def _settled_status(paid_amount: Decimal, balance_due: Decimal) -> str:
    if balance_due < MATCH_TOLERANCE:
        return PaymentStatus.PAID.value
    if paid_amount > ZERO:
        return PaymentStatus.PARTIAL.value
    return PaymentStatus.UNPAID.value


class BillService:
    def __init__(self, bill_repo: BillRepository) -> None:
        self.bill_repo = bill_repo

    def create_bill(self, bill: CompanyBill | VendorBill) -> CompanyBill | VendorBill:
        created = self.bill_repo.create(bill)
        logger.info("Bill created: id=%s type=%s number=%s", created.id, created.bill_type, created.invoice_number)
        return created

    def get_bill(self, bill_id: int) -> CompanyBill | VendorBill | None:
        return self.bill_repo.get_by_id(bill_id)

    def list_bills(self, filters: BillFilters | None = None) -> list[CompanyBill | VendorBill]:
        return self.bill_repo.list_all(filters)

    def list_payments(self, bill_id: int) -> list[Payment]:
        return self.bill_repo.list_payments(bill_id)

    def get_grouped_bills(self, filters: BillFilters | None = None) -> GroupedBillsResult:
        result = group_bills_for_display(self.bill_repo.list_all(filters))
        over_covered = find_over_covered_bills(result)
        if over_covered:
            logger.warning("Company bills covered by more than one vendor bill: %s", over_covered)
        return result

    def get_summary(self, filters: BillFilters | None = None) -> BillSummary:
        return calculate_bill_summary(self.bill_repo.list_all(filters))

    def record_payment(self, bill_id: int, payment: PaymentData) -> CompanyBill | VendorBill:
        bill = self.bill_repo.get_by_id(bill_id)
        if bill is None:
            raise ValueError("Bill not found")
        if payment.amount <= ZERO:
            raise ValueError("Payment amount must be greater than zero")
        balance = bill.amount_due
        if payment.amount > balance:
            raise ValueError(f"Payment amount cannot exceed balance due ({format_currency(balance)})")

        # The stored balance may have moved since it was read.
        if self.bill_repo.record_payment(bill_id, payment) is None:
            current = self.bill_repo.get_by_id(bill_id)
            remaining = current.amount_due if current is not None else ZERO
            raise ValueError(f"Payment amount cannot exceed balance due ({format_currency(remaining)})")

        updated = self.bill_repo.get_by_id(bill_id)
        if updated is None:
            raise RuntimeError(f"Bill disappeared while recording payment (id={bill_id})")
        logger.info(
            "Payment of %s recorded on bill %s via %s, status now %s",
            payment.amount,
            bill_id,
            payment.payment_method.value,
            updated.payment_status,
        )
        return updated

    def sync_payment_status(self) -> int:
        """Align ``payment_status`` with the stored balance; returns how many bills changed."""
        fixed = 0
        for bill in self.bill_repo.list_all():
            paid_amount = to_amount(bill.paid_amount)
            balance_due = bill.amount_due
            settled = balance_due < MATCH_TOLERANCE
            is_paid = bill.payment_status == PaymentStatus.PAID.value
            if settled == is_paid:
                continue
            status = _settled_status(paid_amount, balance_due)
            self.bill_repo.update_payment(bill.id, paid_amount, balance_due, status)
            logger.info("Bill %s status %s -> %s", bill.id, bill.payment_status, status)
            fixed += 1
        return fixed

    def sync_invoice_prefixes(self) -> int:
        updated = 0
        for bill in self.bill_repo.list_all():
            prefix = COMPANY_PREFIX if bill.bill_type == BillType.COMPANY.value else VENDOR_PREFIX
            number = bill.invoice_number or str(bill.id)
            # A number carrying either prefix is left alone, even the other type's.
            if bill.invoice_number and number.startswith((COMPANY_PREFIX, VENDOR_PREFIX)):
                continue
            self.bill_repo.update_invoice_number(bill.id, f"{prefix}{number}")
            updated += 1
        if updated:
            logger.info("Prefixed %d invoice number(s)", updated)
        return updated

    def reset_orphan_payments(self) -> int:
        """Undo payments made directly on company bills that no vendor bill covers."""
        reset = 0
        for bill in group_bills_for_display(self.bill_repo.list_all()).orphan_bills:
            if to_amount(bill.paid_amount) == ZERO:
                continue
            self.bill_repo.update_payment(
                bill.id,
                ZERO,
                to_amount(bill.invoice_amount),
                PaymentStatus.UNPAID.value,
            )
            logger.warning("Reset payment of %s on orphan company bill %s", bill.paid_amount, bill.id)
            reset += 1
        return reset

    def run_all_sync(self) -> SyncReport:
        report = SyncReport(
            status_fixed=self.sync_payment_status(),
            prefixes_updated=self.sync_invoice_prefixes(),
            orphans_reset=self.reset_orphan_payments(),
        )
        logger.info(
            "Data sync finished: %d status, %d prefix, %d orphan fix(es)",
            report.status_fixed,
            report.prefixes_updated,
            report.orphans_reset,
        )
        return report
