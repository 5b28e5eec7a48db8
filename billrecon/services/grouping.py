"""Hierarchical grouping of vendor and company bills.

A vendor bill consolidates the cost of one or more company bills.  It names
them either directly (``covers_company_bills``) or, for bills entered before
that field existed, through the purchase orders the company bills were raised
from (``covers_purchase_orders``).  The direct list wins whenever it is
non-empty.

Everything here is pure: no I/O, inputs are never mutated, and malformed
records degrade (zero amounts, skipped rows) instead of raising.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Mapping, Sequence
from decimal import Decimal
from typing import Any

from pydantic import ValidationError

from billrecon.constants import MATCH_TOLERANCE
from billrecon.errors import InvalidInputError
from billrecon.models import ZERO, format_currency, to_amount
from billrecon.models.bill import BillType, CompanyBill, PaymentStatus, VendorBill, parse_bill
from billrecon.models.reconciliation import (
    GroupedBillsResult,
    GroupedVendorBill,
    Reconciliation,
    ReconciliationState,
    ReconciliationStatus,
)
from billrecon.models.summary import BillFilters, BillSummary

logger = logging.getLogger(__name__)


def _ensure_sequence(bills: Any) -> Sequence[Any]:
    if isinstance(bills, (str, bytes, bytearray, Mapping)) or not isinstance(bills, Sequence):
        raise InvalidInputError(f"bills must be a sequence of bill records, got {type(bills).__name__}")
    return bills


def coerce_bills(bills: Sequence[Any]) -> list[CompanyBill | VendorBill]:
    """Read each record as a typed bill, dropping the ones that aren't bills."""
    result: list[CompanyBill | VendorBill] = []
    for position, record in enumerate(_ensure_sequence(bills)):
        if isinstance(record, (CompanyBill, VendorBill)):
            result.append(record)
            continue
        if not isinstance(record, Mapping):
            logger.debug("Skipping bill record #%d: %s is not a mapping", position, type(record).__name__)
            continue
        try:
            result.append(parse_bill(record))
        except ValidationError as exc:
            logger.debug("Skipping bill record #%d: %d validation error(s)", position, exc.error_count())
    return result


def _resolve_children(
    vendor_bill: VendorBill,
    by_id: dict[int, CompanyBill],
    by_purchase_order: dict[int, CompanyBill],
) -> list[CompanyBill]:
    if vendor_bill.covers_company_bills:
        return [by_id[bill_id] for bill_id in vendor_bill.covers_company_bills if bill_id in by_id]
    if vendor_bill.covers_purchase_orders:
        return [
            by_purchase_order[po_id] for po_id in vendor_bill.covers_purchase_orders if po_id in by_purchase_order
        ]
    return []


def _covered_count(vendor_bill: VendorBill) -> int:
    # An empty direct list counts as absent, same as for child resolution.
    return len(vendor_bill.covers_company_bills or []) or len(vendor_bill.covers_purchase_orders or [])


def reconcile(vendor_bill: VendorBill, child_bills: Sequence[CompanyBill]) -> Reconciliation:
    company_total = sum((to_amount(bill.invoice_amount) for bill in child_bills), ZERO)
    vendor_amount = to_amount(vendor_bill.invoice_amount)
    difference = vendor_amount - company_total
    covered = _covered_count(vendor_bill)
    return Reconciliation(
        company_total=company_total,
        vendor_amount=vendor_amount,
        difference=difference,
        is_matched=abs(difference) < MATCH_TOLERANCE,
        covered_pos=covered,
        linked_bills=len(child_bills),
        missing_bills=covered - len(child_bills),
    )


def group_bills_for_display(bills: Sequence[Any]) -> GroupedBillsResult:
    """Nest company bills under the vendor bills that cover them.

    Returns one grouped entry per vendor bill (input order) and the company
    bills no vendor bill covers.  A company bill covered by several vendor
    bills is nested under each of them.

    Raises ``InvalidInputError`` if ``bills`` is not a sequence.
    """
    typed = coerce_bills(bills)
    vendor_bills = [bill for bill in typed if isinstance(bill, VendorBill)]
    company_bills = [bill for bill in typed if isinstance(bill, CompanyBill)]

    by_id = {bill.id: bill for bill in company_bills}
    by_purchase_order = {
        bill.purchase_order_id: bill for bill in company_bills if bill.purchase_order_id is not None
    }

    linked_ids: set[int] = set()
    grouped: list[GroupedVendorBill] = []
    for vendor_bill in vendor_bills:
        children = _resolve_children(vendor_bill, by_id, by_purchase_order)
        linked_ids.update(child.id for child in children)
        grouped.append(
            GroupedVendorBill(
                **vendor_bill.model_dump(exclude={"child_bills", "reconciliation"}),
                child_bills=children,
                reconciliation=reconcile(vendor_bill, children),
            )
        )

    orphans = [bill for bill in company_bills if bill.id not in linked_ids]
    logger.debug(
        "Grouped %d vendor bill(s) over %d company bill(s), %d orphan(s)",
        len(grouped),
        len(company_bills),
        len(orphans),
    )
    return GroupedBillsResult(grouped_bills=grouped, orphan_bills=orphans)


def find_over_covered_bills(result: GroupedBillsResult) -> list[int]:
    """IDs of company bills nested under more than one vendor bill."""
    counts = Counter(child.id for vendor_bill in result.grouped_bills for child in vendor_bill.child_bills)
    return [bill_id for bill_id, count in counts.items() if count > 1]


def reconciliation_status(
    reconciliation: Reconciliation,
    formatter: Callable[[Decimal], str] = format_currency,
) -> ReconciliationStatus:
    has_missing = reconciliation.missing_bills > 0

    if reconciliation.is_matched and not has_missing:
        return ReconciliationStatus(state=ReconciliationState.MATCHED, label="Matched")

    difference = reconciliation.difference
    if not reconciliation.is_matched and abs(difference) >= MATCH_TOLERANCE:
        if difference > 0:
            label = f"Vendor +{formatter(difference)}"
        else:
            label = f"Company +{formatter(abs(difference))}"
        detail = f"+{reconciliation.missing_bills} missing" if has_missing else ""
        return ReconciliationStatus(state=ReconciliationState.MISMATCH, label=label, detail=detail)

    if has_missing:
        return ReconciliationStatus(
            state=ReconciliationState.PENDING,
            label=f"{reconciliation.missing_bills} PO pending",
        )

    return ReconciliationStatus(
        state=ReconciliationState.PARTIAL,
        label=f"{reconciliation.linked_bills}/{reconciliation.covered_pos} linked",
    )


def calculate_bill_summary(bills: Sequence[Any]) -> BillSummary:
    typed = coerce_bills(bills)
    return BillSummary(
        total=len(typed),
        company_bills=sum(1 for bill in typed if bill.bill_type == BillType.COMPANY.value),
        vendor_bills=sum(1 for bill in typed if bill.bill_type == BillType.VENDOR.value),
        unpaid=sum(1 for bill in typed if bill.payment_status == PaymentStatus.UNPAID.value),
        overdue=sum(1 for bill in typed if bill.payment_status == PaymentStatus.OVERDUE.value),
        total_amount=sum((to_amount(bill.invoice_amount) for bill in typed), ZERO),
        paid_amount=sum((to_amount(bill.paid_amount) for bill in typed), ZERO),
        balance_due=sum((to_amount(bill.balance_due) for bill in typed), ZERO),
    )


def filter_bills(bills: Sequence[Any], filters: BillFilters | None = None) -> list[CompanyBill | VendorBill]:
    typed = coerce_bills(bills)
    if filters is None:
        return typed
    return [bill for bill in typed if filters.matches(bill)]
