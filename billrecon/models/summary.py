from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from billrecon.models.bill import Amount, CompanyBill, VendorBill


class BillSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int = 0
    company_bills: int = 0
    vendor_bills: int = 0
    unpaid: int = 0
    overdue: int = 0
    total_amount: Amount = Decimal("0")
    paid_amount: Amount = Decimal("0")
    balance_due: Amount = Decimal("0")


class BillFilters(BaseModel):
    bill_type: str = "all"
    payment_status: str = "all"
    project_id: int | None = None
    supplier_id: int | None = None
    search: str = ""

    def matches(self, bill: CompanyBill | VendorBill) -> bool:
        if self.bill_type != "all" and bill.bill_type != self.bill_type:
            return False
        if self.payment_status != "all" and bill.payment_status != self.payment_status:
            return False
        if self.project_id is not None and bill.project_id != self.project_id:
            return False
        if self.supplier_id is not None and bill.supplier_id != self.supplier_id:
            return False
        needle = self.search.strip().lower()
        if needle:
            haystack = (bill.invoice_number, bill.supplier_name, bill.order_number)
            return any(needle in value.lower() for value in haystack if value)
        return True


class SyncReport(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status_fixed: int = 0
    prefixes_updated: int = 0
    orphans_reset: int = 0
