from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from billrecon.models.bill import Amount, CompanyBill, VendorBill


class Reconciliation(BaseModel):
    """Vendor amount compared with the sum of the company bills it covers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    company_total: Amount
    vendor_amount: Amount
    difference: Amount
    is_matched: bool
    covered_pos: int = Field(alias="coveredPOs")  # declared coverage, dangling references included
    linked_bills: int
    missing_bills: int


class GroupedVendorBill(VendorBill):
    model_config = ConfigDict(populate_by_name=True)

    child_bills: list[CompanyBill] = Field(default_factory=list, alias="childBills")
    reconciliation: Reconciliation


class GroupedBillsResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    grouped_bills: list[GroupedVendorBill] = Field(default_factory=list, alias="groupedBills")
    orphan_bills: list[CompanyBill] = Field(default_factory=list, alias="orphanBills")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ReconciliationState(str, Enum):
    MATCHED = "matched"
    MISMATCH = "mismatch"
    PENDING = "pending"
    PARTIAL = "partial"


class ReconciliationStatus(BaseModel):
    state: ReconciliationState
    label: str
    detail: str = ""
