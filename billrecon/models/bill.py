from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    TypeAdapter,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from billrecon.constants import local_today
from billrecon.models import to_amount

# Side fields that read as None instead of rejecting the whole bill.
_OPTIONAL_FIELDS = (
    "invoice_number",
    "supplier_id",
    "supplier_name",
    "order_number",
    "invoice_date",
    "due_date",
    "notes",
    "project_id",
    "created_at",
)

# Decimal in Python, plain number in JSON.
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class BillType(str, Enum):
    COMPANY = "company"
    VENDOR = "vendor"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"
    CHEQUE = "cheque"
    CARD = "card"


class BaseBill(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: int
    invoice_number: str | None = None
    invoice_amount: Amount | None = None
    paid_amount: Amount | None = None
    balance_due: Amount | None = None
    payment_status: str = PaymentStatus.UNPAID.value
    supplier_id: int | None = None
    supplier_name: str | None = None
    order_number: str | None = None
    invoice_date: str | None = None
    due_date: str | None = None  # 'YYYY-MM-DD'
    notes: str | None = None
    project_id: int | None = None
    created_at: datetime | None = None

    @field_validator("invoice_amount", "paid_amount", "balance_due", mode="before")
    @classmethod
    def _lenient_amount(cls, value: Any) -> Decimal | None:
        if value is None:
            return None
        return to_amount(value)

    @field_validator(*_OPTIONAL_FIELDS, mode="wrap")
    @classmethod
    def _invalid_to_none(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return None

    @field_validator("payment_status", mode="wrap")
    @classmethod
    def _status_value(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> str:
        if isinstance(value, Enum):
            value = value.value
        if value is None:
            return PaymentStatus.UNPAID.value
        try:
            return handler(value)
        except ValidationError:
            return PaymentStatus.UNPAID.value

    @property
    def amount_due(self) -> Decimal:
        """Outstanding balance, falling back to invoice minus paid when not stored."""
        if self.balance_due is not None:
            return self.balance_due
        return to_amount(self.invoice_amount) - to_amount(self.paid_amount)

    def _due(self) -> date | None:
        if not self.due_date:
            return None
        try:
            return date.fromisoformat(self.due_date[:10])
        except ValueError:
            return None

    @property
    def is_overdue(self) -> bool:
        if self.payment_status == PaymentStatus.PAID.value:
            return False
        due = self._due()
        if due is None:
            return False
        return local_today() > due

    @property
    def days_overdue(self) -> int:
        due = self._due()
        if due is None:
            return 0
        return max((local_today() - due).days, 0)


class CompanyBill(BaseBill):
    bill_type: Literal["company"] = "company"
    purchase_order_id: int | None = None

    @field_validator("purchase_order_id", mode="wrap")
    @classmethod
    def _invalid_purchase_order(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return None


def _reference_id(item: Any) -> int | None:
    if isinstance(item, bool):
        return None
    if isinstance(item, int):
        return item
    if isinstance(item, float) and item.is_integer():
        return int(item)
    if isinstance(item, str) and item.strip().isdigit():
        return int(item)
    return None


class VendorBill(BaseBill):
    bill_type: Literal["vendor"] = "vendor"
    # Unusable entries are kept as None: they still count as declared coverage.
    covers_company_bills: list[int | None] | None = None
    covers_purchase_orders: list[int | None] | None = None

    @field_validator("covers_company_bills", "covers_purchase_orders", mode="before")
    @classmethod
    def _reference_list(cls, value: Any) -> list[int | None] | None:
        if not isinstance(value, (list, tuple)):
            return None
        return [_reference_id(item) for item in value]


Bill = Annotated[Union[CompanyBill, VendorBill], Field(discriminator="bill_type")]

_bill_adapter: TypeAdapter[CompanyBill | VendorBill] = TypeAdapter(Bill)


def parse_bill(data: Any) -> CompanyBill | VendorBill:
    """Validate a raw record into the bill class matching its ``bill_type``."""
    if isinstance(data, BaseBill):
        return data
    return _bill_adapter.validate_python(dict(data))


class PaymentData(BaseModel):
    amount: Decimal
    payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    reference: str = ""
    payment_date: date = Field(default_factory=local_today)
    notes: str = ""


class Payment(PaymentData):
    id: int | None = None
    bill_id: int
    created_at: datetime | None = None
