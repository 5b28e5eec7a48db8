from abc import ABC, abstractmethod
from decimal import Decimal

from billrecon.models.bill import CompanyBill, Payment, PaymentData, VendorBill
from billrecon.models.summary import BillFilters

StoredBill = CompanyBill | VendorBill


class BillRepository(ABC):
    @abstractmethod
    def create(self, bill: StoredBill) -> StoredBill: ...

    @abstractmethod
    def get_by_id(self, bill_id: int) -> StoredBill | None: ...

    @abstractmethod
    def list_all(self, filters: BillFilters | None = None) -> list[StoredBill]: ...

    @abstractmethod
    def update_payment(
        self,
        bill_id: int,
        paid_amount: Decimal,
        balance_due: Decimal,
        payment_status: str,
    ) -> None: ...

    @abstractmethod
    def update_invoice_number(self, bill_id: int, invoice_number: str) -> None: ...

    @abstractmethod
    def record_payment(self, bill_id: int, payment: PaymentData) -> Payment | None: ...

    @abstractmethod
    def list_payments(self, bill_id: int) -> list[Payment]: ...
