from datetime import date, datetime
from decimal import Decimal
from typing import NamedTuple
from zoneinfo import ZoneInfo

from billrecon.settings import settings

# Vendor and company totals closer than this are considered equal.
MATCH_TOLERANCE = Decimal("0.01")

COMPANY_PREFIX = "CB-"
VENDOR_PREFIX = "VB-"


class StatusDisplay(NamedTuple):
    label: str
    color: str


UNKNOWN_COLOR = "#6b7280"

PAYMENT_STATUS_DISPLAY = {
    "unpaid": StatusDisplay("Unpaid", "#f59e0b"),
    "partial": StatusDisplay("Partially Paid", "#3b82f6"),
    "paid": StatusDisplay("Paid", "#10b981"),
    "overdue": StatusDisplay("Overdue", "#ef4444"),
}

BILL_TYPE_DISPLAY = {
    "company": StatusDisplay("Company Bill", "#3b82f6"),
    "vendor": StatusDisplay("Vendor Bill", "#8b5cf6"),
}


def payment_status_display(status: str | None) -> StatusDisplay:
    key = getattr(status, "value", status) or ""
    return PAYMENT_STATUS_DISPLAY.get(key, StatusDisplay(key, UNKNOWN_COLOR))


def bill_type_display(bill_type: str | None) -> StatusDisplay:
    key = getattr(bill_type, "value", bill_type) or ""
    return BILL_TYPE_DISPLAY.get(key, StatusDisplay(key, UNKNOWN_COLOR))


def local_tz() -> ZoneInfo:
    return ZoneInfo(settings.timezone)


def local_today() -> date:
    return datetime.now(local_tz()).date()
