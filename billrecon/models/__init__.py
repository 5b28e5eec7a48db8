from decimal import Decimal, InvalidOperation

from billrecon.settings import settings

ZERO = Decimal("0")


def to_amount(value: object) -> Decimal:
    """Read a monetary value leniently: anything that isn't a finite number counts as zero."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip().replace(",", ""))
        except InvalidOperation:
            return ZERO
    else:
        return ZERO
    if not amount.is_finite():
        return ZERO
    return amount


def format_currency(amount: object) -> str:
    """Format an amount for display: Decimal('1234.5') -> 'OMR 1,234.500'"""
    value = to_amount(amount)
    return f"{settings.currency_code} {value:,.{settings.currency_decimals}f}"
