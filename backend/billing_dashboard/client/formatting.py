# billing_dashboard/client/formatting.py
from typing import Optional

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "NGN": "₦",
}


def format_amount(minor_units: int, currency: str = "USD") -> str:
    """1234 -> "$12.34". Currencies without a known symbol get the ISO code as suffix."""
    sign = "-" if minor_units < 0 else ""
    units, cents = divmod(abs(int(minor_units)), 100)
    value = f"{units:,}.{cents:02d}"
    symbol = CURRENCY_SYMBOLS.get((currency or "").upper())
    if symbol:
        return f"{sign}{symbol}{value}"
    return f"{sign}{value} {(currency or '').upper()}"


def customer_label(customer: Optional[dict]) -> str:
    if not customer:
        return "Unknown"
    return customer.get("name") or customer.get("email") or "Unknown"


def type_label(tx_type: str) -> str:
    # only the first underscore, e.g. "subscription_renewal" -> "subscription renewal"
    return tx_type.replace("_", " ", 1)
