"""Currency symbol lookup for rendered amounts"""

from typing import Optional

from leasedocs.utils.config import get_settings

CURRENCY_SYMBOLS = {
    "USD": "$",
    "NGN": "₦",
    "EUR": "€",
    "GBP": "£",
}


def get_currency_symbol(code: Optional[str], default: Optional[str] = None) -> str:
    """Symbol for an ISO currency code.

    Unknown or missing codes fall back to the configured default symbol.
    """
    if code:
        symbol = CURRENCY_SYMBOLS.get(code.strip().upper())
        if symbol:
            return symbol
    if default is not None:
        return default
    return get_settings().default_currency_symbol
