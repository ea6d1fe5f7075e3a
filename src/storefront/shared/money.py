"""Currency string helpers.

Catalog prices are stored as display strings ("AED 1,299.00", "$12.50").
"""

import re

_NON_NUMERIC = re.compile(r"[^0-9.]")


def parse_price(value) -> float:
    """Extract the numeric amount from a formatted price. Returns 0.0 when nothing parses."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)

    cleaned = _NON_NUMERIC.sub("", str(value))
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def round_money(amount: float) -> float:
    return round(amount + 0.0, 2)
