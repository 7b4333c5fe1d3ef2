from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Optional

CENT = Decimal("0.01")


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Safely convert a JSON/spreadsheet value to Decimal.
    Floats go through str() so 0.1 stays 0.1 rather than its binary expansion.
    Returns None for missing or unparsable values.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return None
    return result if result.is_finite() else None


def to_display(amount: Decimal) -> Decimal:
    """
    Round a currency amount to 2 fractional digits for presentation.
    Only called at the edges; internal sums keep full precision.
    Precision grows with the amount, so very large totals still quantize.

    Examples:
    - 12.345 -> 12.35
    - 12.344 -> 12.34
    - -0.005 -> -0.01
    """
    amount = Decimal(amount)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(amount: Optional[Decimal]) -> Optional[str]:
    if amount is None:
        return None
    return str(to_display(amount))
