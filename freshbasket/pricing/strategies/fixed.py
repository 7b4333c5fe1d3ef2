"""
Fixed pricing strategy.
Used when a package has no usable value benchmark, or its pricing data is
malformed: the shopper pays the base price whatever the basket holds.
The result is floored at the benchmark when one is set, and never drops
below zero, so a negative base price yields 0.
"""
from decimal import Decimal
from typing import Dict, Optional

ZERO = Decimal("0")


def calculate_fixed_price(
    items_total: Decimal,
    *,
    base_price: Decimal,
    value_price: Optional[Decimal] = None
) -> Dict[str, Decimal]:
    floor = value_price if value_price is not None and value_price > 0 else ZERO
    return {
        "adjustment": ZERO,
        "final_price": max(base_price, floor),
        "difference": ZERO,
        "max_deduction": ZERO,
    }
