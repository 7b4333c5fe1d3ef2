"""
Value-benchmark pricing strategy.
Moves the package price with the value of what is actually in the basket,
pivoting on the package's value benchmark (valuePrice).
"""
from decimal import Decimal
from typing import Dict

ZERO = Decimal("0")


def calculate_benchmark_price(
    items_total: Decimal,
    *,
    base_price: Decimal,
    value_price: Decimal
) -> Dict[str, Decimal]:
    """
    Dynamic price for a customized package.

    Rules:
    1. Basket worth more than the benchmark: the excess is added on top of
       the base price (surcharge).
    2. Basket worth less: the shortfall is taken off the base price, but never
       more than the package margin (base_price - value_price, floored at 0).
    3. The final price never drops below the benchmark.

    Example (base 50, benchmark 40):
    - items 40 -> adjustment 0,   final 50
    - items 30 -> adjustment -10, final 40
    - items 55 -> adjustment +15, final 65
    """
    difference = ZERO
    max_deduction = max(ZERO, base_price - value_price)

    # 1. Surcharge / discount
    if items_total > value_price:
        adjustment = items_total - value_price
    elif items_total < value_price:
        difference = value_price - items_total
        discount = min(difference, max_deduction)
        adjustment = -discount if discount > 0 else ZERO
    else:
        adjustment = ZERO

    # 2. Floor at the benchmark
    final_price = max(base_price + adjustment, value_price)

    return {
        "adjustment": adjustment,
        "final_price": final_price,
        "difference": difference,
        "max_deduction": max_deduction,
    }
