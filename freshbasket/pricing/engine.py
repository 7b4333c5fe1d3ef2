"""
Pricing engine.
Pure functions that turn (basket lines, base price, value benchmark) into the
amount the shopper owes, plus the batch helper used by the HTTP surface.
Nothing here is cached: every quote is re-derived from the lines it is given.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from freshbasket.pricing.rounding import format_money, to_decimal
from freshbasket.pricing.strategies.benchmark import calculate_benchmark_price
from freshbasket.pricing.strategies.fixed import calculate_fixed_price

ZERO = Decimal("0")

STRATEGIES: Dict[str, Callable[..., Dict[str, Decimal]]] = {
    "benchmark": calculate_benchmark_price,
    "fixed": calculate_fixed_price,
}


@dataclass(frozen=True)
class PriceQuote:
    """Result of one pricing pass. Money fields keep full precision."""
    items_total: Decimal
    base_price: Decimal
    value_price: Optional[Decimal]
    adjustment: Decimal
    final_price: Decimal
    strategy: str = "benchmark"

    @property
    def has_adjustment(self) -> bool:
        return self.adjustment != 0

    @property
    def is_discount(self) -> bool:
        return self.adjustment < 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "itemsTotalValue": format_money(self.items_total),
            "packageBasePrice": format_money(self.base_price),
            "packageValuePrice": format_money(self.value_price),
            "priceAdjustment": format_money(self.adjustment),
            "finalPrice": format_money(self.final_price),
            "strategy": self.strategy,
        }


def _line(item: Any) -> Tuple[Decimal, int]:
    """(price, quantity) of a basket line; accepts BasketItem-like objects or mappings."""
    if isinstance(item, dict):
        price, quantity = item.get("price"), item.get("quantity")
    else:
        price, quantity = getattr(item, "price", None), getattr(item, "quantity", None)
    price = to_decimal(price)
    try:
        quantity = int(quantity or 0)
    except (ValueError, TypeError):
        quantity = 0
    return (price if price is not None else ZERO), quantity


def calculate_items_total(items: Iterable[Any]) -> Decimal:
    """Sum of price x quantity over all lines."""
    return sum((price * quantity for price, quantity in map(_line, items)), ZERO)


def select_strategy(items: Iterable[Any], base_price: Optional[Decimal], value_price: Optional[Decimal]) -> str:
    """
    Pick the pricing strategy.
    A missing/zero benchmark, or any negative input, disables dynamic pricing.
    """
    if value_price is None or value_price <= 0:
        return "fixed"
    if base_price is not None and base_price < 0:
        return "fixed"
    for price, quantity in map(_line, items):
        if price < 0 or quantity < 0:
            return "fixed"
    return "benchmark"


def calculate_quote(items: Iterable[Any], base_price: Any, value_price: Any) -> PriceQuote:
    """
    Price a basket.
    Malformed inputs degrade to "no adjustment" instead of raising.
    """
    items = list(items)
    base = to_decimal(base_price)
    value = to_decimal(value_price)

    # 1. Totals
    items_total = calculate_items_total(items)

    # 2. Strategy
    strategy = select_strategy(items, base, value)
    base = base if base is not None else ZERO
    result = STRATEGIES[strategy](items_total, base_price=base, value_price=value)

    return PriceQuote(
        items_total=items_total,
        base_price=base,
        value_price=value,
        adjustment=result["adjustment"],
        final_price=result["final_price"],
        strategy=strategy,
    )


def calculate_price_adjustment(items: Iterable[Any], base_price: Any, value_price: Any) -> Decimal:
    return calculate_quote(items, base_price, value_price).adjustment


def calculate_final_price(items: Iterable[Any], base_price: Any, value_price: Any) -> Decimal:
    return calculate_quote(items, base_price, value_price).final_price


def batch_quote(baskets: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Price several baskets in one call.

    Each entry is a dict with "items", "base_price" and "value_price" (plus
    any extra keys, which are echoed back). A basket that cannot be priced
    gets an "error" entry instead of aborting the batch.
    """
    results = []

    for basket in baskets:
        try:
            quote = calculate_quote(
                basket.get("items") or [],
                basket.get("base_price"),
                basket.get("value_price"),
            )
            row = {k: v for k, v in basket.items() if k != "items"}
            row.update(quote.to_dict())
            results.append(row)
        except Exception as e:
            error_row = {k: v for k, v in basket.items() if k != "items"} if isinstance(basket, dict) else {}
            error_row["error"] = str(e)
            results.append(error_row)

    return results
