"""
Checkout handoff.
Freezes a customized basket and its price into the payload the checkout step
receives. Built only from a non-empty basket.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from freshbasket.basket import BasketSession
from freshbasket.models import BasketLine, Package
from freshbasket.pricing.engine import PriceQuote
from freshbasket.pricing.rounding import format_money


@dataclass(frozen=True)
class CheckoutHandoff:
    basket: Tuple[BasketLine, ...]
    package: Package
    quote: PriceQuote

    @property
    def package_base_price(self) -> Optional[Decimal]:
        return self.package.base_price

    @property
    def package_value_price(self) -> Optional[Decimal]:
        return self.package.value_price

    @property
    def price_adjustment(self) -> Decimal:
        return self.quote.adjustment

    @property
    def final_price(self) -> Decimal:
        return self.quote.final_price

    @property
    def items_total_value(self) -> Decimal:
        return self.quote.items_total

    @property
    def items_count(self) -> int:
        return sum(item.quantity for item in self.basket)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "basket": [item.to_dict() for item in self.basket],
            "package": {
                "id": self.package.package_id,
                "name": self.package.name,
                "description": self.package.description,
            },
            "packageBasePrice": format_money(self.package_base_price),
            "packageValuePrice": format_money(self.package_value_price),
            "priceAdjustment": format_money(self.price_adjustment),
            "finalPrice": format_money(self.final_price),
            "itemsTotalValue": format_money(self.items_total_value),
        }


def build_handoff(session: BasketSession) -> Optional[CheckoutHandoff]:
    """
    Snapshot the session for checkout.
    Returns None while the basket is empty (the proceed action stays disabled).
    """
    if not session.can_proceed():
        return None

    return CheckoutHandoff(
        basket=tuple(item.snapshot() for item in session.items),
        package=session.package,
        quote=session.quote(),
    )
