"""
Basket session module.
Owns the mutable state of one customization session: the basket lines, the
remaining swap pool and the pending swap target.

Swap attempts on unavailable options and quantity changes that would go
negative are absorbed here as no-ops: the mutators return False and leave
the basket untouched.
"""
import logging
from typing import List, Optional

from freshbasket.models import BasketItem, Package, PackageItem
from freshbasket.pricing.engine import PriceQuote, calculate_quote

logger = logging.getLogger(__name__)


class BasketSession:
    """
    Session-scoped basket state.

    Usage:
        session = BasketSession()
        session.initialize(package)
        session.begin_swap("p1")
        session.complete_swap(option)
        quote = session.quote()
    """
    def __init__(self):
        self.package: Optional[Package] = None
        self.items: List[BasketItem] = []
        self.swap_pool: List[PackageItem] = []
        self.pending_swap_target: Optional[str] = None

    @classmethod
    def start(cls, package: Package) -> "BasketSession":
        session = cls()
        session.initialize(package)
        return session

    def initialize(self, package: Package) -> None:
        """Seed the basket from the default items and the pool from the swap options."""
        if self.package is not None:
            raise RuntimeError("Session already initialized.")

        self.package = package
        self.items = [BasketItem(product=item.product, quantity=item.quantity) for item in package.default_items]
        in_basket = {item.product_id for item in self.items}
        # the loader already keeps these disjoint; a hand-built Package may not
        self.swap_pool = [opt for opt in package.swap_options if opt.product_id not in in_basket]
        self.pending_swap_target = None
        logger.debug("Session started for package %s", package.package_id)

    def _require_initialized(self):
        if self.package is None:
            raise RuntimeError("Session not initialized. Call initialize(package) first.")

    # ==========================================
    # Lookups
    # ==========================================

    def get_item(self, product_id: str) -> Optional[BasketItem]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def get_swap_option(self, product_id: str) -> Optional[PackageItem]:
        for option in self.swap_pool:
            if option.product_id == product_id:
                return option
        return None

    @property
    def is_empty(self) -> bool:
        return not self.items

    def can_proceed(self) -> bool:
        """Checkout is blocked while the basket is empty."""
        return self.package is not None and not self.is_empty

    # ==========================================
    # Mutations
    # ==========================================

    def adjust_quantity(self, product_id: str, delta: int) -> bool:
        """
        Change a line's quantity by delta, clamped at 0.
        A line that reaches 0 is removed. Stock is not checked here.
        """
        self._require_initialized()
        item = self.get_item(product_id)
        if item is None:
            return False

        item.quantity = max(0, item.quantity + delta)
        if item.quantity == 0:
            self.items.remove(item)
            logger.debug("Removed %s (quantity reached 0)", product_id)
        return True

    def remove_item(self, product_id: str) -> bool:
        """Drop a line. The product does not go back to the swap pool."""
        self._require_initialized()
        item = self.get_item(product_id)
        if item is None:
            return False
        self.items.remove(item)
        return True

    def begin_swap(self, product_id: str) -> bool:
        """Mark the line to be replaced; overwrites any earlier pending target."""
        self._require_initialized()
        if self.get_item(product_id) is None:
            return False
        self.pending_swap_target = product_id
        return True

    def cancel_swap(self) -> None:
        self.pending_swap_target = None

    def complete_swap(self, option: PackageItem) -> bool:
        """
        Replace the pending target with a swap option.
        The new line keeps the replaced line's quantity; the option leaves the pool.
        """
        self._require_initialized()
        if self.pending_swap_target is None:
            return False
        if not option.is_available or self.get_swap_option(option.product_id) is None:
            logger.info("Swap to %s rejected (unavailable or already used)", option.product_id)
            return False

        target = self.get_item(self.pending_swap_target)
        if target is None:
            # target was removed after begin_swap
            self.pending_swap_target = None
            return False

        self.items.remove(target)
        self.items.append(BasketItem(product=option.product, quantity=target.quantity))
        self._consume(option.product_id)
        self.pending_swap_target = None
        logger.debug("Swapped %s -> %s (x%d)", target.product_id, option.product_id, target.quantity)
        return True

    def add_from_swap_pool(self, option: PackageItem) -> bool:
        """Add a swap option outright: +1 if already in the basket, else a new line of 1."""
        self._require_initialized()
        if not option.is_available or self.get_swap_option(option.product_id) is None:
            logger.info("Add of %s rejected (unavailable or already used)", option.product_id)
            return False

        if self.get_item(option.product_id) is not None:
            self.adjust_quantity(option.product_id, 1)
        else:
            self.items.append(BasketItem(product=option.product, quantity=1))
        self._consume(option.product_id)
        return True

    def _consume(self, product_id: str) -> None:
        self.swap_pool = [opt for opt in self.swap_pool if opt.product_id != product_id]

    # ==========================================
    # Pricing
    # ==========================================

    def quote(self) -> PriceQuote:
        """Price the current basket; always recomputed from the lines."""
        self._require_initialized()
        return calculate_quote(self.items, self.package.base_price, self.package.value_price)
