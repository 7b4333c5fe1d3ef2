"""
Data model definitions.
Core structures shared by the loader, the basket session and checkout:
Product, PackageItem, Package, BasketItem and its frozen BasketLine snapshot.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from freshbasket.pricing.rounding import format_money


@dataclass(frozen=True)
class Product:
    """
    A catalog product as seen by one customization session.
    Read-only reference data; the loader fills in defaults for missing fields.
    """
    product_id: str
    name: str = ""
    price: Decimal = Decimal("0")
    category: str = ""
    unit: str = "unit"
    description: str = ""
    image: str = ""                # opaque reference, never processed here
    is_available: bool = True
    count_in_stock: int = 999


@dataclass(frozen=True)
class PackageItem:
    """A product reference plus the quantity the package ships it with."""
    product: Product
    quantity: int = 1

    @property
    def product_id(self) -> str:
        return self.product.product_id

    @property
    def is_available(self) -> bool:
        return self.product.is_available


@dataclass(frozen=True)
class Package:
    """
    A priced bundle of default products with optional swap alternatives.
    """
    package_id: str
    name: str = ""
    description: str = ""
    category: str = ""
    base_price: Optional[Decimal] = None
    value_price: Optional[Decimal] = None  # the value benchmark
    default_items: Tuple[PackageItem, ...] = ()
    swap_options: Tuple[PackageItem, ...] = ()


class _LineFields:
    """Display fields shared by working basket items and their checkout snapshots."""
    product: Product
    quantity: int

    @property
    def product_id(self) -> str:
        return self.product.product_id

    @property
    def name(self) -> str:
        return self.product.name

    @property
    def price(self) -> Decimal:
        return self.product.price

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity

    def to_dict(self) -> dict:
        p = self.product
        return {
            "productId": p.product_id,
            "name": p.name,
            "price": format_money(p.price),
            "quantity": self.quantity,
            "lineTotal": format_money(self.line_total),
            "category": p.category,
            "unit": p.unit,
            "image": p.image or None,
            "isAvailable": p.is_available,
            "countInStock": p.count_in_stock,
        }


@dataclass
class BasketItem(_LineFields):
    """
    One line of the shopper's working basket.
    Caches the product's display fields; line_total is always derived.
    """
    product: Product
    quantity: int = 1

    def snapshot(self) -> "BasketLine":
        """Frozen copy, used when the basket leaves the session."""
        return BasketLine(product=self.product, quantity=self.quantity)


@dataclass(frozen=True)
class BasketLine(_LineFields):
    """A basket line as handed to checkout. Read-only."""
    product: Product
    quantity: int
