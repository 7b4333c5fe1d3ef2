"""
Catalog snapshot module.
Talks to the storefront's REST backend (package / product / order services)
and normalizes package JSON into the internal Package model.
"""
import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Any, Dict, List, Optional

import requests

from freshbasket import config
from freshbasket.errors import CatalogUnavailable, OrderRejected
from freshbasket.models import Package, PackageItem, Product
from freshbasket.pricing.rounding import to_decimal

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


# ==========================================
# REST client
# ==========================================

class ApiClient:
    """
    Thin wrapper over the storefront REST API.
    Owns one requests.Session; use as a context manager to close it.
    """
    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self._session = session or requests.Session()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self._session.close()

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None, package_id: Optional[str] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("GET %s failed: %s", url, e)
            raise CatalogUnavailable(f"Catalog service unreachable: {e}", package_id=package_id) from e

        if response.status_code != 200:
            logger.error("GET %s -> %s", url, response.status_code)
            raise CatalogUnavailable(
                f"Catalog service answered {response.status_code}",
                package_id=package_id,
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise CatalogUnavailable("Catalog service returned invalid JSON", package_id=package_id) from e

    # --- packages ---

    def get_package(self, package_id: str) -> Dict[str, Any]:
        return self._get(f"/api/package/{package_id}", package_id=package_id)

    def list_packages(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._get("/api/packages", params=params)

    def get_packages_by_category(self, category: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._get(f"/api/packages/category/{category}", params=params)

    def search_packages(self, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._get("/api/packages/search", params={"q": query, **(params or {})})

    # --- products ---

    def get_product(self, product_id: str) -> Dict[str, Any]:
        return self._get(f"/api/product/{product_id}")

    def list_products(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._get("/api/products", params=params)

    def search_products(self, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._get(f"/api/products/search/{query}", params=params)

    # --- orders ---

    def create_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/api/order"
        try:
            response = self._session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("POST %s failed: %s", url, e)
            raise OrderRejected(f"Order service unreachable: {e}") from e

        if response.status_code not in (200, 201):
            raise OrderRejected(_error_message(response), status_code=response.status_code)
        try:
            return response.json()
        except ValueError:
            return {}


def _error_message(response: requests.Response) -> str:
    """Server-provided message if any, else a generic one."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if message:
            return str(message)
    return "An unexpected error occurred"


# ==========================================
# Normalization
# ==========================================

def normalize_product(raw: Dict[str, Any]) -> Product:
    """
    Build a Product from catalog JSON, filling display defaults:
    unit -> "unit", description -> "", availability -> True unless false,
    stock -> DEFAULT_STOCK when not reported.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"product is not an object: {raw!r}")

    product_id = raw.get("_id") or raw.get("id")
    if not product_id:
        raise ValueError("product has no identifier")

    price = to_decimal(raw.get("price"))
    if price is None or price < 0:
        logger.warning("Product %s has invalid price %r, using 0", product_id, raw.get("price"))
        price = ZERO

    stock = _parse_int(raw.get("countInStock"))
    if stock is None:
        stock = config.DEFAULT_STOCK

    return Product(
        product_id=str(product_id),
        name=str(raw.get("name") or ""),
        price=price,
        category=str(raw.get("category") or ""),
        unit=raw.get("unit") or config.DEFAULT_UNIT,
        description=raw.get("description") or "",
        image=raw.get("image") or "",
        is_available=raw.get("isAvailable") is not False,
        count_in_stock=max(stock, 0),
    )


def _normalize_items(raw_items: List[Dict[str, Any]]) -> "OrderedDict[str, PackageItem]":
    """product_id -> PackageItem, in catalog order; duplicates are merged."""
    items: "OrderedDict[str, PackageItem]" = OrderedDict()
    for entry in raw_items:
        if not isinstance(entry, dict):
            raise ValueError(f"package item is not an object: {entry!r}")
        product = normalize_product(entry.get("product"))
        quantity = _parse_int(entry.get("quantity"))
        if quantity is None or quantity < 1:
            quantity = 1

        if product.product_id in items:
            logger.warning("Duplicate product %s in package, merging quantities", product.product_id)
            quantity += items[product.product_id].quantity
            product = items[product.product_id].product
        items[product.product_id] = PackageItem(product=product, quantity=quantity)
    return items


def normalize_package(raw: Dict[str, Any]) -> Package:
    """
    Convert package JSON into a Package snapshot.
    Raises ValueError when the document cannot seed a basket.
    """
    if not isinstance(raw, dict):
        raise ValueError("package is not an object")
    if not isinstance(raw.get("defaultItems"), list):
        raise ValueError("package has no defaultItems list")

    package_id = raw.get("_id") or raw.get("id") or ""

    # 1. Default items
    defaults = _normalize_items(raw["defaultItems"])

    # 2. Swap options, kept disjoint from the defaults
    swaps = _normalize_items(raw.get("swapOptions") or [])
    for product_id in [pid for pid in swaps if pid in defaults]:
        logger.warning("Swap option %s is also a default item of %s, dropping it", product_id, package_id)
        del swaps[product_id]

    return Package(
        package_id=str(package_id),
        name=str(raw.get("name") or ""),
        description=raw.get("description") or "",
        category=str(raw.get("category") or ""),
        base_price=to_decimal(raw.get("basePrice")),
        value_price=to_decimal(raw.get("valuePrice")),
        default_items=tuple(defaults.values()),
        swap_options=tuple(swaps.values()),
    )


def load_package(client: ApiClient, package_id: str) -> Package:
    """
    Fetch and normalize one package: the catalog snapshot of a session.
    Any failure surfaces as CatalogUnavailable.
    """
    raw = client.get_package(package_id)
    try:
        package = normalize_package(raw)
    except ValueError as e:
        logger.error("Package %s is malformed: %s", package_id, e)
        raise CatalogUnavailable(f"Package {package_id} is malformed: {e}", package_id=package_id) from e

    logger.info(
        "Loaded package %s (%d default items, %d swap options)",
        package_id, len(package.default_items), len(package.swap_options),
    )
    return package


def _parse_int(val: Any) -> Optional[int]:
    """Safe int parsing"""
    if val is None or val == "" or isinstance(val, bool):
        return None
    try:
        return int(float(val))
    except (ValueError, TypeError, OverflowError):
        return None
