"""
Service layer, split into single-purpose services used by the CLI and the
HTTP server.
"""
import logging
from io import BytesIO
from typing import Any, Dict, Iterable, List, Optional, Tuple

from freshbasket.basket import BasketSession
from freshbasket.catalog import ApiClient, load_package
from freshbasket.checkout import build_order_payload, summarize_order
from freshbasket.exporter import export_products_to_csv, export_to_excel, generate_excel_bytes
from freshbasket.handoff import CheckoutHandoff, build_handoff
from freshbasket.importer import parse_file_to_products
from freshbasket.models import Package, Product
from freshbasket.pricing.rounding import format_money

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Catalog service: owns the REST client lifecycle and loads snapshots.
    """
    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = base_url
        self.timeout = timeout
        self._client: Optional[ApiClient] = None

    def __enter__(self):
        self._client = ApiClient(base_url=self.base_url, timeout=self.timeout)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._client:
            self._client.close()
            self._client = None

    @property
    def client(self) -> ApiClient:
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'with CatalogService(...) as service:'")
        return self._client

    def fetch_package(self, package_id: str) -> Package:
        """Load one package snapshot; raises CatalogUnavailable on failure."""
        return load_package(self.client, package_id)

    def start_session(self, package_id: str) -> BasketSession:
        return BasketSession.start(self.fetch_package(package_id))


class CustomizationService:
    """
    Customization service: replays shopper edits on a session and renders
    its state. Pure in-memory work.

    Edit actions are short strings:
        qty:<id>:<+N|-N>    change a line's quantity
        remove:<id>         drop a line
        swap:<old>:<new>    replace a line with a swap option
        add:<id>            add a swap option outright
    """
    def apply_action(self, session: BasketSession, action: str) -> bool:
        """Apply one edit. Returns False when the session absorbed it as a no-op."""
        parts = [p.strip() for p in action.split(":")]
        verb, args = parts[0].lower(), parts[1:]

        if verb == "qty" and len(args) == 2:
            try:
                delta = int(args[1])
            except ValueError:
                raise ValueError(f"Invalid quantity change in action: {action}")
            return session.adjust_quantity(args[0], delta)

        if verb == "remove" and len(args) == 1:
            return session.remove_item(args[0])

        if verb == "swap" and len(args) == 2:
            option = session.get_swap_option(args[1])
            if option is None or not session.begin_swap(args[0]):
                session.cancel_swap()
                return False
            if not session.complete_swap(option):
                session.cancel_swap()
                return False
            return True

        if verb == "add" and len(args) == 1:
            option = session.get_swap_option(args[0])
            if option is None:
                return False
            return session.add_from_swap_pool(option)

        raise ValueError(f"Unknown action: {action}")

    def replay(self, package: Package, actions: Iterable[str]) -> Tuple[BasketSession, List[Dict[str, Any]]]:
        """Start a fresh session and apply the actions in order."""
        session = BasketSession.start(package)
        results = []
        for action in actions:
            applied = self.apply_action(session, action)
            if not applied:
                logger.info("Action %r had no effect", action)
            results.append({"action": action, "applied": applied})
        return session, results

    def session_view(self, session: BasketSession) -> Dict[str, Any]:
        """Flat, JSON-ready view of a session (for display)."""
        return {
            "package": {
                "id": session.package.package_id,
                "name": session.package.name,
                "description": session.package.description,
            },
            "basket": [item.to_dict() for item in session.items],
            "swapPool": [
                {
                    "productId": option.product_id,
                    "name": option.product.name,
                    "price": format_money(option.product.price),
                    "quantity": option.quantity,
                    "isAvailable": option.is_available,
                }
                for option in session.swap_pool
            ],
            "pendingSwapTarget": session.pending_swap_target,
            "quote": session.quote().to_dict(),
            "canProceed": session.can_proceed(),
        }


class CheckoutService:
    """
    Checkout service: freezes the session and, optionally, submits the order.
    """
    def __init__(self, client: Optional[ApiClient] = None):
        self.client = client

    def handoff(self, session: BasketSession) -> Optional[CheckoutHandoff]:
        return build_handoff(session)

    def place_order(self, handoff: CheckoutHandoff, customer: Dict[str, str], shipping_address: Dict[str, str], **options) -> Dict[str, Any]:
        """Build and POST the order; returns the confirmation summary."""
        if self.client is None:
            raise RuntimeError("CheckoutService needs an ApiClient to place orders.")
        payload = build_order_payload(handoff, customer, shipping_address, **options)
        response = self.client.create_order(payload)
        order_number = (response.get("orderNumber") or response.get("_id")) if isinstance(response, dict) else None
        logger.info("Order placed for package %s", handoff.package.package_id)
        return summarize_order(payload, order_number)


class ImportService:
    """
    Import service: external product sheets -> Product records.
    """
    def import_products(self, file_content: bytes, filename: str = "") -> List[Product]:
        return parse_file_to_products(file_content, filename)


class ExportService:
    """
    Export service: basket workbooks and product CSVs.
    """
    def export_basket(self, handoff: CheckoutHandoff, output_path: str = "output.xlsx") -> str:
        return export_to_excel(handoff, output_path)

    def get_excel_bytes(self, handoff: CheckoutHandoff) -> Tuple[BytesIO, str]:
        return generate_excel_bytes(handoff)

    def export_products(self, products: Iterable[Product]) -> bytes:
        return export_products_to_csv(products)
