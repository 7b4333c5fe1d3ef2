"""
Command line entry: load a package, replay basket edits, print the price and
optionally export the basket workbook.
Usage:
    python cli_app.py --package-id 64f0c2 --action swap:p1:p9 --action qty:p2:+1 --out basket.xlsx
    python cli_app.py --package-file package.json --action remove:p3 --json
    python cli_app.py --import-products products.xlsx --out products.csv
"""
import argparse
import json
import sys

from freshbasket import config
from freshbasket.catalog import normalize_package
from freshbasket.errors import CatalogUnavailable
from freshbasket.logger import setup_logger
from freshbasket.service import CatalogService, CheckoutService, CustomizationService, ExportService, ImportService


def read_package_file(path: str):
    with open(path, "r", encoding="utf-8") as f:
        return normalize_package(json.load(f))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Package customization pricing")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--package-id", dest="package_id", help="Package identifier on the catalog service")
    source.add_argument("--package-file", dest="package_file", help="Package JSON document (as served by the API)")
    source.add_argument("--import-products", dest="import_products", help="Product sheet (CSV/Excel) to normalize")

    parser.add_argument("--api-url", dest="api_url", default=config.API_BASE_URL, help="Catalog service base URL")
    parser.add_argument("--timeout", type=float, default=config.REQUEST_TIMEOUT, help="HTTP timeout in seconds")
    parser.add_argument(
        "--action", action="append", default=[],
        help="Basket edit, repeatable: qty:ID:+N | remove:ID | swap:OLD:NEW | add:ID"
    )
    parser.add_argument("--out", help="Export file (.xlsx for a basket, .csv for products)")
    parser.add_argument("--json", action="store_true", help="Print the session as JSON")
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Logging level")
    return parser


def run_products(args) -> int:
    with open(args.import_products, "rb") as f:
        products = ImportService().import_products(f.read(), args.import_products)
    if not products:
        print("No products found in the sheet.")
        return 1

    print(f"Parsed {len(products)} products.")
    if args.out:
        with open(args.out, "wb") as f:
            f.write(ExportService().export_products(products))
        print(f"Exported to: {args.out}")
    return 0


def run_customize(args) -> int:
    # 1. Load the package snapshot
    try:
        if args.package_file:
            package = read_package_file(args.package_file)
        else:
            with CatalogService(base_url=args.api_url, timeout=args.timeout) as catalog:
                package = catalog.fetch_package(args.package_id)
    except CatalogUnavailable as e:
        print(f"Failed to load package details. Please try again. ({e})")
        return 1
    except (OSError, ValueError) as e:
        print(f"Could not read package file: {e}")
        return 1

    # 2. Replay edits
    customization = CustomizationService()
    try:
        session, results = customization.replay(package, args.action)
    except ValueError as e:
        print(f"Invalid action: {e}")
        return 2

    for result in results:
        if not result["applied"]:
            print(f"Skipped (no effect): {result['action']}")

    view = customization.session_view(session)
    if args.json:
        print(json.dumps(view, indent=2, ensure_ascii=False))
    else:
        print(f"--- {package.name or package.package_id} ---")
        for line in view["basket"]:
            print(f"  {line['name']:<30} {line['quantity']:>3} x {line['price']:>8} = {line['lineTotal']:>9}")
        quote = view["quote"]
        print(f"Items value:      {quote['itemsTotalValue']}")
        print(f"Package price:    {quote['packageBasePrice']}")
        print(f"Adjustment:       {quote['priceAdjustment']}")
        print(f"Total to pay:     {quote['finalPrice']}")

    # 3. Handoff / export
    handoff = CheckoutService().handoff(session)
    if handoff is None:
        print("Your basket is empty; add items before checkout.")
        return 1

    if args.out:
        out_path = ExportService().export_basket(handoff, args.out)
        print(f"Exported to: {out_path}")
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(level=args.log_level, to_file=False)

    if args.import_products:
        return run_products(args)
    return run_customize(args)


if __name__ == "__main__":
    sys.exit(main())
