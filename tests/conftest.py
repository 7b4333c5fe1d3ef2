import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from freshbasket.catalog import normalize_package  # noqa: E402


def product(pid, price, **extra):
    doc = {"_id": pid, "name": f"Product {pid}", "price": price, "category": "veg"}
    doc.update(extra)
    return doc


@pytest.fixture
def package_doc():
    """
    Base 50, benchmark 40; default items worth exactly 40.
    Swap pool: s1 (5.00), s2 (12.50), s3 (unavailable).
    """
    return {
        "_id": "pkg1",
        "name": "Family Veg Box",
        "description": "Weekly vegetables",
        "basePrice": 50,
        "valuePrice": 40,
        "defaultItems": [
            {"product": product("p1", 10), "quantity": 2},   # 20
            {"product": product("p2", 5), "quantity": 2},    # 10
            {"product": product("p3", 10), "quantity": 1},   # 10
        ],
        "swapOptions": [
            {"product": product("s1", 5), "quantity": 1},
            {"product": product("s2", "12.50")},
            {"product": product("s3", 8, isAvailable=False)},
        ],
    }


@pytest.fixture
def package(package_doc):
    return normalize_package(package_doc)
