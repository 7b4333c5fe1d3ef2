"""
Runtime configuration.
Module-level defaults, each overridable through an environment variable
(a local .env file is loaded first if present).
"""
import os

from dotenv import load_dotenv

load_dotenv()

# ==========================================
# Catalog / order service
# ==========================================

API_BASE_URL = os.environ.get("FRESHBASKET_API_URL", "http://127.0.0.1:5000").rstrip("/")
REQUEST_TIMEOUT = float(os.environ.get("FRESHBASKET_REQUEST_TIMEOUT", "15"))

# ==========================================
# Snapshot normalization defaults
# ==========================================

DEFAULT_UNIT = "unit"
# Stock used when the catalog does not report one, so it never blocks the shopper
DEFAULT_STOCK = int(os.environ.get("FRESHBASKET_DEFAULT_STOCK", "999"))

# ==========================================
# Checkout
# ==========================================

PAYMENT_METHODS = ("cash_on_delivery", "mobile_money")
DEFAULT_DELIVERY_DAY = "saturday"
DEFAULT_DELIVERY_TIME = "afternoon"

# ==========================================
# HTTP server / logging
# ==========================================

SERVER_HOST = os.environ.get("FRESHBASKET_HOST", "0.0.0.0")
SERVER_PORT = int(os.environ.get("FRESHBASKET_PORT", "8000"))

LOG_LEVEL = os.environ.get("FRESHBASKET_LOG_LEVEL", "INFO").upper()
LOG_DIR = os.environ.get("FRESHBASKET_LOG_DIR", "logs")
