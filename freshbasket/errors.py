"""
Exception types raised across the package.

Only conditions the caller has to react to are raised. Swap attempts on
unavailable options and quantities that would go negative are absorbed by
the basket session as no-ops and never show up here.
"""
from typing import Optional


class FreshBasketError(Exception):
    """Base class for all package errors."""


class CatalogUnavailable(FreshBasketError):
    """
    The catalog snapshot could not be fetched or was unusable.
    The caller shows a retry path; no basket is built from partial data.
    """

    def __init__(self, message: str, package_id: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.package_id = package_id
        self.status_code = status_code


class OrderRejected(FreshBasketError):
    """The order service refused or failed to accept a checkout payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
