"""Exceptions raised by the storefront services.

Each carries the HTTP status it maps to; main.py turns them into responses.
"""


class StoreError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class OrderValidationError(StoreError):
    """Order payload rejected before anything is written."""

    status_code = 400


class TotalMismatch(OrderValidationError):
    """Submitted total disagrees with the sum of the line items."""


class NotFound(StoreError):
    status_code = 404


class InvalidCredentials(StoreError):
    status_code = 401

    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(detail)


class Unauthorized(StoreError):
    """No bearer token was presented."""

    status_code = 401

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(detail)


class Forbidden(StoreError):
    """Token is invalid, expired, or lacks the admin role."""

    status_code = 403

    def __init__(self, detail: str = "Forbidden"):
        super().__init__(detail)


class AggregationSkip(Exception):
    """An order's item snapshot could not be read.

    Raised and caught inside the dashboard aggregation; the order still
    counts toward revenue and status totals.
    """
