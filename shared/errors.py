"""Typed errors raised by the order, wallet and checkout services.

Every error carries a stable ``code`` and the HTTP status the API layer
answers with, so callers can render an actionable message without parsing
the text.
"""
from decimal import Decimal


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    code = "StorefrontError"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "error_type": self.code}


class ValidationError(StorefrontError):
    """Raised when an input field is malformed (quantity, phone, pincode, ...)."""

    code = "ValidationError"
    status_code = 422

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict:
        return {**super().to_dict(), "field": self.field}


class InsufficientBalanceError(StorefrontError):
    """Raised when a wallet debit would drive the balance below zero."""

    code = "InsufficientBalance"
    status_code = 402

    def __init__(self, balance: Decimal, required: Decimal):
        self.balance = balance
        self.required = required
        self.shortfall = required - balance
        super().__init__(
            f"Insufficient wallet balance: balance is {balance}, "
            f"{required} required ({self.shortfall} short)"
        )

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "balance": float(self.balance),
            "required": float(self.required),
            "shortfall": float(self.shortfall),
        }


class MissingPaymentAppError(StorefrontError):
    """Raised when an online payment is requested without a provider app."""

    code = "MissingPaymentApp"
    status_code = 422

    def __init__(self):
        super().__init__("Online payment requires a payment app selection")


class ProductUnavailableError(StorefrontError):
    """Raised when a product on hold is checked out."""

    code = "ProductUnavailable"
    status_code = 409

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product {product_id} is on hold and cannot be purchased")


class InvalidTransitionError(StorefrontError):
    """Raised when an order status, cancellation or return change is not allowed."""

    code = "InvalidTransition"
    status_code = 409

    def __init__(self, order_id: str, reason: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id}: {reason}")


class PaymentTimeoutError(StorefrontError):
    """Raised when the online payment provider does not settle in time."""

    code = "PaymentTimeout"
    status_code = 504

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Online payment did not settle within {timeout:g}s")


class NotFoundError(StorefrontError):
    """Raised when an order or product id doesn't exist."""

    code = "NotFound"
    status_code = 404

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class ConflictError(StorefrontError):
    """Raised on id collisions and when compare-and-swap retries run out."""

    code = "Conflict"
    status_code = 409


class CorruptRecordError(StorefrontError):
    """Raised when a stored record does not match its schema."""

    code = "CorruptRecord"
    status_code = 500

    def __init__(self, namespace: str, key: str, reason: str):
        self.namespace = namespace
        self.key = key
        super().__init__(f"Stored {namespace} record {key} is malformed: {reason}")
