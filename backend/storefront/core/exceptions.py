"""
Domain exceptions for the storefront

Raised by domain models, repositories and services. Routers translate them
into HTTPException with `to_http_exception`.
"""
from typing import Optional

from fastapi import HTTPException, status


class StoreError(Exception):
    """Base exception for all storefront errors"""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(StoreError):
    """Input passed schema validation but breaks a business rule"""


class ConflictError(StoreError):
    """Resource already exists (duplicate SKU, email, review...)"""


class NotFoundError(StoreError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, message: Optional[str] = None):
        super().__init__(message or f"{entity} not found")
        self.entity = entity


class AuthenticationError(StoreError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDeniedError(StoreError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class InsufficientStockError(StoreError):
    """Raised when a product cannot cover the requested quantity"""

    def __init__(
        self,
        available: int,
        requested: int,
        product_name: Optional[str] = None,
        message: str = "Insufficient stock available",
    ):
        if product_name:
            message = f"{message} for {product_name}"
        super().__init__(
            message,
            details={"available": available, "requested": requested},
        )
        self.available = available
        self.requested = requested


class PaymentError(StoreError):
    """Payment could not be verified or processed"""


class GatewayError(StoreError):
    """The payment gateway rejected or failed a call"""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, operation: str, reason: Optional[str] = None):
        message = f"Payment gateway {operation} failed"
        if reason:
            message += f": {reason}"
        super().__init__(message, details={"operation": operation, "reason": reason})


def to_http_exception(error: StoreError) -> HTTPException:
    """Convert a StoreError into the HTTPException FastAPI will render"""
    if error.details:
        detail = {"message": error.message, **error.details}
    else:
        detail = error.message
    return HTTPException(status_code=error.status_code, detail=detail)
