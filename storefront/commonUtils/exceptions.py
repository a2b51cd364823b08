from typing import Any, Optional

from fastapi import status


class StoreError(Exception):
    """
    Base class for failures a service reports back to the caller.

    Each subclass fixes the HTTP status it maps to; `detail` carries the
    structured context a client needs to render feedback.
    """
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail if detail is not None else message


class BadRequestError(StoreError):
    """A request the service cannot act on, e.g. an empty product list"""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(StoreError):
    status_code = status.HTTP_404_NOT_FOUND


class PermissionDeniedError(StoreError):
    status_code = status.HTTP_403_FORBIDDEN


class InsufficientStockError(StoreError):
    """Requested quantity exceeds the product's current stock"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, product_id: Any, size: str, requested: int, available: int):
        self.product_id = product_id
        self.size = size
        self.requested = requested
        self.available = available
        super().__init__(message, detail={
            "productId": str(product_id),
            "size": size,
            "requested": requested,
            "available": available,
        })


class UpstreamError(StoreError):
    """The payment provider failed or answered with something unusable"""
    status_code = status.HTTP_502_BAD_GATEWAY
