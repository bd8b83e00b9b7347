"""Error taxonomy shared by services and routes.

Every error carries an HTTP status, a human-readable message and optional
structured details. The handlers registered in ``shopdesk.main`` render them as
``{"error": message, "details": ...}``.
"""

from typing import Any

from fastapi import status


class ApiError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class BadRequestError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class InsufficientStockError(BadRequestError):
    def __init__(self, *, product_id: int, product_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for {product_name}",
            details={
                "productId": product_id,
                "productName": product_name,
                "available": available,
                "requested": requested,
            },
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class UnauthenticatedError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(ApiError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT


class TooManyRequestsError(ApiError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS


DUPLICATE_RECORD_MESSAGE = "A record with this value already exists"
INTERNAL_ERROR_MESSAGE = "An internal server error occurred"
