from dataclasses import dataclass
from fastapi import status


@dataclass(frozen=True)
class ErrorDefinition:
    code: str
    message: str
    status_code: int


class ErrorCatalog:
    UNAUTHORIZED = ErrorDefinition("UNAUTHORIZED", "Unauthorized", status.HTTP_401_UNAUTHORIZED)
    INVALID_CREDENTIALS = ErrorDefinition(
        "INVALID_CREDENTIALS",
        "Invalid email or password",
        status.HTTP_401_UNAUTHORIZED,
    )
    PERMISSION_DENIED = ErrorDefinition(
        "PERMISSION_DENIED",
        "Access denied",
        status.HTTP_403_FORBIDDEN,
    )
    VALIDATION_ERROR = ErrorDefinition(
        "VALIDATION_ERROR",
        "Invalid request data",
        status.HTTP_400_BAD_REQUEST,
    )
    BRANCHES_MUST_DIFFER = ErrorDefinition(
        "BRANCHES_MUST_DIFFER",
        "From and to branches must be different",
        status.HTTP_400_BAD_REQUEST,
    )
    INSUFFICIENT_STOCK = ErrorDefinition(
        "INSUFFICIENT_STOCK",
        "Insufficient stock",
        status.HTTP_400_BAD_REQUEST,
    )
    NOT_FOUND = ErrorDefinition(
        "NOT_FOUND",
        "Not found",
        status.HTTP_404_NOT_FOUND,
    )
    LOCK_TIMEOUT = ErrorDefinition(
        "LOCK_TIMEOUT",
        "Lock wait timeout",
        status.HTTP_409_CONFLICT,
    )
    DB_UNAVAILABLE = ErrorDefinition(
        "DB_UNAVAILABLE",
        "Database unavailable",
        status.HTTP_503_SERVICE_UNAVAILABLE,
    )
    PERSISTENCE_ERROR = ErrorDefinition(
        "PERSISTENCE_ERROR",
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    INTERNAL_ERROR = ErrorDefinition(
        "INTERNAL_ERROR",
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class AppError(Exception):
    def __init__(self, error: ErrorDefinition, details: object | None = None, message: str | None = None):
        self.error = error
        self.details = details
        self.message = message or error.message
        super().__init__(self.message)


class ValidationError(AppError):
    def __init__(self, message: str, details: object | None = None):
        super().__init__(ErrorCatalog.VALIDATION_ERROR, details=details, message=message)


class AuthorizationError(AppError):
    def __init__(self, message: str = ErrorCatalog.PERMISSION_DENIED.message, details: object | None = None):
        super().__init__(ErrorCatalog.PERMISSION_DENIED, details=details, message=message)


class InsufficientStockError(AppError):
    """Raised when a source row cannot cover a requested quantity.

    The message always names the product and both quantities so it can be
    shown to the operator verbatim.
    """

    def __init__(self, *, product_id: str, variation_id: str | None, available: int, requested: int):
        self.product_id = product_id
        self.variation_id = variation_id
        self.available = available
        self.requested = requested
        suffix = " variation" if variation_id else ""
        message = (
            f"Insufficient stock for product {product_id}{suffix}. "
            f"Available: {available}, Requested: {requested}"
        )
        super().__init__(
            ErrorCatalog.INSUFFICIENT_STOCK,
            details={
                "product_id": product_id,
                "variation_id": variation_id,
                "available": available,
                "requested": requested,
            },
            message=message,
        )


class PersistenceError(AppError):
    def __init__(self, details: object | None = None):
        super().__init__(ErrorCatalog.PERSISTENCE_ERROR, details=details)
