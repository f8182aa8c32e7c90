"""
Application Exception Handling

Single AppException class for all application errors with FastAPI integration.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppException(Exception):
    """
    Unified application exception for all error scenarios.

    Provides consistent error response format across the entire API.

    Usage:
        raise AppException("Row not found", "ROW_NOT_FOUND", 404)
        raise AppException("Catalog unavailable", "CATALOG_UNAVAILABLE", 502, {"status": 503})

    Error Codes:
        Offer:
            - ROW_NOT_FOUND (404)
            - VARIANT_NOT_FOUND (404)
            - INVALID_INDEX (400)
            - MERGE_CONFLICT (409)

        Picker:
            - PICKER_NOT_OPEN (409)
            - PRODUCT_NOT_LOADED (404)
            - VARIANT_NOT_LOADED (404)
            - PRODUCT_EXCLUDED (409)

        Catalog:
            - PRODUCT_NOT_FOUND (404)
            - CATALOG_UNAVAILABLE (502)
            - CATALOG_NOT_LOADED (500)

        General:
            - VALIDATION_ERROR (422)
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "ROW_NOT_FOUND")
            status_code: HTTP status code (default: 400)
            details: Additional error context (optional)
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict


class CatalogSearchError(AppException):
    """
    Failure while fetching a page from a catalog source.

    The search feed turns it into an errored state instead of letting it
    propagate. ``retryable`` tells the host whether offering a retry
    makes sense.
    """

    def __init__(
        self,
        message: str,
        retryable: bool = True,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, "CATALOG_UNAVAILABLE", 502, details)
        self.retryable = retryable


class MergeConflictError(AppException):
    """Picker selections cannot be merged into the current collection."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "MERGE_CONFLICT", 409, details)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    FastAPI exception handler for AppException.

    Converts AppException to consistent JSON error response.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def row_not_found(row_id: Any) -> AppException:
    """Create row not found exception."""
    return AppException("Offer row not found", "ROW_NOT_FOUND", 404, {"row_id": row_id})


def variant_not_found(row_id: Any, variant_id: Any) -> AppException:
    """Create variant not found exception."""
    return AppException(
        "Variant not found in offer row",
        "VARIANT_NOT_FOUND",
        404,
        {"row_id": row_id, "variant_id": variant_id}
    )


def invalid_index(index: int, size: int) -> AppException:
    """Create out-of-range index exception."""
    return AppException(
        f"Index {index} is out of range for {size} item(s)",
        "INVALID_INDEX",
        400,
        {"index": index, "size": size}
    )


def picker_not_open() -> AppException:
    """Create picker not open exception."""
    return AppException("No product picker session is open", "PICKER_NOT_OPEN", 409)


def product_not_loaded(product_id: Any) -> AppException:
    """Create exception for a product absent from the loaded search results."""
    return AppException(
        "Product is not among the loaded search results",
        "PRODUCT_NOT_LOADED",
        404,
        {"product_id": product_id}
    )


def variant_not_loaded(product_id: Any, variant_id: Any) -> AppException:
    """Create exception for a variant the loaded product does not have."""
    return AppException(
        "Variant not found on loaded product",
        "VARIANT_NOT_LOADED",
        404,
        {"product_id": product_id, "variant_id": variant_id}
    )


def product_excluded(product_id: Any) -> AppException:
    """Create exception for a product already bound to another row."""
    return AppException(
        "Product is already selected in another row",
        "PRODUCT_EXCLUDED",
        409,
        {"product_id": product_id}
    )


def product_not_found(product_id: Any) -> AppException:
    """Create product not found exception."""
    return AppException(
        "Product not found in catalog",
        "PRODUCT_NOT_FOUND",
        404,
        {"product_id": product_id}
    )


def catalog_not_loaded() -> AppException:
    """Create catalog not loaded exception."""
    return AppException(
        "Product catalog not loaded",
        "CATALOG_NOT_LOADED",
        500
    )
