"""
==============================================================================
Core Package
==============================================================================

Core utilities and infrastructure for the application.

This package provides:
- Custom exception handling with consistent error responses
- Exception factory functions for common error scenarios
- FastAPI dependencies for the shared offer builder and catalog
  (import from app.core.dependencies)

Usage:
------
    from app.core import AppException
    from app.core import exceptions

    raise exceptions.row_not_found(row_id)

==============================================================================
"""

from .exceptions import (
    AppException,
    CatalogSearchError,
    MergeConflictError,
    register_exception_handlers,
)

__all__ = [
    "AppException",
    "CatalogSearchError",
    "MergeConflictError",
    "register_exception_handlers",
]
