"""
==============================================================================
FastAPI Dependencies Module
==============================================================================

Dependency injection for the offer builder and the product catalog.

This module implements:
- BuilderRegistry: Owns the process-wide OfferBuilder and catalog source
- FastAPI dependencies for routes
- Page parameters for catalog search

Dependency Hierarchy:
--------------------
                    ┌──────────────────────┐
                    │   get_settings()     │
                    └──────────┬───────────┘
                               │
                    ┌──────────▼───────────┐
                    │ get_catalog_source() │  CatalogClient (remote)
                    └──────────┬───────────┘  or ProductCatalog (local)
                               │
                    ┌──────────▼───────────┐
                    │ get_offer_builder()  │
                    └──────────────────────┘

Usage Examples:
--------------
    @router.get("/offer")
    async def get_offer(builder: OfferBuilder = Depends(get_offer_builder)):
        return OfferResponse.from_rows(builder.rows)

    # Tests swap the builder
    app.dependency_overrides[get_offer_builder] = lambda: builder

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import Query

from app.catalog.catalog import ProductCatalog, get_catalog
from app.catalog.client import CatalogClient
from app.config.settings import Settings, get_settings
from app.core import exceptions
from app.services.offer_builder import OfferBuilder
from app.services.search_feed import CatalogSource


# Module logger
logger = logging.getLogger(__name__)


class BuilderRegistry:
    """
    Holds the single in-memory offer builder of this process.

    The builder is created lazily on first use so that the catalog has
    been loaded by the application startup hook.

    Attributes:
        _settings: Application settings
        _builder: OfferBuilder instance (None until first use)
        _client: Remote catalog client (None when using the local catalog)
    """

    def __init__(self, settings: Settings) -> None:
        """
        Initialize the registry.

        Args:
            settings: Application settings
        """
        self._settings = settings
        self._builder: Optional[OfferBuilder] = None
        self._client: Optional[CatalogClient] = None

    def get_source(self) -> CatalogSource:
        """
        Get the catalog search collaborator.

        Raises:
            AppException: CATALOG_NOT_LOADED if neither a remote API nor a
                local catalog is available
        """
        if self._settings.uses_remote_catalog:
            if self._client is None:
                self._client = CatalogClient(
                    self._settings.catalog_api_url,
                    api_key=self._settings.catalog_api_key,
                    timeout=self._settings.catalog_timeout_seconds,
                )
                logger.info(f"Using remote catalog at {self._settings.catalog_api_url}")
            return self._client

        catalog = get_catalog()
        if catalog is None:
            raise exceptions.catalog_not_loaded()
        return catalog

    def get_builder(self) -> OfferBuilder:
        """Get the offer builder, creating it on first use."""
        if self._builder is None:
            self._builder = OfferBuilder(
                self.get_source(),
                page_size=self._settings.picker_page_size,
                debounce_seconds=self._settings.picker_debounce_seconds,
            )
            logger.info("✅ Offer builder initialized")
        return self._builder

    async def aclose(self) -> None:
        """Close the remote catalog client, if one was opened."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        self._builder = None


# =============================================================================
# REGISTRY INSTANCE MANAGEMENT
# =============================================================================

_registry: Optional[BuilderRegistry] = None


def get_registry() -> BuilderRegistry:
    """Get the global registry, creating it from settings."""
    global _registry
    if _registry is None:
        _registry = BuilderRegistry(get_settings())
    return _registry


async def close_registry() -> None:
    """Release registry resources at application shutdown."""
    global _registry
    if _registry is not None:
        await _registry.aclose()
        _registry = None


# =============================================================================
# FASTAPI DEPENDENCY FUNCTIONS
# =============================================================================

def get_offer_builder() -> OfferBuilder:
    """FastAPI dependency that provides the offer builder."""
    return get_registry().get_builder()


def get_product_catalog() -> ProductCatalog:
    """
    FastAPI dependency that provides the local product catalog.

    Raises:
        AppException: CATALOG_NOT_LOADED
    """
    catalog = get_catalog()
    if catalog is None:
        raise exceptions.catalog_not_loaded()
    return catalog


# =============================================================================
# PAGE DEPENDENCY
# =============================================================================

def get_page_params(
    page: int = Query(0, ge=0, description="Page number (0-indexed)"),
    limit: int = Query(10, ge=1, le=100, description="Items per page (max 100)")
) -> Dict[str, int]:
    """
    FastAPI dependency for catalog page parameters.

    Returns:
        Dictionary with page and limit
    """
    return {"page": page, "limit": limit}
