"""
==============================================================================
Catalog Package - Product Search Sources
==============================================================================

Catalog products and the two sources the picker can search.

Classes:
--------
- CatalogProduct / CatalogVariant: Pydantic models for search results
- ProductCatalog: Local JSON catalog with paged search
- CatalogClient: Async client for the remote catalog service

==============================================================================
"""

from .models import CatalogProduct, CatalogVariant, Identifier, ProductImage, same_id
from .catalog import ProductCatalog, get_catalog, init_catalog
from .client import CatalogClient

__all__ = [
    "CatalogProduct",
    "CatalogVariant",
    "Identifier",
    "ProductImage",
    "same_id",
    "ProductCatalog",
    "get_catalog",
    "init_catalog",
    "CatalogClient",
]
