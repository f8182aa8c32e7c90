"""
==============================================================================
Product Catalog Module
==============================================================================

Local product catalog with paged title search.

The local catalog answers the same search contract as the remote catalog
service, so the picker can run against either one.

Features:
---------
- JSON-based product storage
- Case-insensitive substring search on product titles
- Zero-based page/limit pagination
- Id lookup index

JSON Structure:
--------------
[
  {
    "id": 77,
    "title": "Fadeaway Hoodie",
    "image": {"src": "..."},
    "variants": [{"id": 1, "title": "S", "price": "49.00", "inventory": 12}]
  },
  ...
]

==============================================================================
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from .models import CatalogProduct, Identifier


# Module logger
logger = logging.getLogger(__name__)


class ProductCatalog:
    """
    Product catalog manager with paged search.

    Attributes:
        products: List of all products in file order

    Example:
        >>> catalog = ProductCatalog(Path("data/products.json"))
        >>> first_page = catalog.find_page("hoodie", page=0, limit=10)
        >>> product = catalog.find_by_id(77)
    """

    def __init__(self, products_file: Path) -> None:
        """
        Initialize catalog from JSON file.

        Args:
            products_file: Path to products.json
        """
        self._products_file = products_file
        self._products: List[CatalogProduct] = []
        self._by_id: Dict[Identifier, CatalogProduct] = {}

        self._load()

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def products(self) -> List[CatalogProduct]:
        """Get all products."""
        return self._products.copy()

    # =========================================================================
    # LOADING
    # =========================================================================

    def _load(self) -> None:
        """Load products from JSON file."""
        try:
            with self._products_file.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.error(f"Products file not found: {self._products_file}")
            raise
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON: {e}")
            raise

        if not isinstance(data, list):
            raise ValueError(f"Expected a JSON array of products in {self._products_file}")

        self._products.clear()
        seen_ids = set()

        for index, item in enumerate(data):
            try:
                product = CatalogProduct.model_validate(item)
            except ValidationError as e:
                logger.warning(f"Skipping invalid product at position {index}: {e.error_count()} error(s)")
                continue

            if product.id in seen_ids:
                logger.warning(f"Skipping duplicate product id {product.id!r}")
                continue

            seen_ids.add(product.id)
            self._products.append(product)

        self._build_indexes()

        logger.info(f"✅ Loaded {len(self._products)} products from {self._products_file}")

    def _build_indexes(self) -> None:
        """Build lookup indexes."""
        self._by_id = {product.id: product for product in self._products}

    # =========================================================================
    # SEARCH METHODS
    # =========================================================================

    def find_by_id(self, product_id: Identifier) -> Optional[CatalogProduct]:
        """Find product by catalog id."""
        return self._by_id.get(product_id)

    def find_page(self, query: str = "", page: int = 0, limit: int = 10) -> List[CatalogProduct]:
        """
        Get one page of products whose title contains the query.

        An empty query matches every product.

        Args:
            query: Search text (case-insensitive)
            page: Zero-based page index
            limit: Page size

        Returns:
            Products of the requested page, in catalog order
        """
        if page < 0 or limit < 1:
            raise ValueError("page must be >= 0 and limit must be >= 1")

        needle = query.lower().strip()
        if needle:
            matches = [p for p in self._products if needle in p.title.lower()]
        else:
            matches = self._products

        start = page * limit
        return list(matches[start:start + limit])

    async def search(self, query: str, page: int, limit: int) -> List[CatalogProduct]:
        """Catalog search contract used by the picker search feed."""
        return self.find_page(query, page, limit)

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    def get_stats(self) -> Dict:
        """Get catalog statistics."""
        return {
            "total_products": len(self._products),
            "total_variants": sum(len(p.variants) for p in self._products),
        }


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

_catalog_instance: Optional[ProductCatalog] = None


def get_catalog() -> Optional[ProductCatalog]:
    """Get the global catalog instance."""
    return _catalog_instance


def init_catalog(products_file: Path) -> ProductCatalog:
    """
    Initialize the global catalog instance.

    Args:
        products_file: Path to products.json

    Returns:
        ProductCatalog instance
    """
    global _catalog_instance
    _catalog_instance = ProductCatalog(products_file)
    return _catalog_instance
