"""
==============================================================================
Product Catalog Endpoints
==============================================================================

Search endpoint over the local product catalog.

The response body matches the remote catalog API: a bare JSON array
of products.

==============================================================================
"""

from typing import Dict

from fastapi import APIRouter, Depends, Query

from app.catalog.catalog import ProductCatalog
from app.core import exceptions
from app.core.dependencies import get_page_params, get_product_catalog


router = APIRouter(prefix="/products", tags=["Products"])


class ProductController:
    """Controller for product catalog operations."""

    def __init__(self, catalog: ProductCatalog):
        self._catalog = catalog

    def search(self, query: str, page: int, limit: int) -> list:
        """Search products; returns the bare product array."""
        products = self._catalog.find_page(query, page, limit)
        return [p.model_dump(mode="json") for p in products]

    def get_by_id(self, product_id: str) -> dict:
        """Get product by catalog id."""
        product = self._catalog.find_by_id(product_id)
        if product is None and product_id.isdigit():
            product = self._catalog.find_by_id(int(product_id))

        if not product:
            raise exceptions.product_not_found(product_id)

        return {
            "success": True,
            "product": product.model_dump(mode="json")
        }

    def get_stats(self) -> dict:
        """Get catalog statistics."""
        return {
            "success": True,
            "stats": self._catalog.get_stats()
        }


@router.get("/search")
async def search_products(
    search: str = Query("", max_length=200),
    params: Dict[str, int] = Depends(get_page_params),
    catalog: ProductCatalog = Depends(get_product_catalog)
):
    """Search products by title (empty search lists everything)."""
    controller = ProductController(catalog)
    return controller.search(search, params["page"], params["limit"])


@router.get("/stats")
async def get_catalog_stats(catalog: ProductCatalog = Depends(get_product_catalog)):
    """Get catalog statistics."""
    controller = ProductController(catalog)
    return controller.get_stats()


@router.get("/{product_id}")
async def get_product(
    product_id: str,
    catalog: ProductCatalog = Depends(get_product_catalog)
):
    """Get product by catalog id."""
    controller = ProductController(catalog)
    return controller.get_by_id(product_id)
