"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides catalog, offer builder and API client fixtures.

==============================================================================
"""

import asyncio
from typing import Callable, Dict, Generator, List, Optional, Sequence

import pytest
from fastapi.testclient import TestClient

from app.catalog.models import CatalogProduct
from app.core.dependencies import get_offer_builder
from app.main import app
from app.services.offer_builder import OfferBuilder


# ============================================================================
# CATALOG FIXTURES
# ============================================================================

class FakeCatalog:
    """
    In-memory catalog source.

    Requests for a query listed in ``gates`` block until the gate event is
    set, so tests can decide in which order responses arrive. Exceptions
    queued in ``failures`` are raised by the next requests, one each.
    """

    def __init__(self, products: Sequence[CatalogProduct]):
        self.products = list(products)
        self.calls: List[tuple] = []
        self.failures: List[Exception] = []
        self.gates: Dict[str, asyncio.Event] = {}

    async def search(self, query: str, page: int, limit: int) -> List[CatalogProduct]:
        self.calls.append((query, page, limit))

        gate = self.gates.get(query)
        if gate is not None:
            await gate.wait()

        if self.failures:
            raise self.failures.pop(0)

        needle = query.lower()
        matches = [p for p in self.products if needle in p.title.lower()]
        return matches[page * limit:(page + 1) * limit]


@pytest.fixture
def product_factory() -> Callable[..., CatalogProduct]:
    """Build catalog products with numbered variants."""
    def _make(
        product_id,
        title: str,
        variant_ids: Sequence = (1,),
        image: Optional[str] = None,
    ) -> CatalogProduct:
        return CatalogProduct.model_validate({
            "id": product_id,
            "title": title,
            "image": {"src": image} if image else None,
            "variants": [
                {
                    "id": variant_id,
                    "title": f"{title} #{variant_id}",
                    "price": "10.00",
                    "inventory": 5,
                }
                for variant_id in variant_ids
            ],
        })

    return _make


@pytest.fixture
def products(product_factory) -> List[CatalogProduct]:
    """Five products; ids 77 and 80 have several variants."""
    return [
        product_factory(77, "Fadeaway Hoodie", [1, 2, 3], image="https://cdn.example.com/77.png"),
        product_factory(80, "Crewneck Tee", [10, 11]),
        product_factory(81, "Canvas Tote", [20]),
        product_factory(82, "Wool Beanie", [30, 31]),
        product_factory(83, "Zip Hoodie", [40]),
    ]


@pytest.fixture
def fake_catalog(products) -> FakeCatalog:
    """Catalog source over the sample products."""
    return FakeCatalog(products)


# ============================================================================
# BUILDER FIXTURES
# ============================================================================

@pytest.fixture
def builder(fake_catalog: FakeCatalog) -> OfferBuilder:
    """Fresh offer builder with small pages and no debounce delay."""
    return OfferBuilder(fake_catalog, page_size=2, debounce_seconds=0)


# ============================================================================
# CLIENT FIXTURES
# ============================================================================

@pytest.fixture(scope="function")
def client(builder: OfferBuilder) -> Generator[TestClient, None, None]:
    """Create test client with offer builder override."""
    app.dependency_overrides[get_offer_builder] = lambda: builder

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
