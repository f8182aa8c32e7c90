"""
==============================================================================
Catalog Tests
==============================================================================

Tests for the local JSON catalog and the remote catalog client.

==============================================================================
"""

import json
from decimal import Decimal
from pathlib import Path

import httpx
import pytest

from app.catalog.catalog import ProductCatalog
from app.catalog.client import SEARCH_PATH, CatalogClient
from app.core.exceptions import CatalogSearchError


PRODUCTS = [
    {"id": 1, "title": "Fadeaway Hoodie", "image": {"src": "a.png"},
     "variants": [{"id": 10, "title": "S", "price": "49.00", "inventory": 3}]},
    {"id": 2, "title": "Crewneck Tee", "image": None,
     "variants": [{"id": 20, "title": None, "price": None, "inventory": -4}]},
    {"id": 3, "title": "Zip Hoodie", "variants": []},
    {"title": "No id"},
    {"id": 1, "title": "Duplicate id"},
]


@pytest.fixture
def catalog_file(tmp_path: Path) -> Path:
    path = tmp_path / "products.json"
    path.write_text(json.dumps(PRODUCTS), encoding="utf-8")
    return path


class TestProductCatalog:
    """Tests for the local JSON catalog."""

    def test_skips_invalid_and_duplicate(self, catalog_file):
        """Test products without id and repeated ids are skipped."""
        catalog = ProductCatalog(catalog_file)

        assert [p.id for p in catalog.products] == [1, 2, 3]
        assert catalog.get_stats() == {"total_products": 3, "total_variants": 2}

    def test_normalizes_variant_fields(self, catalog_file):
        """Test missing title/price and negative stock are normalized."""
        variant = ProductCatalog(catalog_file).find_by_id(2).variants[0]

        assert variant.title == ""
        assert variant.price == Decimal("0")
        assert variant.inventory == 0

    def test_find_page_filters_case_insensitively(self, catalog_file):
        """Test title substring search ignores case."""
        catalog = ProductCatalog(catalog_file)

        assert [p.id for p in catalog.find_page("HOODIE")] == [1, 3]
        assert [p.id for p in catalog.find_page("hoodie", page=1, limit=1)] == [3]
        assert catalog.find_page("hoodie", page=2, limit=1) == []

    def test_find_page_rejects_bad_paging(self, catalog_file):
        """Test negative page and zero limit are rejected."""
        catalog = ProductCatalog(catalog_file)

        with pytest.raises(ValueError):
            catalog.find_page("", page=-1)
        with pytest.raises(ValueError):
            catalog.find_page("", limit=0)

    @pytest.mark.asyncio
    async def test_async_search_contract(self, catalog_file):
        """Test the catalog satisfies the picker search contract."""
        catalog = ProductCatalog(catalog_file)

        page = await catalog.search("", 0, 2)

        assert [p.id for p in page] == [1, 2]

    def test_rejects_non_array(self, tmp_path):
        """Test a JSON object file is refused."""
        path = tmp_path / "products.json"
        path.write_text("{}", encoding="utf-8")

        with pytest.raises(ValueError):
            ProductCatalog(path)


def make_client(handler) -> CatalogClient:
    return CatalogClient(
        "https://catalog.example.com/",
        api_key="secret",
        transport=httpx.MockTransport(handler),
    )


class TestCatalogClient:
    """Tests for the remote catalog client."""

    @pytest.mark.asyncio
    async def test_search_request_format(self):
        """Test path, query parameters and api key header."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            seen["key"] = request.headers.get("x-api-key")
            return httpx.Response(200, json=PRODUCTS[:2])

        async with make_client(handler) as client:
            products = await client.search("hood", 1, 10)

        assert seen["path"] == SEARCH_PATH
        assert seen["params"] == {"search": "hood", "page": "1", "limit": "10"}
        assert seen["key"] == "secret"
        assert [p.id for p in products] == [1, 2]

    @pytest.mark.asyncio
    async def test_empty_query_omitted(self):
        """Test an empty query sends no search parameter."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=[])

        async with make_client(handler) as client:
            assert await client.search("", 0, 10) == []

        assert "search" not in seen["params"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,retryable", [(500, True), (503, True), (429, True), (400, False), (404, False)])
    async def test_http_errors(self, status, retryable):
        """Test server errors are retryable and client errors are not."""
        async with make_client(lambda request: httpx.Response(status)) as client:
            with pytest.raises(CatalogSearchError) as exc_info:
                await client.search("", 0, 10)

        assert exc_info.value.retryable is retryable
        assert exc_info.value.details == {"status": status}

    @pytest.mark.asyncio
    async def test_connection_error_retryable(self):
        """Test transport failures are retryable."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(CatalogSearchError) as exc_info:
                await client.search("", 0, 10)

        assert exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_timeout_retryable(self):
        """Test timeouts are retryable."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        async with make_client(handler) as client:
            with pytest.raises(CatalogSearchError) as exc_info:
                await client.search("", 0, 10)

        assert exc_info.value.retryable
        assert "timed out" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_bad_payload_not_retryable(self):
        """Test an undecodable body is not retryable."""
        async with make_client(lambda request: httpx.Response(200, json={"items": []})) as client:
            with pytest.raises(CatalogSearchError) as exc_info:
                await client.search("", 0, 10)

        assert not exc_info.value.retryable
