"""
==============================================================================
Remote Catalog Client Module
==============================================================================

Async HTTP client for the remote catalog search service.

Request:
--------
    GET {CATALOG_API_URL}/task/products/search?search=<q>&page=<n>&limit=<k>
    x-api-key: <CATALOG_API_KEY>

The ``search`` parameter is omitted for an empty query. The response body
is a JSON array of products (see app.catalog.models).

Failure Mapping:
---------------
- Connection errors, timeouts, 5xx and 429 → retryable CatalogSearchError
- Other 4xx and undecodable bodies        → non-retryable CatalogSearchError

==============================================================================
"""

from __future__ import annotations

import logging
from typing import List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from app.core.exceptions import CatalogSearchError
from .models import CatalogProduct


# Module logger
logger = logging.getLogger(__name__)

SEARCH_PATH = "/task/products/search"

_page_adapter = TypeAdapter(List[CatalogProduct])


class CatalogClient:
    """
    Remote catalog search client.

    Usage:
        async with CatalogClient("https://catalog.example.com", "key") as client:
            products = await client.search("hoodie", page=0, limit=10)
    """

    def __init__(
        self,
        api_url: str,
        api_key: str = "",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the catalog client.

        Args:
            api_url: Catalog service base URL
            api_key: Value for the x-api-key header
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_url = api_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.api_url,
            timeout=timeout,
            transport=transport,
            headers={
                "x-api-key": api_key,
                "Accept": "application/json",
            },
        )

    async def __aenter__(self) -> CatalogClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    @staticmethod
    def build_params(query: str, page: int, limit: int) -> dict:
        """Build search query parameters."""
        params = {}
        if query:
            params["search"] = query
        params["page"] = str(int(page))
        if limit:
            params["limit"] = str(limit)
        return params

    async def search(self, query: str, page: int, limit: int) -> List[CatalogProduct]:
        """
        Fetch one page of catalog products.

        Args:
            query: Search text
            page: Zero-based page index
            limit: Page size

        Returns:
            Products of the page in service order

        Raises:
            CatalogSearchError: On transport, HTTP or payload failure
        """
        params = self.build_params(query, page, limit)

        try:
            response = await self._client.get(SEARCH_PATH, params=params)
        except httpx.TimeoutException as e:
            logger.warning(f"Catalog search timed out: {e}")
            raise CatalogSearchError("Catalog search timed out", retryable=True) from e
        except httpx.TransportError as e:
            logger.warning(f"Catalog connection error: {e}")
            raise CatalogSearchError("Could not reach the catalog service", retryable=True) from e

        if response.status_code >= 400:
            raise self._error_from_response(response)

        try:
            return _page_adapter.validate_json(response.content)
        except ValidationError as e:
            logger.error(f"Unexpected catalog payload: {e.error_count()} error(s)")
            raise CatalogSearchError(
                "Catalog returned an unexpected payload",
                retryable=False
            ) from e

    @staticmethod
    def _error_from_response(response: httpx.Response) -> CatalogSearchError:
        """Convert an HTTP error response to CatalogSearchError."""
        status = response.status_code
        retryable = status >= 500 or status == 429

        logger.warning(f"Catalog search failed with HTTP {status}")

        return CatalogSearchError(
            f"Catalog search failed with HTTP {status}",
            retryable=retryable,
            details={"status": status},
        )
