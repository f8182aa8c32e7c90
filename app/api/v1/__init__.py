"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- products: Product catalog search
- offer: Offer rows, discounts and reordering
- picker: Product picker session

==============================================================================
"""

from . import health, products, offer, picker

__all__ = ["health", "products", "offer", "picker"]
