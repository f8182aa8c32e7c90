"""
==============================================================================
Catalog Models Module
==============================================================================

Pydantic models for catalog products as returned by a catalog search.

Wire shape (one element of a search page):
-----------------------------------------
{
  "id": 77,
  "title": "Fadeaway Hoodie",
  "image": {"src": "https://cdn.example.com/hoodie.png"},
  "variants": [
    {"id": 1, "title": "S / Black", "price": "49.00", "inventory": 12}
  ]
}

==============================================================================
"""

from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Catalog ids are assigned by the upstream service and treated as opaque.
Identifier = Union[int, str]


def same_id(left: Identifier, right: Identifier) -> bool:
    """Compare ids, treating 77 and "77" as equal (path params are strings)."""
    return left == right or str(left) == str(right)


class ProductImage(BaseModel):
    """Image reference attached to a product."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    src: str = Field(default="", description="Image URL")


class CatalogVariant(BaseModel):
    """
    Variant of a catalog product.

    Attributes:
        id: Variant id, unique within its product
        title: Variant display name
        price: Unit price
        inventory: Units available (negative stock is reported as 0)
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Identifier
    title: str = ""
    price: Decimal = Decimal("0")
    inventory: int = 0

    @field_validator("title", mode="before")
    @classmethod
    def empty_title(cls, v):
        return v or ""

    @field_validator("price", mode="before")
    @classmethod
    def empty_price(cls, v):
        return v if v not in (None, "") else Decimal("0")

    @field_validator("inventory", mode="before")
    @classmethod
    def clamp_inventory(cls, v):
        if v in (None, ""):
            return 0
        return max(0, int(v))


class CatalogProduct(BaseModel):
    """
    Product returned by a catalog search.

    Attributes:
        id: Catalog product id
        title: Product display name
        image: Product image (optional)
        variants: Variants in catalog order
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Identifier
    title: str = ""
    image: Optional[ProductImage] = None
    variants: List[CatalogVariant] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def empty_title(cls, v):
        return v or ""

    def find_variant(self, variant_id: Identifier) -> Optional[CatalogVariant]:
        """Get variant by id."""
        for variant in self.variants:
            if same_id(variant.id, variant_id):
                return variant
        return None
