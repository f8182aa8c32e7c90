"""
==============================================================================
Offer Endpoints
==============================================================================

Row-level operations on the upsell offer: add/remove rows, discounts,
variant removal and reordering.

==============================================================================
"""

from fastapi import APIRouter, Depends

from app.catalog.models import Identifier
from app.core.dependencies import get_offer_builder
from app.schemas.offer import (
    DiscountUpdate,
    OfferResponse,
    ReorderRequest,
    RowResponse,
    SingleRowResponse,
)
from app.services.offer_builder import OfferBuilder


router = APIRouter(prefix="/offer", tags=["Offer"])


class OfferController:
    """Controller for offer row operations."""

    def __init__(self, builder: OfferBuilder):
        self._builder = builder

    def _row(self, row) -> SingleRowResponse:
        return SingleRowResponse(row=RowResponse.from_model(row))

    def get_offer(self) -> OfferResponse:
        """Get every row in display order."""
        return OfferResponse.from_rows(self._builder.rows)

    def add_row(self) -> SingleRowResponse:
        """Append a placeholder row."""
        return self._row(self._builder.add_row())

    def remove_row(self, row_id: Identifier) -> OfferResponse:
        """Remove a row."""
        self._builder.remove_row(row_id)
        return self.get_offer()

    def set_discount(self, row_id: Identifier, data: DiscountUpdate) -> SingleRowResponse:
        """Edit the row-level discount."""
        return self._row(self._builder.set_discount(row_id, data))

    def set_variant_discount(
        self,
        row_id: Identifier,
        variant_id: Identifier,
        data: DiscountUpdate
    ) -> SingleRowResponse:
        """Edit one variant's discount."""
        return self._row(self._builder.set_discount(row_id, data, variant_id=variant_id))

    def remove_variant(self, row_id: Identifier, variant_id: Identifier) -> SingleRowResponse:
        """Remove a variant from a row."""
        return self._row(self._builder.remove_variant(row_id, variant_id))

    def reorder_rows(self, data: ReorderRequest) -> OfferResponse:
        """Move a row by index or by drag ids."""
        if data.by_index:
            self._builder.reorder_rows(data.from_index, data.to_index)
        else:
            self._builder.move_row(data.active_id, data.over_id)
        return self.get_offer()

    def reorder_variants(self, row_id: Identifier, data: ReorderRequest) -> SingleRowResponse:
        """Move a variant within its row by index or by drag ids."""
        if data.by_index:
            row = self._builder.reorder_variants(row_id, data.from_index, data.to_index)
        else:
            row = self._builder.move_variant(row_id, data.active_id, data.over_id)
        return self._row(row)


@router.get("", response_model=OfferResponse)
async def get_offer(builder: OfferBuilder = Depends(get_offer_builder)):
    """Get the offer rows."""
    controller = OfferController(builder)
    return controller.get_offer()


@router.post("/rows", response_model=SingleRowResponse, status_code=201)
async def add_row(builder: OfferBuilder = Depends(get_offer_builder)):
    """Append an empty row to be filled through the picker."""
    controller = OfferController(builder)
    return controller.add_row()


@router.post("/rows/reorder", response_model=OfferResponse)
async def reorder_rows(
    data: ReorderRequest,
    builder: OfferBuilder = Depends(get_offer_builder)
):
    """Reorder rows (drag and drop)."""
    controller = OfferController(builder)
    return controller.reorder_rows(data)


@router.delete("/rows/{row_id}", response_model=OfferResponse)
async def remove_row(
    row_id: str,
    builder: OfferBuilder = Depends(get_offer_builder)
):
    """Remove a row."""
    controller = OfferController(builder)
    return controller.remove_row(row_id)


@router.patch("/rows/{row_id}/discount", response_model=SingleRowResponse)
async def set_row_discount(
    row_id: str,
    data: DiscountUpdate,
    builder: OfferBuilder = Depends(get_offer_builder)
):
    """
    Edit a row's discount.

    Percentages are clamped to 0-100 and fixed amounts to >= 0.
    Non-numeric values clear the discount.
    """
    controller = OfferController(builder)
    return controller.set_discount(row_id, data)


@router.post("/rows/{row_id}/variants/reorder", response_model=SingleRowResponse)
async def reorder_variants(
    row_id: str,
    data: ReorderRequest,
    builder: OfferBuilder = Depends(get_offer_builder)
):
    """Reorder variants within a row."""
    controller = OfferController(builder)
    return controller.reorder_variants(row_id, data)


@router.patch("/rows/{row_id}/variants/{variant_id}/discount", response_model=SingleRowResponse)
async def set_variant_discount(
    row_id: str,
    variant_id: str,
    data: DiscountUpdate,
    builder: OfferBuilder = Depends(get_offer_builder)
):
    """Edit a variant's discount."""
    controller = OfferController(builder)
    return controller.set_variant_discount(row_id, variant_id, data)


@router.delete("/rows/{row_id}/variants/{variant_id}", response_model=SingleRowResponse)
async def remove_variant(
    row_id: str,
    variant_id: str,
    builder: OfferBuilder = Depends(get_offer_builder)
):
    """Remove a variant from a row."""
    controller = OfferController(builder)
    return controller.remove_variant(row_id, variant_id)
