"""
==============================================================================
Product Picker Endpoints
==============================================================================

Picker session operations: open/close, search, pagination, variant
selection and confirmation.

Picker Flow:
-----------
1. POST /picker/open      - Start a session (edit a row or append)
2. POST /picker/search    - Type a query (debounced)
3. POST /picker/next-page - Scroll to load more
4. POST /picker/toggle    - Pick or unpick a variant
5. POST /picker/confirm   - Merge the selection into the offer
   POST /picker/close     - Or discard it

==============================================================================
"""

from fastapi import APIRouter, Depends

from app.core.dependencies import get_offer_builder
from app.schemas.offer import (
    OfferResponse,
    OpenPickerRequest,
    PickerDetail,
    PickerResponse,
    SearchRequest,
    ToggleProductRequest,
    ToggleResponse,
    ToggleVariantRequest,
)
from app.services.offer_builder import OfferBuilder


router = APIRouter(prefix="/picker", tags=["Picker"])


class PickerController:
    """Controller for picker session operations."""

    def __init__(self, builder: OfferBuilder):
        self._builder = builder

    def get_picker(self) -> PickerResponse:
        """Snapshot of the picker (closed if no session)."""
        session = self._builder.picker
        if session is None:
            return PickerResponse(open=False)

        return PickerResponse(
            open=True,
            picker=PickerDetail.from_session(session, self._builder.editing_index())
        )

    async def open(self, data: OpenPickerRequest) -> PickerResponse:
        """Open a session and load the first page."""
        await self._builder.open_picker(data.editing_index)
        return self.get_picker()

    def search(self, data: SearchRequest) -> PickerResponse:
        """Set the (debounced) query."""
        self._builder.search(data.query)
        return self.get_picker()

    async def next_page(self) -> PickerResponse:
        """Load the next page."""
        await self._builder.load_more()
        return self.get_picker()

    async def retry(self) -> PickerResponse:
        """Retry the last failed request."""
        await self._builder.retry()
        return self.get_picker()

    def toggle_variant(self, data: ToggleVariantRequest) -> ToggleResponse:
        """Pick or unpick one variant."""
        selected = self._builder.toggle_variant(data.product_id, data.variant_id)
        return ToggleResponse(
            product_id=data.product_id,
            selected=selected,
            selected_count=self._builder.picker.selection.selected_count
        )

    def toggle_product(self, data: ToggleProductRequest) -> ToggleResponse:
        """Pick or unpick every variant of a product."""
        selected = self._builder.toggle_product(data.product_id)
        return ToggleResponse(
            product_id=data.product_id,
            selected=selected,
            selected_count=self._builder.picker.selection.selected_count
        )

    def confirm(self) -> OfferResponse:
        """Merge the selection and return the new offer."""
        rows = self._builder.confirm_picker()
        return OfferResponse.from_rows(rows)

    def close(self) -> PickerResponse:
        """Discard the session."""
        self._builder.close_picker()
        return PickerResponse(open=False)


@router.get("", response_model=PickerResponse)
async def get_picker(builder: OfferBuilder = Depends(get_offer_builder)):
    """
    Get the picker state.

    Poll after a search to see debounced results arrive.
    """
    controller = PickerController(builder)
    return controller.get_picker()


@router.post("/open", response_model=PickerResponse)
async def open_picker(
    data: OpenPickerRequest,
    builder: OfferBuilder = Depends(get_offer_builder)
):
    """
    Open the product picker.

    With ``editing_index`` the row's current product is pre-selected and
    products bound to other rows are hidden. Without it, confirmed
    products are appended as new rows.
    """
    controller = PickerController(builder)
    return await controller.open(data)


@router.post("/search", response_model=PickerResponse)
async def search(
    data: SearchRequest,
    builder: OfferBuilder = Depends(get_offer_builder)
):
    """Type a search query (results arrive after the debounce interval)."""
    controller = PickerController(builder)
    return controller.search(data)


@router.post("/next-page", response_model=PickerResponse)
async def next_page(builder: OfferBuilder = Depends(get_offer_builder)):
    """Load the next result page (no-op when exhausted or loading)."""
    controller = PickerController(builder)
    return await controller.next_page()


@router.post("/retry", response_model=PickerResponse)
async def retry(builder: OfferBuilder = Depends(get_offer_builder)):
    """Retry a failed search request."""
    controller = PickerController(builder)
    return await controller.retry()


@router.post("/toggle", response_model=ToggleResponse)
async def toggle_variant(
    data: ToggleVariantRequest,
    builder: OfferBuilder = Depends(get_offer_builder)
):
    """Pick or unpick a variant of a loaded product."""
    controller = PickerController(builder)
    return controller.toggle_variant(data)


@router.post("/toggle-product", response_model=ToggleResponse)
async def toggle_product(
    data: ToggleProductRequest,
    builder: OfferBuilder = Depends(get_offer_builder)
):
    """Pick all variants of a product, or unpick them all."""
    controller = PickerController(builder)
    return controller.toggle_product(data)


@router.post("/confirm", response_model=OfferResponse)
async def confirm(builder: OfferBuilder = Depends(get_offer_builder)):
    """Merge the selection into the offer and close the picker."""
    controller = PickerController(builder)
    return controller.confirm()


@router.post("/close", response_model=PickerResponse)
async def close(builder: OfferBuilder = Depends(get_offer_builder)):
    """Close the picker without changing the offer."""
    controller = PickerController(builder)
    return controller.close()
