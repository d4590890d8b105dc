"""
BOM and BOM item endpoints.
"""

from fastapi import APIRouter, Depends, Query, Response, status

from src.api.dependencies import get_boms, get_calculator, get_user_id
from src.application.dto.requests import (
    AddBOMItemRequest,
    CreateBOMRequest,
    ShapeValidationRequest,
    UpdateBOMItemRequest,
    UpdateBOMRequest,
)
from src.application.dto.responses import (
    BOMDetailResponse,
    BOMItemListResponse,
    BOMListResponse,
    DeleteItemResponse,
    RecalculationResponse,
    ShapeValidationResponse,
)
from src.config import get_logger
from src.core.entities import BOM, BOMCategory, BOMItem, BOMStatus, BOMSummary
from src.core.exceptions import BOMItemNotFoundError
from src.core.services import BOMService, ItemCostCalculator

logger = get_logger(__name__)

router = APIRouter(prefix="/api/boms", tags=["boms"])


@router.post("", response_model=BOM, status_code=status.HTTP_201_CREATED)
async def create_bom(
    request: CreateBOMRequest,
    service: BOMService = Depends(get_boms),
    user_id: str | None = Depends(get_user_id),
) -> BOM:
    """Create a draft BOM with a generated code."""
    return await service.create_bom(request.to_input(), user_id)


@router.get("", response_model=BOMListResponse)
async def list_boms(
    entity_id: str = Query(..., description="Owning entity"),
    project_id: str | None = Query(default=None),
    category: BOMCategory | None = Query(default=None),
    bom_status: BOMStatus | None = Query(default=None, alias="status"),
    limit: int | None = Query(default=None, ge=1, le=500),
    service: BOMService = Depends(get_boms),
) -> BOMListResponse:
    """List an entity's BOMs, newest first."""
    boms = await service.list_boms(
        entity_id,
        project_id=project_id,
        category=category,
        status=bom_status,
        limit=limit,
    )
    return BOMListResponse(boms=boms, total=len(boms))


@router.post("/validate-shape", response_model=ShapeValidationResponse)
async def validate_shape_parameters(
    request: ShapeValidationRequest,
    calculator: ItemCostCalculator = Depends(get_calculator),
) -> ShapeValidationResponse:
    """Check parameter values against a shape's limits."""
    result = await calculator.validate_shape_parameters(request.shape_id, request.parameters)
    return ShapeValidationResponse(valid=result.valid, errors=result.errors)


@router.get("/{bom_id}", response_model=BOMDetailResponse)
async def get_bom(
    bom_id: str,
    service: BOMService = Depends(get_boms),
) -> BOMDetailResponse:
    """Get a BOM together with its items."""
    bom = await service.require_bom(bom_id)
    items = await service.get_items(bom_id)
    return BOMDetailResponse(bom=bom, items=items)


@router.patch("/{bom_id}", response_model=BOM)
async def update_bom(
    bom_id: str,
    request: UpdateBOMRequest,
    service: BOMService = Depends(get_boms),
    user_id: str | None = Depends(get_user_id),
) -> BOM:
    """Update BOM header fields."""
    return await service.update_bom(bom_id, request.to_input(), user_id)


@router.delete("/{bom_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bom(
    bom_id: str,
    service: BOMService = Depends(get_boms),
) -> Response:
    """Delete a BOM and all of its items."""
    await service.delete_bom(bom_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{bom_id}/items", response_model=BOMItemListResponse)
async def list_items(
    bom_id: str,
    service: BOMService = Depends(get_boms),
) -> BOMItemListResponse:
    """List a BOM's items in item-number order."""
    await service.require_bom(bom_id)
    items = await service.get_items(bom_id)
    return BOMItemListResponse(items=items, total=len(items))


@router.post("/{bom_id}/items", response_model=BOMItem, status_code=status.HTTP_201_CREATED)
async def add_item(
    bom_id: str,
    request: AddBOMItemRequest,
    service: BOMService = Depends(get_boms),
    user_id: str | None = Depends(get_user_id),
) -> BOMItem:
    """Add an item; it is numbered, priced and the summary refreshed."""
    return await service.add_item(bom_id, request.to_input(), user_id)


@router.get("/{bom_id}/items/{item_id}", response_model=BOMItem)
async def get_item(
    bom_id: str,
    item_id: str,
    service: BOMService = Depends(get_boms),
) -> BOMItem:
    item = await service.get_item(bom_id, item_id)
    if item is None:
        raise BOMItemNotFoundError(bom_id, item_id)
    return item


@router.patch("/{bom_id}/items/{item_id}", response_model=BOMItem)
async def update_item(
    bom_id: str,
    item_id: str,
    request: UpdateBOMItemRequest,
    service: BOMService = Depends(get_boms),
    user_id: str | None = Depends(get_user_id),
) -> BOMItem:
    """Update an item; cost inputs trigger repricing."""
    return await service.update_item(bom_id, item_id, request.to_input(), user_id)


@router.delete("/{bom_id}/items/{item_id}", response_model=DeleteItemResponse)
async def delete_item(
    bom_id: str,
    item_id: str,
    service: BOMService = Depends(get_boms),
    user_id: str | None = Depends(get_user_id),
) -> DeleteItemResponse:
    """Delete an item with its whole sub-tree."""
    deleted = await service.delete_item(bom_id, item_id, user_id)
    bom = await service.get_bom(bom_id)
    return DeleteItemResponse(
        deleted_item_ids=deleted,
        summary=bom.summary if bom else None,
    )


@router.post("/{bom_id}/recalculate", response_model=RecalculationResponse)
async def recalculate_costs(
    bom_id: str,
    service: BOMService = Depends(get_boms),
    user_id: str | None = Depends(get_user_id),
) -> RecalculationResponse:
    """Reprice every item and rebuild the summary."""
    result = await service.recalculate_all_costs(bom_id, user_id)
    logger.info(
        "bom_recalculation_requested",
        bom_id=bom_id,
        calculated=result.items.calculated,
        failed=result.items.failed,
    )
    return RecalculationResponse(
        bom_id=bom_id,
        items_total=result.items.total,
        items_calculated=result.items.calculated,
        items_skipped=result.items.skipped,
        items_failed=result.items.failed,
        failed_item_ids=result.items.failed_item_ids,
        summary=result.summary,
    )


@router.post("/{bom_id}/summary", response_model=BOMSummary)
async def recalculate_summary(
    bom_id: str,
    service: BOMService = Depends(get_boms),
    user_id: str | None = Depends(get_user_id),
) -> BOMSummary:
    """Rebuild the summary from the stored item costs."""
    return await service.recalculate_summary(bom_id, user_id)
