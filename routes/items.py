"""
Stored item API routes (public read).
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
import structlog

from models.item import ItemResponse, ItemListResponse
from services.item_service import get_item_service
from integrations.storage import get_item_image_storage
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


def with_image_url(item: ItemResponse) -> ItemResponse:
    """Attach the icon URL, cache-busted by updated_at."""
    if item.image_path:
        item.image_url = get_item_image_storage().get_public_url(
            item.image_path,
            cache_bust=item.updated_at
        )
    return item


# ===================
# ROUTES
# ===================

@router.get("", response_model=ItemListResponse)
async def list_items(
    available_only: bool = Query(False, description="Only items flagged available")
):
    """List stored items ordered by riot_id."""
    try:
        items = get_item_service().get_all(available_only=available_only)
        data = [with_image_url(item) for item in items]
        return ItemListResponse(data=data, total=len(data))

    except Exception as e:
        return handle_error(e)


@router.get("/{riot_id}", response_model=ItemResponse)
async def get_item(riot_id: str):
    """
    Get one stored item.

    Raises:
        404: Item not found
    """
    try:
        return with_image_url(get_item_service().get_by_riot_id(riot_id))

    except Exception as e:
        return handle_error(e)
