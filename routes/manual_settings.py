"""
Manual setting API routes.

Admin overrides of the automatic exclusion rules.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.manual_setting import (
    ManualSetting,
    ManualSettingUpsert,
    ManualSettingReasonUpdate,
    ManualSettingListResponse,
)
from services.manual_setting_service import get_manual_setting_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
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


@router.get("", response_model=ManualSettingListResponse)
async def list_manual_settings():
    """All manual settings."""
    try:
        settings = get_manual_setting_service().get_all()
        return ManualSettingListResponse(data=settings, total=len(settings))

    except Exception as e:
        return handle_error(e)


@router.put("/{riot_id}", response_model=ManualSetting)
async def put_manual_setting(riot_id: str, data: ManualSettingUpsert):
    """Create or replace the manual setting of an item."""
    try:
        return get_manual_setting_service().upsert(riot_id, data)

    except Exception as e:
        return handle_error(e)


@router.patch("/{riot_id}/reason", response_model=ManualSetting)
async def update_manual_setting_reason(riot_id: str, data: ManualSettingReasonUpdate):
    """
    Edit the reason of an existing setting.

    Raises:
        404: No manual setting for the item
    """
    try:
        return get_manual_setting_service().update_reason(riot_id, data.reason)

    except Exception as e:
        return handle_error(e)


@router.delete("/{riot_id}", status_code=204)
async def delete_manual_setting(riot_id: str):
    """
    Remove a manual setting; the item falls back to the automatic rules
    on the next sync.

    Raises:
        404: No manual setting for the item
    """
    try:
        get_manual_setting_service().delete(riot_id)
        return None  # 204 No Content

    except Exception as e:
        return handle_error(e)
