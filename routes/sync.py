"""
Sync API routes.

Admin endpoints that read Data Dragon, review the classification of a
patch and write the items table.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.classification import (
    ClassifiedItemResponse,
    ClassificationResponse,
    ClassificationSaveRequest,
    ClassificationSaveResult,
)
from models.patch import (
    PatchCheckResult,
    PatchVersionRecord,
    PatchVersionUpdate,
    PatchDiffRequest,
    PatchDiffSummary,
    VersionListResponse,
)
from models.sync import (
    DiffReport,
    SyncRequest,
    SyncSummary,
    ImageRefreshRequest,
    ImageRefreshSummary,
    RawItemInspection,
)
from integrations.riot_client import get_riot_client
from services.patch_service import get_patch_service
from services.sync_service import get_sync_service
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


# ===================
# VERSIONS
# ===================

@router.get("/versions", response_model=VersionListResponse)
async def list_versions():
    """Data Dragon versions, newest first."""
    try:
        versions = get_riot_client().get_versions()
        return VersionListResponse(data=versions, latest=versions[0] if versions else None)

    except Exception as e:
        return handle_error(e)


@router.get("/patch", response_model=PatchCheckResult)
async def check_patch():
    """
    Compare the synced patch with the newest one.

    Always 200: a failed check reports the fallback version and the
    error text.
    """
    return get_patch_service().check_for_updates()


@router.put("/patch", response_model=PatchVersionRecord)
async def save_patch(data: PatchVersionUpdate):
    """Record the synced patch."""
    try:
        return get_patch_service().save_patch_version(data.current_patch)

    except Exception as e:
        return handle_error(e)


@router.post("/patch/diff", response_model=PatchDiffSummary)
def record_patch_diff(data: PatchDiffRequest):
    """Store raw records that changed between two patches."""
    try:
        return get_sync_service().record_patch_diff(data.baseline_version, data.version)

    except Exception as e:
        return handle_error(e)


# ===================
# CLASSIFICATION
# ===================

@router.get("/classification", response_model=ClassificationResponse)
def get_classification(
    version: Optional[str] = Query(None, description="Patch version, latest when omitted")
):
    """Fetched items of a patch split into available, manual settings and auto-excluded."""
    try:
        board = get_sync_service().load_classification(version)

        return ClassificationResponse(
            version=board.version,
            available=[ClassifiedItemResponse.from_item(i) for i in board.available_items()],
            manual_settings=[ClassifiedItemResponse.from_item(i) for i in board.manual_setting_items()],
            auto_excluded=[ClassifiedItemResponse.from_item(i) for i in board.auto_excluded_items()],
            counts=board.counts(),
        )

    except Exception as e:
        return handle_error(e)


@router.post("/classification", response_model=ClassificationSaveResult)
def save_classification(data: ClassificationSaveRequest):
    """
    Commit the edited classification.

    manual_settings is the complete list; settings not in it are
    removed and their items go back to the automatic rules.

    Raises:
        500: Database constraint failure (message passed through)
    """
    try:
        return get_sync_service().commit_classification(data)

    except Exception as e:
        return handle_error(e)


# ===================
# SYNC
# ===================

@router.get("/diff", response_model=DiffReport)
def scan(
    version: Optional[str] = Query(None, description="Patch version, latest when omitted")
):
    """Dry run: what a sync would add, change and delete."""
    try:
        return get_sync_service().scan(version)

    except Exception as e:
        return handle_error(e)


@router.post("/run", response_model=SyncSummary)
def run_sync(data: SyncRequest):
    """
    Run a sync.

    With item_ids only those items are synced and nothing is deleted.
    Per-item failures are reported in the summary, not as an error
    status.

    Raises:
        503: Item data could not be fetched
    """
    try:
        return get_sync_service().sync(data.version, data.item_ids)

    except Exception as e:
        return handle_error(e)


@router.post("/images/refresh", response_model=ImageRefreshSummary)
def refresh_images(data: ImageRefreshRequest):
    """Re-upload icons of the given items."""
    try:
        return get_sync_service().refresh_images(data.item_ids, data.version)

    except Exception as e:
        return handle_error(e)


@router.get("/raw/{riot_id}", response_model=RawItemInspection)
def get_raw_item(
    riot_id: str,
    version: Optional[str] = Query(None, description="Patch version, latest when omitted")
):
    """
    Raw Data Dragon record of an item with the parsed fields.

    Raises:
        404: Item not in the patch
    """
    try:
        return get_sync_service().inspect(riot_id, version)

    except Exception as e:
        return handle_error(e)
