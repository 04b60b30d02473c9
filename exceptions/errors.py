"""
Custom exception classes for the application.

Every error carries a stable code, a human-readable message and the
HTTP status the API layer should answer with.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "ITEM_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# ITEM ERRORS
# ===================

class ItemNotFoundError(NotFoundError):
    """Item not found in stored items or in the fetched patch data."""

    def __init__(self, riot_id: str):
        super().__init__(
            resource="Item",
            identifier=riot_id,
            code="ITEM_NOT_FOUND"
        )


class ManualSettingNotFoundError(NotFoundError):
    """No manual setting registered for the item."""

    def __init__(self, riot_id: str):
        super().__init__(
            resource="Manual setting",
            identifier=riot_id,
            code="MANUAL_SETTING_NOT_FOUND"
        )


class InvalidCategoryTransitionError(ValidationError):
    """Classification move not allowed from the item's current category."""

    def __init__(self, riot_id: str, current: str, action: str):
        super().__init__(
            code="INVALID_CATEGORY_TRANSITION",
            message=f"Cannot {action} item {riot_id} while it is {current}",
            details={
                "riot_id": riot_id,
                "current_category": current,
                "action": action
            }
        )


# ===================
# EXTERNAL SERVICE ERRORS
# ===================

class RiotAPIError(ExternalServiceError):
    """Data Dragon request failed."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(
            service="riot_api",
            message=message,
            details={"url": url} if url else None
        )


class StorageUploadError(ExternalServiceError):
    """Object storage rejected an upload."""

    def __init__(self, path: str, message: str):
        super().__init__(
            service="storage",
            message=f"Image upload failed: {message}",
            details={"path": path}
        )


class ImageProcessingError(ValidationError):
    """Image bytes could not be decoded or re-encoded."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="IMAGE_PROCESSING_ERROR",
            message=message,
            details=details
        )
