"""
Custom exceptions module.

Services raise these; routes turn them into JSON via AppError.to_dict().
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,

    # Items
    ItemNotFoundError,
    ManualSettingNotFoundError,
    InvalidCategoryTransitionError,

    # External services
    RiotAPIError,
    StorageUploadError,
    ImageProcessingError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",

    # Items
    "ItemNotFoundError",
    "ManualSettingNotFoundError",
    "InvalidCategoryTransitionError",

    # External services
    "RiotAPIError",
    "StorageUploadError",
    "ImageProcessingError",
]
