"""
Icon conversion: Data Dragon PNG -> small WebP.
"""

from io import BytesIO
from typing import Optional
import structlog
from PIL import Image, UnidentifiedImageError

from config import settings
from exceptions import ImageProcessingError

logger = structlog.get_logger(__name__)


def resize_and_convert_to_webp(
    data: bytes,
    width: Optional[int] = None,
    height: Optional[int] = None,
    quality: Optional[int] = None
) -> bytes:
    """
    Resize an image and encode it as WebP.

    Args:
        data: Source image bytes (any format Pillow reads)
        width: Target width, defaults to settings.image_width
        height: Target height, defaults to settings.image_height
        quality: WebP quality 1-100, defaults to settings.image_quality

    Returns:
        WebP bytes

    Raises:
        ImageProcessingError: If the bytes are not a decodable image
    """
    width = width or settings.image_width
    height = height or settings.image_height
    quality = quality or settings.image_quality

    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            mode = "RGBA" if "A" in img.getbands() or img.mode == "P" else "RGB"
            resized = img.convert(mode).resize((width, height), Image.Resampling.LANCZOS)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.error("image_decode_failed", error=str(e), size=len(data))
        raise ImageProcessingError(
            "Failed to load image",
            details={"error": str(e), "size": len(data)}
        )

    output = BytesIO()
    try:
        resized.save(output, format="WEBP", quality=quality)
    except (OSError, ValueError) as e:
        logger.error("webp_encode_failed", error=str(e))
        raise ImageProcessingError("Failed to convert to WebP", details={"error": str(e)})

    return output.getvalue()
