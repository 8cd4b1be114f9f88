"""
Image Processing Utility - profile picture variants.

Uses Pillow when it is installed:
- primary image: 300x300, cover fit, centered, JPEG quality 90
- thumbnail:     150x150, same treatment
- images over MAX_IMAGE_PIXELS are rejected before decoding

Without Pillow both variants are the original bytes, unmodified.
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

# Image support
try:
    from PIL import Image, ImageOps
    IMAGE_PROCESSING_SUPPORTED = True
except ImportError:
    IMAGE_PROCESSING_SUPPORTED = False


PROFILE_PIC_SIZE: Tuple[int, int] = (300, 300)
THUMBNAIL_SIZE: Tuple[int, int] = (150, 150)
JPEG_QUALITY = 90
MAX_IMAGE_PIXELS = 50_000_000


@dataclass
class ImageVariants:
    primary: bytes
    thumbnail: Optional[bytes]
    processed: bool


def resize_cover(content: bytes, size: Tuple[int, int], quality: int = JPEG_QUALITY) -> bytes:
    """Crop-to-fill `size` around the center and re-encode as JPEG."""
    with Image.open(io.BytesIO(content)) as img:
        width, height = img.size
        if width * height > MAX_IMAGE_PIXELS:
            raise ValueError(f"Image dimensions too large: {width}x{height}")
        img = ImageOps.exif_transpose(img)
        if img.mode != "RGB":
            img = img.convert("RGB")
        fitted = ImageOps.fit(img, size, method=Image.Resampling.LANCZOS, centering=(0.5, 0.5))
        out = io.BytesIO()
        fitted.save(out, format="JPEG", quality=quality)
        return out.getvalue()


def generate_profile_variants(content: bytes) -> ImageVariants:
    """
    Build the primary and thumbnail images for a profile picture.

    Raises:
        ValueError if Pillow is available but cannot read the image
    """
    if not IMAGE_PROCESSING_SUPPORTED:
        logger.warning("Pillow not available - storing original image without processing")
        return ImageVariants(primary=content, thumbnail=content, processed=False)

    try:
        primary = resize_cover(content, PROFILE_PIC_SIZE)
        thumbnail = resize_cover(content, THUMBNAIL_SIZE)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        logger.error("Error processing image: %s", e)
        raise ValueError("Failed to process image") from e

    return ImageVariants(primary=primary, thumbnail=thumbnail, processed=True)
