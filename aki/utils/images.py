"""Image processing utilities."""

import base64
import binascii
from io import BytesIO
from PIL import Image, UnidentifiedImageError

from .logger import get_logger
from .errors import ImageConversionError

logger = get_logger(__name__)

JPEG_DATA_URI_PREFIX = "data:image/jpeg;base64,"

# Everything Pillow or base64 raise on bad input, including oversized images
DECODE_ERRORS = (binascii.Error, ValueError, UnidentifiedImageError, OSError, Image.DecompressionBombError)


def base64_to_bytes(base64_string: str) -> bytes:
    """
    Convert base64 string to bytes.

    Args:
        base64_string: Base64 encoded data, optionally a data URI

    Returns:
        Decoded bytes

    Raises:
        binascii.Error: If the payload is not valid base64
    """
    # Remove data URL prefix if present
    if base64_string.startswith("data:") and "," in base64_string:
        base64_string = base64_string.split(",", 1)[1]

    return base64.b64decode(base64_string, validate=True)


def bytes_to_base64(image_bytes: bytes) -> str:
    """Convert raw bytes to a base64 string."""
    return base64.b64encode(image_bytes).decode('utf-8')


def decode_image(image_bytes: bytes) -> Image.Image:
    """
    Decode raw bytes into a fully loaded raster image.

    Raises:
        UnidentifiedImageError, OSError: If the bytes are not a readable image
    """
    image = Image.open(BytesIO(image_bytes))
    image.load()
    return image


def decode_base64_image(payload: str) -> Image.Image:
    """
    Decode a base64 string or data URI into an image.

    Raises:
        ValueError: If the payload is not base64 or not an image
    """
    try:
        return decode_image(base64_to_bytes(payload))
    except DECODE_ERRORS as e:
        raise ValueError(f"Not a decodable image: {e}")


def resize_if_needed(image: Image.Image, max_dimension: int = 2048) -> Image.Image:
    """
    Downscale an image so both sides fit within max_dimension.

    Images already within bounds are returned unchanged. The aspect ratio is
    preserved. If resizing fails the original image is returned.

    Args:
        image: Source image
        max_dimension: Maximum width and height in pixels

    Returns:
        Resized image (or original if no resize needed or resize failed)
    """
    try:
        width, height = image.size

        if width <= max_dimension and height <= max_dimension:
            return image

        ratio = min(max_dimension / width, max_dimension / height)
        new_width = max(1, min(max_dimension, round(width * ratio)))
        new_height = max(1, min(max_dimension, round(height * ratio)))

        logger.info(
            f"Resizing image from {width}x{height} to {new_width}x{new_height}",
            extra={
                "original_width": width,
                "original_height": height,
                "new_width": new_width,
                "new_height": new_height,
            }
        )

        return image.resize((new_width, new_height), Image.LANCZOS)

    except Exception as e:
        logger.warning(f"Failed to resize image: {e}. Using original.")
        return image


def encode_jpeg(image: Image.Image, quality: int = 80) -> bytes:
    """
    Encode an image as JPEG bytes.

    Raises:
        ImageConversionError: If encoding fails
    """
    try:
        # JPEG has no alpha channel or palette
        if image.mode not in ('RGB', 'L'):
            image = image.convert('RGB')

        buffer = BytesIO()
        image.save(buffer, format='JPEG', quality=quality)
        return buffer.getvalue()

    except Exception as e:
        logger.error(
            "JPEG encoding failed",
            extra={"mode": getattr(image, "mode", None), "error": str(e)}
        )
        raise ImageConversionError(f"Failed to encode image as JPEG: {e}")


def to_jpeg_data_uri(image: Image.Image, quality: int = 80) -> str:
    """
    Encode an image as a base64 JPEG data URI.

    Raises:
        ImageConversionError: If encoding fails
    """
    return JPEG_DATA_URI_PREFIX + bytes_to_base64(encode_jpeg(image, quality))
