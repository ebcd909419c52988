"""Image processing utilities."""

import base64
import binascii
from io import BytesIO
from typing import Tuple
from PIL import Image, UnidentifiedImageError

from .logger import get_logger
from .errors import EncodingError, ImageDecodeError

logger = get_logger(__name__)

FORMAT_MIME_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
    "HEIF": "image/heif",
}


def bytes_to_base64(image_bytes: bytes) -> str:
    """Convert image bytes to a base64 string."""
    return base64.b64encode(image_bytes).decode('utf-8')


def base64_to_bytes(base64_string: str) -> bytes:
    """
    Convert a base64 string to bytes.

    Args:
        base64_string: Base64 encoded image, optionally a data URL

    Returns:
        Image bytes

    Raises:
        ImageDecodeError: If the string is not valid base64
    """
    if base64_string.startswith("data:") and "," in base64_string:
        base64_string = base64_string.split(",", 1)[1]

    try:
        return base64.b64decode(base64_string, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Invalid base64 image payload: {e}")


def encode_jpeg(image_bytes: bytes, quality: int) -> bytes:
    """
    Re-encode an image as JPEG at a fixed quality.

    Args:
        image_bytes: Raw image bytes in any format Pillow reads
        quality: JPEG quality (1-95)

    Returns:
        JPEG bytes

    Raises:
        EncodingError: If the image is empty or cannot be read/encoded
    """
    if not image_bytes:
        raise EncodingError("Image is empty")

    try:
        image = Image.open(BytesIO(image_bytes))
        image.load()

        # JPEG has no alpha channel
        if image.mode not in ('RGB', 'L'):
            image = image.convert('RGB')

        buffer = BytesIO()
        image.save(buffer, format='JPEG', quality=quality)
        return buffer.getvalue()

    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise EncodingError(f"Failed to encode image as JPEG: {e}")


def decode_image(image_bytes: bytes) -> Tuple[str, int, int]:
    """
    Check that bytes hold a readable image.

    Args:
        image_bytes: Raw image bytes

    Returns:
        Tuple of (mime_type, width, height)

    Raises:
        ImageDecodeError: If the bytes are not a valid image
    """
    if not image_bytes:
        raise ImageDecodeError("Image payload is empty")

    try:
        image = Image.open(BytesIO(image_bytes))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Failed to decode image: {e}")

    mime_type = FORMAT_MIME_TYPES.get(image.format or "", "application/octet-stream")
    width, height = image.size
    return mime_type, width, height
