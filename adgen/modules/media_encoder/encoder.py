"""
Media encoding.

Validates an uploaded product image and converts it to base64 so it can be
embedded in provider requests.
"""

import base64
import io
import mimetypes
from dataclasses import dataclass
from typing import Optional

from PIL import Image, UnidentifiedImageError

from adgen.shared.errors import GenerationError, ValidationError
from adgen.shared.validation import validate_file_size

DEFAULT_MAX_SIZE_BYTES = 10 * 1024 * 1024  # 10 MiB

# Pillow format name -> MIME type accepted by the image and video providers
SUPPORTED_FORMATS = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}

READ_ERROR_MESSAGE = "Could not read the uploaded image. Please upload a valid PNG, JPEG, WEBP or GIF file."


@dataclass(frozen=True)
class EncodedImage:
    """Base64 transport encoding of an uploaded image."""

    data: str
    mime_type: str
    size_bytes: int
    filename: Optional[str] = None

    def decode(self) -> bytes:
        """Return the original image bytes."""
        return base64.b64decode(self.data)

    def data_url(self) -> str:
        """Return the image as a data: URL."""
        return f"data:{self.mime_type};base64,{self.data}"

    @property
    def extension(self) -> str:
        """File extension matching the MIME type, without the dot."""
        ext = mimetypes.guess_extension(self.mime_type) or ".png"
        return "jpg" if ext in (".jpe", ".jpeg") else ext.lstrip(".")


def _detect_format(data: bytes) -> str:
    """
    Identify the image format with Pillow.

    Raises:
        ValidationError: If the bytes are not a readable image
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = image.format
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise ValidationError(READ_ERROR_MESSAGE) from e

    if image_format not in SUPPORTED_FORMATS:
        raise ValidationError(
            f"Unsupported image format ({image_format}). Supported formats: PNG, JPEG, WEBP, GIF"
        )
    return image_format


def encode_image(
    data: bytes,
    mime_type: Optional[str] = None,
    filename: Optional[str] = None,
    max_size_bytes: int = DEFAULT_MAX_SIZE_BYTES
) -> EncodedImage:
    """
    Validate and base64-encode an uploaded image.

    The size limit is checked before the image is read.

    Args:
        data: Raw upload bytes
        mime_type: Content type reported by the client; must be image/* when given
        filename: Original filename, kept for storage paths
        max_size_bytes: Upload limit

    Returns:
        EncodedImage whose decoded length equals len(data)

    Raises:
        ValidationError: If the file is empty, too large or unreadable
    """
    if data is None:
        raise ValidationError("Image file is required")

    validate_file_size(len(data), max_size_bytes)

    if mime_type and not mime_type.startswith("image/"):
        raise ValidationError(f"Uploaded file must be an image (received {mime_type})")

    image_format = _detect_format(data)
    detected_mime = SUPPORTED_FORMATS[image_format]

    return EncodedImage(
        data=base64.b64encode(data).decode("ascii"),
        mime_type=detected_mime,
        size_bytes=len(data),
        filename=filename,
    )


def decode_inline_data(data) -> bytes:
    """
    Decode inline image data returned by a provider.

    SDKs return either raw bytes or base64 text depending on transport.

    Raises:
        GenerationError: If text data is not valid base64
    """
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    try:
        return base64.b64decode(data, validate=True)
    except (ValueError, TypeError) as e:
        raise GenerationError("Provider returned malformed base64 image data") from e
