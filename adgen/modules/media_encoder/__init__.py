"""
Media Encoder module public API.
"""

from .encoder import (
    DEFAULT_MAX_SIZE_BYTES,
    EncodedImage,
    decode_inline_data,
    encode_image,
)

__all__ = ["DEFAULT_MAX_SIZE_BYTES", "EncodedImage", "decode_inline_data", "encode_image"]
