"""
Multipart upload handling.
"""

from fastapi import UploadFile

from adgen.modules.media_encoder import EncodedImage, encode_image
from adgen.shared.validation import validate_file_size


async def read_image_upload(upload: UploadFile, max_size_bytes: int) -> EncodedImage:
    """
    Read and encode an uploaded image.

    The declared size is checked before the body is read.

    Raises:
        ValidationError: If the upload is empty, too large or not a readable image
    """
    if upload.size is not None:
        validate_file_size(upload.size, max_size_bytes)

    data = await upload.read()
    return encode_image(
        data,
        mime_type=upload.content_type,
        filename=upload.filename,
        max_size_bytes=max_size_bytes,
    )
