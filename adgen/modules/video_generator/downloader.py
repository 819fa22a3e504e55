"""
Video download over HTTP.
"""

import httpx

from adgen.shared.errors import GenerationError
from adgen.shared.logging import get_logger

logger = get_logger("video_generator.downloader")

DOWNLOAD_TIMEOUT = 120.0  # seconds


async def download_video_bytes(url: str, timeout: float = DOWNLOAD_TIMEOUT) -> bytes:
    """
    Download a generated video.

    Args:
        url: Video URL, including any key query parameter
        timeout: Request timeout in seconds

    Returns:
        Video bytes

    Raises:
        GenerationError: If the request fails or returns a non-2xx status
    """
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise GenerationError(f"Video fetch failed: {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise GenerationError(f"Video fetch failed: {type(e).__name__}") from e

    if not response.content:
        raise GenerationError("Video fetch returned no data")

    logger.info("Downloaded video", extra={"size": len(response.content)})
    return response.content
