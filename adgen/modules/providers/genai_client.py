"""
Google GenAI client.

Streams Gemini image generations and runs Veo video jobs.
"""

from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from adgen.shared.errors import ConfigError, GenerationError, RateLimitError, RetryableError
from adgen.shared.logging import get_logger

logger = get_logger("providers.genai_client")

REQUEST_TIMEOUT = 120  # seconds


@dataclass(frozen=True)
class InlineImage:
    """Inline image part of a streamed response. ``data`` is bytes or base64 text."""

    data: Any
    mime_type: str = "image/png"


@dataclass(frozen=True)
class VideoJob:
    """Snapshot of a long-running video operation."""

    operation: Any
    done: bool = False
    video_uri: Optional[str] = None
    error: Optional[str] = None


def _map_api_error(e: Exception, action: str) -> Exception:
    if isinstance(e, httpx.HTTPError):
        return RetryableError(f"Google GenAI unreachable during {action}: {type(e).__name__}")
    code = getattr(e, "code", None)
    if code == 429:
        return RateLimitError(f"Google GenAI rate limit during {action}: {str(e)}")
    return GenerationError(f"Google GenAI error during {action}: {str(e)}")


def _job_from_operation(operation: Any) -> VideoJob:
    done = bool(getattr(operation, "done", False))
    error = getattr(operation, "error", None)
    video_uri = None

    response = getattr(operation, "response", None)
    generated = getattr(response, "generated_videos", None) or []
    if generated:
        video = getattr(generated[0], "video", None)
        video_uri = getattr(video, "uri", None)

    return VideoJob(
        operation=operation,
        done=done,
        video_uri=video_uri,
        error=str(error) if error else None,
    )


class GenAIClient:
    """Async wrapper over google-genai for image and video generation."""

    def __init__(
        self,
        api_key: Optional[str],
        timeout: int = REQUEST_TIMEOUT,
        client: Optional[genai.Client] = None
    ):
        """
        Initialize the GenAI client.

        Args:
            api_key: Google API key
            timeout: HTTP request timeout in seconds
            client: Pre-built genai.Client (tests)

        Raises:
            ConfigError: If the API key is missing
        """
        if not api_key:
            raise ConfigError("GOOGLE_API_KEY is required for image and video generation")
        self.api_key = api_key
        self._client = client or genai.Client(
            api_key=api_key,
            http_options={"timeout": timeout * 1000}  # milliseconds
        )

    async def stream_image_parts(
        self,
        model: str,
        prompt: str,
        image_bytes: Optional[bytes] = None,
        mime_type: str = "image/png"
    ) -> AsyncIterator[InlineImage]:
        """
        Stream an image generation and yield every inline image part.

        The caller decides how many parts to consume; breaking out of the loop
        stops reading the stream.

        Raises:
            RateLimitError: If the provider rate limits the request
            RetryableError: If the provider cannot be reached
            GenerationError: On any other provider error
        """
        contents = [prompt]
        if image_bytes:
            contents.append(types.Part.from_bytes(data=image_bytes, mime_type=mime_type))

        try:
            stream = await self._client.aio.models.generate_content_stream(
                model=model,
                contents=contents,
                config=types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"]),
            )
            async for chunk in stream:
                candidates = getattr(chunk, "candidates", None) or []
                if not candidates or candidates[0].content is None:
                    continue
                for part in candidates[0].content.parts or []:
                    inline = getattr(part, "inline_data", None)
                    if inline is not None:
                        yield InlineImage(
                            data=inline.data,
                            mime_type=inline.mime_type or "image/png",
                        )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            raise _map_api_error(e, "image generation") from e

    async def start_video_job(
        self,
        model: str,
        prompt: str,
        image_bytes: Optional[bytes] = None,
        mime_type: Optional[str] = None,
        resolution: str = "720p",
        aspect_ratio: str = "16:9"
    ) -> VideoJob:
        """
        Submit a video generation job.

        Raises:
            RateLimitError: If the provider rate limits the request
            RetryableError: If the provider cannot be reached
            GenerationError: On any other provider error
        """
        image = None
        if image_bytes:
            image = types.Image(image_bytes=image_bytes, mime_type=mime_type or "image/png")

        try:
            operation = await self._client.aio.models.generate_videos(
                model=model,
                prompt=prompt,
                image=image,
                config=types.GenerateVideosConfig(
                    number_of_videos=1,
                    resolution=resolution,
                    aspect_ratio=aspect_ratio,
                ),
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            raise _map_api_error(e, "video submission") from e

        logger.info(
            "Submitted video job",
            extra={"model": model, "image_to_video": image is not None}
        )
        return _job_from_operation(operation)

    async def poll_video_job(self, job: VideoJob) -> VideoJob:
        """
        Refresh a video job.

        Raises:
            GenerationError: On provider errors
        """
        try:
            operation = await self._client.aio.operations.get(job.operation)
        except (genai_errors.APIError, httpx.HTTPError) as e:
            raise _map_api_error(e, "video polling") from e
        return _job_from_operation(operation)

    def video_download_url(self, uri: str) -> str:
        """Append the API key to a generated video URI."""
        separator = "&" if "?" in uri else "?"
        return f"{uri}{separator}key={self.api_key}"
