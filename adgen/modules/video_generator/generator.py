"""
Video generation.

Submits a Veo job, polls it on a fixed interval up to a ceiling, downloads the
result and stores it for the user. Every failure after submission yields the
fallback sample video instead, so the caller always has something playable.
"""

import asyncio
import base64
import random
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from adgen.modules.media_encoder import EncodedImage
from adgen.modules.persistence import PersistenceAdapter
from adgen.modules.prompt_generator import build_video_prompt
from adgen.modules.providers import GenAIClient, VideoJob, require_client
from adgen.shared.errors import GenerationError, PersistenceError, RetryableError, VideoTimeoutError
from adgen.shared.logging import get_logger
from adgen.shared.models import Degraded, ImageAnalysis, Ok, Outcome, VideoArtifact

from .config import FALLBACK_PROMPT, VideoOptions
from .downloader import download_video_bytes

logger = get_logger("video_generator")

Sleep = Callable[[float], Awaitable[None]]
Downloader = Callable[[str], Awaitable[bytes]]


@dataclass(frozen=True)
class VideoRequest:
    """One text-to-video or image-to-video job."""

    prompt: str
    image: Optional[EncodedImage] = None
    source_image_url: Optional[str] = None
    user_id: Optional[str] = None
    title: Optional[str] = None

    @property
    def generation_type(self) -> str:
        return "image-to-video" if self.image is not None else "text-to-video"


async def _wait_for_job(
    genai: GenAIClient,
    job: VideoJob,
    options: VideoOptions,
    sleep: Sleep
) -> VideoJob:
    attempts = 0
    while not job.done and attempts < options.max_poll_attempts:
        logger.debug(
            "Waiting for video job",
            extra={"attempt": attempts + 1, "max_attempts": options.max_poll_attempts}
        )
        await sleep(options.poll_interval_seconds)
        job = await genai.poll_video_job(job)
        attempts += 1

    if not job.done:
        raise VideoTimeoutError(
            f"Video generation timeout after {attempts} polls "
            f"({attempts * options.poll_interval_seconds:.0f}s)"
        )
    return job


async def _render_video(
    genai: GenAIClient,
    request: VideoRequest,
    options: VideoOptions,
    sleep: Sleep,
    downloader: Downloader
) -> bytes:
    job = await genai.start_video_job(
        model=options.model,
        prompt=request.prompt,
        image_bytes=request.image.decode() if request.image else None,
        mime_type=request.image.mime_type if request.image else None,
        resolution=options.resolution,
        aspect_ratio=options.aspect_ratio,
    )
    job = await _wait_for_job(genai, job, options, sleep)

    if job.error:
        raise GenerationError(f"Video generation failed: {job.error}")
    if not job.video_uri:
        raise GenerationError("No video generated")

    return await downloader(genai.video_download_url(job.video_uri))


async def generate_video(
    genai: Optional[GenAIClient],
    request: VideoRequest,
    persistence: Optional[PersistenceAdapter] = None,
    options: Optional[VideoOptions] = None,
    sleep: Optional[Sleep] = None,
    downloader: Optional[Downloader] = None
) -> Outcome:
    """
    Generate a video and store it for the user.

    Args:
        genai: GenAI client, None when GOOGLE_API_KEY is not configured
        request: Prompt, optional seed image and owner
        persistence: Adapter used when request.user_id is set
        options: Model, polling and fallback parameters
        sleep: Awaitable used between polls, asyncio.sleep by default
        downloader: Fetches the finished video, download_video_bytes by default

    Returns:
        Ok with the stored (or in-memory) artifact, or Degraded with either the
        fallback artifact or an unsaved artifact, plus the reason

    Raises:
        ConfigError: If no GenAI client is configured
    """
    genai = require_client(genai, "GOOGLE_API_KEY", "video generation")
    options = options or VideoOptions()

    source_image_url = request.source_image_url
    if request.image is not None and not source_image_url:
        source_image_url = request.image.data_url()
    title = request.title or f"Generated Video {int(time.time() * 1000)}"

    def fallback(e: Exception) -> Degraded:
        artifact = VideoArtifact(
            title=title,
            prompt=FALLBACK_PROMPT,
            video_url=options.fallback_video_url,
            generation_type=request.generation_type,
            source_image_url=source_image_url,
            status="failed",
        )
        return Degraded(artifact, reason=str(e) or type(e).__name__)

    try:
        video_bytes = await _render_video(
            genai,
            request,
            options,
            sleep or asyncio.sleep,
            downloader or download_video_bytes,
        )
    except (GenerationError, RetryableError) as e:
        logger.warning(
            "Video generation failed, using fallback video",
            extra={"error": str(e), "error_type": type(e).__name__}
        )
        return fallback(e)
    except Exception as e:
        logger.exception(
            "Unexpected error generating video, using fallback video",
            extra={"error_type": type(e).__name__}
        )
        return fallback(e)

    artifact = VideoArtifact(
        title=title,
        prompt=request.prompt,
        video_url=f"data:video/mp4;base64,{base64.b64encode(video_bytes).decode('ascii')}",
        generation_type=request.generation_type,
        source_image_url=source_image_url,
    )

    if not request.user_id or persistence is None:
        return Ok(artifact)

    try:
        url = await persistence.upload_video(
            request.user_id, f"video_{int(time.time() * 1000)}.mp4", video_bytes
        )
    except PersistenceError as e:
        logger.warning("Video could not be stored", extra={"error": str(e)})
        return Degraded(artifact, reason=f"Video generated but not saved: {e.message}")

    stored = artifact.model_copy(update={"video_url": url})
    try:
        recorded = await persistence.record_video(request.user_id, stored)
    except PersistenceError as e:
        logger.warning("Video stored but not recorded", extra={"error": str(e)})
        return Degraded(stored, reason=f"Video saved but not recorded: {e.message}")

    logger.info("Video generated", extra={"video_id": recorded.id, "generation_type": recorded.generation_type})
    return Ok(recorded)


async def generate_product_video(
    genai: Optional[GenAIClient],
    image: EncodedImage,
    analysis: ImageAnalysis,
    selected_style: Optional[str] = None,
    user_id: Optional[str] = None,
    source_image_url: Optional[str] = None,
    persistence: Optional[PersistenceAdapter] = None,
    options: Optional[VideoOptions] = None,
    rng: Optional[random.Random] = None,
    sleep: Optional[Sleep] = None,
    downloader: Optional[Downloader] = None
) -> Outcome:
    """
    Generate the product video that accompanies a set of variations.

    The prompt is built from the analysis and the selected style; the upload
    seeds the video.
    """
    prompt = build_video_prompt(analysis, selected_style, rng=rng)
    logger.info("Video prompt built", extra={"prompt": prompt})

    request = VideoRequest(
        prompt=prompt,
        image=image,
        source_image_url=source_image_url,
        user_id=user_id,
        title=f"{analysis.display_name} video",
    )
    return await generate_video(
        genai,
        request,
        persistence=persistence,
        options=options,
        sleep=sleep,
        downloader=downloader,
    )
