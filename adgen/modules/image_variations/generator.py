"""
Image variation generation.

Each variation prompt gets its own streamed Gemini request. The first inline
image in the stream wins; the rest of the stream is not read. Prompts run as
independent tasks, so one failure never cancels the others.
"""

import asyncio
import base64
import mimetypes
import re
import time
from contextlib import aclosing
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from adgen.modules.media_encoder import EncodedImage, decode_inline_data
from adgen.modules.persistence import PersistenceAdapter
from adgen.modules.providers import GenAIClient, InlineImage, require_client
from adgen.shared.errors import GenerationError, PersistenceError, RetryableError
from adgen.shared.logging import get_logger
from adgen.shared.models import (
    Degraded,
    Failed,
    ImageVariation,
    Ok,
    Outcome,
    VariationFailure,
    VariationPrompt,
)

logger = get_logger("image_variations")

IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_CONCURRENCY = 3


@dataclass
class VariationBatch:
    """Per-prompt outcomes of one fan-out, in prompt order."""

    results: List[Tuple[VariationPrompt, Outcome]] = field(default_factory=list)

    @property
    def variations(self) -> List[ImageVariation]:
        return [o.value for _, o in self.results if isinstance(o, (Ok, Degraded))]

    @property
    def degraded(self) -> List[Degraded]:
        return [o for _, o in self.results if isinstance(o, Degraded)]

    @property
    def failures(self) -> List[VariationFailure]:
        return [
            VariationFailure(style_name=p.name, reason=o.reason)
            for p, o in self.results
            if isinstance(o, Failed)
        ]

    @property
    def succeeded(self) -> bool:
        """True when at least one variation was produced."""
        return bool(self.variations)


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_") or "style"


def _extension(mime_type: str) -> str:
    ext = mimetypes.guess_extension(mime_type) or ".png"
    return "jpg" if ext in (".jpe", ".jpeg") else ext.lstrip(".")


async def _first_inline_image(
    genai: GenAIClient,
    prompt: VariationPrompt,
    image: EncodedImage,
    model: str
) -> Optional[InlineImage]:
    stream = genai.stream_image_parts(
        model=model,
        prompt=prompt.prompt_text,
        image_bytes=image.decode(),
        mime_type=image.mime_type,
    )
    async with aclosing(stream) as parts:
        async for part in parts:
            if part.data:
                return part
    return None


async def generate_variation(
    genai: GenAIClient,
    prompt: VariationPrompt,
    image: EncodedImage,
    user_id: Optional[str] = None,
    persistence: Optional[PersistenceAdapter] = None,
    original_image_url: Optional[str] = None,
    model: str = IMAGE_MODEL
) -> Outcome:
    """
    Generate and optionally persist one image variation.

    Args:
        genai: GenAI client
        prompt: Creative direction to render
        image: Original upload, sent alongside the prompt
        user_id: Owner of the stored artifact; None keeps it in memory only
        persistence: Adapter used when user_id is set
        original_image_url: Stored URL of the original upload
        model: Gemini image model

    Returns:
        Ok with the (stored) variation, Degraded when storage failed but the
        image exists, Failed when no image was produced
    """
    try:
        inline = await _first_inline_image(genai, prompt, image, model)
        if inline is None:
            return Failed(reason=f"No image data returned for {prompt.name}")
        data = decode_inline_data(inline.data)
    except (GenerationError, RetryableError) as e:
        logger.error(
            f"Failed to generate {prompt.name}",
            extra={"style": prompt.name, "error": str(e), "error_type": type(e).__name__}
        )
        return Failed(reason=str(e), error_type=type(e).__name__)

    variation = ImageVariation(
        style_name=prompt.name,
        description=prompt.description,
        artifact_url=f"data:{inline.mime_type};base64,{base64.b64encode(data).decode('ascii')}",
        prompt_used=prompt.prompt_text,
        original_image_url=original_image_url,
    )

    if not user_id or persistence is None:
        return Ok(variation)

    file_name = f"variation_{_slug(prompt.name)}_{int(time.time() * 1000)}.{_extension(inline.mime_type)}"
    try:
        url = await persistence.upload_image(user_id, file_name, data, inline.mime_type)
    except PersistenceError as e:
        logger.warning(
            "Storage upload failed, keeping variation in memory",
            extra={"style": prompt.name, "error": str(e)}
        )
        return Degraded(variation, reason=f"Could not save {prompt.name}: {e.message}")

    stored = variation.model_copy(update={"artifact_url": url})
    try:
        recorded = await persistence.record_image_variation(user_id, stored)
    except PersistenceError as e:
        logger.warning(
            "Variation stored but not recorded",
            extra={"style": prompt.name, "error": str(e)}
        )
        return Degraded(stored, reason=f"Could not record {prompt.name}: {e.message}")

    return Ok(recorded)


async def generate_variations(
    genai: Optional[GenAIClient],
    prompts: List[VariationPrompt],
    image: EncodedImage,
    user_id: Optional[str] = None,
    persistence: Optional[PersistenceAdapter] = None,
    original_image_url: Optional[str] = None,
    concurrency: int = DEFAULT_CONCURRENCY,
    model: str = IMAGE_MODEL
) -> VariationBatch:
    """
    Generate every prompt as an independent task.

    Raises:
        ConfigError: If no GenAI client is configured
    """
    genai = require_client(genai, "GOOGLE_API_KEY", "image generation")
    semaphore = asyncio.Semaphore(concurrency)

    async def run(prompt: VariationPrompt) -> Outcome:
        async with semaphore:
            try:
                return await generate_variation(
                    genai,
                    prompt,
                    image,
                    user_id=user_id,
                    persistence=persistence,
                    original_image_url=original_image_url,
                    model=model,
                )
            except Exception as e:
                logger.exception(f"Unexpected error generating {prompt.name}", extra={"style": prompt.name})
                return Failed(reason=str(e) or type(e).__name__, error_type=type(e).__name__)

    outcomes = await asyncio.gather(*(run(p) for p in prompts))
    batch = VariationBatch(results=list(zip(prompts, outcomes)))

    logger.info(
        "Variation fan-out finished",
        extra={
            "requested": len(prompts),
            "produced": len(batch.variations),
            "degraded": len(batch.degraded),
            "failed": len(batch.failures),
        }
    )
    return batch
