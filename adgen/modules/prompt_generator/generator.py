"""
Prompt generation.

Asks the language model for creative directions and validates the answer
against the expected schema. Nothing is padded in when the answer is short.
"""

import random
from typing import List, Optional

from adgen.modules.media_encoder import EncodedImage
from adgen.modules.providers import (
    CompletionClient,
    image_message_part,
    require_client,
    text_message_part,
)
from adgen.shared.errors import GenerationError
from adgen.shared.json_payload import DecodeFailure, decode_json_payload
from adgen.shared.logging import get_logger
from adgen.shared.models import ImageAnalysis, VariationPrompt, VideoPrompt

from .templates import (
    VARIATION_SYSTEM_PROMPT,
    VARIATION_USER_PROMPT,
    VIDEO_BASE_TEMPLATES,
    VIDEO_PROMPTS_PROMPT,
)

logger = get_logger("prompt_generator")

PROMPT_MODEL = "gpt-4o-mini"
VIDEO_PROMPT_COUNT = 4


def _require_count(items: list, count: int, kind: str) -> list:
    if len(items) < count:
        raise GenerationError(
            f"Expected {count} {kind}, model returned {len(items)}. Please try again."
        )
    if len(items) > count:
        logger.info(f"Truncating {kind}", extra={"returned": len(items), "expected": count})
    return items[:count]


async def generate_variation_prompts(
    client: Optional[CompletionClient],
    analysis: ImageAnalysis,
    image: Optional[EncodedImage] = None,
    count: int = 3,
    model: str = PROMPT_MODEL
) -> List[VariationPrompt]:
    """
    Generate exactly ``count`` image variation prompts.

    Args:
        client: Completion client, None when OPENAI_API_KEY is not configured
        analysis: Analysis of the uploaded product
        image: Original upload, attached so the model can see the product
        count: Number of prompts required
        model: Chat model

    Returns:
        ``count`` VariationPrompts in the order the model returned them

    Raises:
        ConfigError: If no completion client is configured
        GenerationError: If the answer cannot be parsed or holds fewer than ``count`` prompts
    """
    client = require_client(client, "OPENAI_API_KEY", "prompt generation")

    user_content = [
        text_message_part(
            VARIATION_USER_PROMPT.format(
                count=count,
                product=analysis.product_type or "a product",
                style=analysis.style or "unknown",
                mood=analysis.mood or "unknown",
            )
        )
    ]
    if image is not None:
        user_content.append(image_message_part(image.data_url()))

    messages = [
        {"role": "system", "content": VARIATION_SYSTEM_PROMPT.format(count=count)},
        {"role": "user", "content": user_content},
    ]

    result = await client.complete(messages, model=model, max_tokens=1000, temperature=0.8)

    decoded = decode_json_payload(result.text, List[VariationPrompt])
    if isinstance(decoded, DecodeFailure):
        logger.error(
            "Could not parse variation prompts",
            extra={"reason": decoded.reason, "response_preview": decoded.raw_text[:200]}
        )
        raise GenerationError(f"Failed to generate image variation prompts ({decoded.reason}). Please try again.")

    prompts = _require_count(decoded.value, count, "variation prompts")
    logger.info("Generated variation prompts", extra={"count": len(prompts)})
    return prompts


async def generate_video_prompts(
    client: Optional[CompletionClient],
    analysis: ImageAnalysis,
    count: int = VIDEO_PROMPT_COUNT,
    model: str = PROMPT_MODEL
) -> List[VideoPrompt]:
    """
    Generate ``count`` storytelling video prompts for the product.

    Raises:
        ConfigError: If no completion client is configured
        GenerationError: If the answer cannot be parsed or holds fewer than ``count`` prompts
    """
    client = require_client(client, "OPENAI_API_KEY", "video prompt generation")

    prompt = VIDEO_PROMPTS_PROMPT.format(
        count=count,
        product=analysis.display_name,
        product_type=analysis.product_type,
    )
    result = await client.complete(
        [{"role": "user", "content": prompt}],
        model=model,
        max_tokens=3000,
        temperature=0.9,
    )

    decoded = decode_json_payload(result.text, List[VideoPrompt])
    if isinstance(decoded, DecodeFailure):
        logger.error(
            "Could not parse video prompts",
            extra={"reason": decoded.reason, "response_preview": decoded.raw_text[:200]}
        )
        raise GenerationError("Failed to generate video prompts. Please try again.")

    return _require_count(decoded.value, count, "video prompts")


def build_video_prompt(
    analysis: ImageAnalysis,
    selected_style: Optional[str] = None,
    rng: Optional[random.Random] = None
) -> str:
    """
    Build the prompt for the product video from a fixed set of templates.

    Args:
        analysis: Analysis of the uploaded product
        selected_style: Style name to prefix, if the user picked one
        rng: Random source used to pick the template

    Returns:
        Non-empty video prompt
    """
    rng = rng or random.Random()
    prompt = rng.choice(VIDEO_BASE_TEMPLATES).format(product=analysis.product_type)

    if selected_style:
        prompt = f"{selected_style}: {prompt}"
    if analysis.mood:
        prompt += f" with {analysis.mood} atmosphere"
    return prompt
