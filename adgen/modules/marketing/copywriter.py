"""
Marketing copy generation for social platforms.
"""

from typing import Optional

from adgen.modules.providers import CompletionClient, require_client
from adgen.shared.errors import GenerationError
from adgen.shared.json_payload import DecodeFailure, decode_json_payload
from adgen.shared.logging import get_logger
from adgen.shared.models import ImageAnalysis, MarketingContent
from adgen.shared.validation import validate_platform, validate_tone

logger = get_logger("marketing")

COPY_MODEL = "gpt-4o-mini"
DEFAULT_BRAND = "Your Brand"

COPY_PROMPT = """Create marketing content for {name} for {platform} platform with {tone} tone.

Product Details:
- Name: {name}
- Type: {product_type}
- Colors: {colors}
- Style: {style}
- Mood: {mood}
- Key Features: {features}

Brand: {brand}

Create:
1. A catchy title (max 50 characters)
2. Engaging opening line (max 100 characters)
3. Main content (max 200 characters for social media)
4. 5-8 relevant hashtags
5. Call-to-action (max 30 characters)

Return ONLY valid JSON without any markdown formatting or code blocks:
{{
  "title": "Catchy Title",
  "engagingLine": "Engaging opening line",
  "content": "Main marketing content",
  "hashtags": ["#hashtag1", "#hashtag2", "#hashtag3"],
  "callToAction": "Shop Now"
}}"""


def build_copy_prompt(
    analysis: ImageAnalysis,
    platform: str,
    tone: str,
    brand_name: Optional[str] = None
) -> str:
    return COPY_PROMPT.format(
        name=analysis.display_name,
        platform=platform,
        tone=tone,
        product_type=analysis.product_type,
        colors=", ".join(analysis.colors) or "various",
        style=analysis.style or "modern",
        mood=analysis.mood or "appealing",
        features=", ".join(analysis.key_features) or "quality",
        brand=brand_name or DEFAULT_BRAND,
    )


async def generate_marketing_content(
    client: Optional[CompletionClient],
    analysis: ImageAnalysis,
    platform: str,
    tone: str,
    brand_name: Optional[str] = None,
    model: str = COPY_MODEL
) -> MarketingContent:
    """
    Write short social copy for the analyzed product.

    Args:
        client: Completion client, None when OPENAI_API_KEY is not configured
        analysis: Analysis of the product image
        platform: Target social platform
        tone: Copy tone
        brand_name: Brand to mention; a generic placeholder when omitted
        model: Chat model

    Returns:
        MarketingContent

    Raises:
        ValidationError: If the platform or tone is not supported
        ConfigError: If no completion client is configured
        GenerationError: If the answer cannot be parsed
    """
    validate_platform(platform)
    validate_tone(tone)
    client = require_client(client, "OPENAI_API_KEY", "marketing copy")

    result = await client.complete(
        [{"role": "user", "content": build_copy_prompt(analysis, platform, tone, brand_name)}],
        model=model,
        max_tokens=500,
    )

    decoded = decode_json_payload(result.text, MarketingContent)
    if isinstance(decoded, DecodeFailure):
        logger.error(
            "Could not parse marketing copy",
            extra={"reason": decoded.reason, "response_preview": decoded.raw_text[:200]}
        )
        raise GenerationError("Failed to generate marketing content. Please try again.")

    logger.info("Generated marketing copy", extra={"platform": platform, "tone": tone})
    return decoded.value
