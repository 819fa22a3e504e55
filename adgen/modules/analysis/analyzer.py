"""
Product image analysis.

One multimodal completion identifies the product and describes its look.
"""

from typing import Optional

from adgen.modules.media_encoder import EncodedImage
from adgen.modules.providers import (
    CompletionClient,
    image_message_part,
    require_client,
    text_message_part,
)
from adgen.shared.errors import GenerationError
from adgen.shared.json_payload import Decoded, decode_json_payload
from adgen.shared.logging import get_logger
from adgen.shared.models import ImageAnalysis

logger = get_logger("analysis")

ANALYSIS_MODEL = "gpt-4o-mini"
ANALYSIS_TEMPERATURE = 0.3
ANALYSIS_MAX_TOKENS = 500

SYSTEM_PROMPT = (
    "You are a product identification expert. Look at the image and identify "
    "the exact product name and type."
)

USER_INSTRUCTION = (
    "Analyze this product image carefully. Identify what type of product this is "
    "(food, drink, tech, fashion, etc.), describe the main colors you see, the "
    "style/aesthetic, the mood/feeling it conveys, and the key features or "
    "characteristics. Be very specific - if it's food, mention what kind of food. "
    "If it's a burger, say it's a burger. Be detailed and accurate.\n\n"
    "Return ONLY valid JSON: {\"productName\": \"exact product name\", "
    "\"productType\": \"product category\", \"colors\": [\"color1\", \"color2\"], "
    "\"style\": \"style description\", \"mood\": \"mood description\", "
    "\"keyFeatures\": [\"feature1\", \"feature2\"]}"
)


def parse_analysis(text: str) -> ImageAnalysis:
    """
    Turn the model answer into an ImageAnalysis.

    A JSON object is validated as the analysis. Any other non-empty answer is
    kept as free text: its first line becomes the product type.

    Raises:
        GenerationError: If the answer is empty or a JSON object of the wrong shape
    """
    text = (text or "").strip()
    if not text:
        raise GenerationError("Image analysis returned an empty response")

    result = decode_json_payload(text, ImageAnalysis)
    if isinstance(result, Decoded):
        return result.value.model_copy(update={"raw_text": text})

    if result.reason.startswith("schema mismatch"):
        raise GenerationError(f"Image analysis returned malformed JSON: {result.reason}")

    logger.info("Analysis answer is free text", extra={"reason": result.reason})
    first_line = next(line.strip() for line in text.splitlines() if line.strip())
    return ImageAnalysis(product_type=first_line, raw_text=text)


async def analyze_image(
    client: Optional[CompletionClient],
    image: EncodedImage,
    model: str = ANALYSIS_MODEL
) -> ImageAnalysis:
    """
    Describe the product shown in an uploaded image.

    Args:
        client: Completion client, None when OPENAI_API_KEY is not configured
        image: Encoded upload
        model: Chat model

    Returns:
        ImageAnalysis for the product

    Raises:
        ConfigError: If no completion client is configured
        GenerationError: If the provider fails or returns nothing
    """
    client = require_client(client, "OPENAI_API_KEY", "image analysis")

    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": [
                text_message_part(USER_INSTRUCTION),
                image_message_part(image.data_url()),
            ],
        },
    ]

    result = await client.complete(
        messages,
        model=model,
        max_tokens=ANALYSIS_MAX_TOKENS,
        temperature=ANALYSIS_TEMPERATURE,
    )
    analysis = parse_analysis(result.text)

    logger.info(
        "Image analyzed",
        extra={"product_type": analysis.product_type, "colors": len(analysis.colors)}
    )
    return analysis
