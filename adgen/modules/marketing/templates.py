"""
Fixed image variation directions used for marketing posts.
"""

from typing import List

from adgen.shared.models import ImageAnalysis, VariationPrompt

_KEEP_PRODUCT = (
    "Don't change the original product image just the background and composition, "
    "and enhance the image quality."
)


def marketing_variation_prompts(analysis: ImageAnalysis) -> List[VariationPrompt]:
    product = analysis.product_type
    return [
        VariationPrompt(
            name="Modern Minimal",
            prompt_text=(
                f"Create a modern, minimalist version of this {product}. Clean background, simple "
                f"composition, focus on the product. Professional lighting, subtle shadows. {_KEEP_PRODUCT}"
            ),
            description="Clean and modern aesthetic",
        ),
        VariationPrompt(
            name="Vibrant Lifestyle",
            prompt_text=(
                f"Create a vibrant, lifestyle-focused version of this {product}. Bright colors, dynamic "
                f"composition, show the product in use. Energetic and engaging. {_KEEP_PRODUCT}"
            ),
            description="Vibrant and lifestyle-oriented",
        ),
        VariationPrompt(
            name="Luxury Premium",
            prompt_text=(
                f"Create a luxury, premium version of this {product}. Elegant composition, sophisticated "
                f"lighting, premium feel. High-end aesthetic. {_KEEP_PRODUCT}"
            ),
            description="Luxury and premium feel",
        ),
    ]
