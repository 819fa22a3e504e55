"""
Marketing module public API.
"""

from .copywriter import build_copy_prompt, generate_marketing_content
from .templates import marketing_variation_prompts

__all__ = ["build_copy_prompt", "generate_marketing_content", "marketing_variation_prompts"]
