"""
Prompt Generator module public API.
"""

from .generator import build_video_prompt, generate_variation_prompts, generate_video_prompts

__all__ = ["build_video_prompt", "generate_variation_prompts", "generate_video_prompts"]
