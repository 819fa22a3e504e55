"""
Image Variations module public API.
"""

from .generator import VariationBatch, generate_variation, generate_variations

__all__ = ["VariationBatch", "generate_variation", "generate_variations"]
