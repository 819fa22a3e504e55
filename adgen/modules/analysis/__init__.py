"""
Analysis module public API.
"""

from .analyzer import analyze_image, parse_analysis

__all__ = ["analyze_image", "parse_analysis"]
