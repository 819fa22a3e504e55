"""
Data models for the ad generation pipeline.

This module exports all Pydantic models used across pipeline modules.
"""

from .analysis import ImageAnalysis
from .generation import (
    GenerationSession,
    GenerationType,
    ImageVariation,
    Notification,
    VariationFailure,
    VariationPrompt,
    VideoArtifact,
    VideoPrompt,
    VideoStatus,
)
from .marketing import MarketingContent, MarketingPost, Platform, Tone
from .outcome import Degraded, Failed, Ok, Outcome, outcome_value
from .stats import UsageStats

__all__ = [
    # Analysis
    "ImageAnalysis",
    # Generation
    "GenerationSession",
    "GenerationType",
    "ImageVariation",
    "Notification",
    "VariationFailure",
    "VariationPrompt",
    "VideoArtifact",
    "VideoPrompt",
    "VideoStatus",
    # Marketing
    "MarketingContent",
    "MarketingPost",
    "Platform",
    "Tone",
    # Outcomes
    "Degraded",
    "Failed",
    "Ok",
    "Outcome",
    "outcome_value",
    # Stats
    "UsageStats",
]
