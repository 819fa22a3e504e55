"""
Video generation options.
"""

from dataclasses import dataclass

from adgen.shared.config import DEFAULT_FALLBACK_VIDEO_URL, Settings

FALLBACK_PROMPT = "Fallback video due to generation error"


@dataclass(frozen=True)
class VideoOptions:
    """Model, polling and fallback parameters for one video job."""

    model: str = "veo-3.1-generate-preview"
    poll_interval_seconds: float = 10.0
    max_poll_attempts: int = 12
    resolution: str = "720p"
    aspect_ratio: str = "16:9"
    fallback_video_url: str = DEFAULT_FALLBACK_VIDEO_URL

    @classmethod
    def from_settings(cls, settings: Settings) -> "VideoOptions":
        return cls(
            model=settings.video_model,
            poll_interval_seconds=settings.video_poll_interval_seconds,
            max_poll_attempts=settings.video_max_poll_attempts,
            resolution=settings.video_resolution,
            aspect_ratio=settings.video_aspect_ratio,
            fallback_video_url=settings.fallback_video_url,
        )
