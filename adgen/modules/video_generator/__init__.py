"""
Video Generator module public API.
"""

from .config import FALLBACK_PROMPT, VideoOptions
from .downloader import download_video_bytes
from .generator import VideoRequest, generate_product_video, generate_video

__all__ = [
    "FALLBACK_PROMPT",
    "VideoOptions",
    "VideoRequest",
    "download_video_bytes",
    "generate_product_video",
    "generate_video",
]
