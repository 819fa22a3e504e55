"""
Configuration management.

Centralized environment variable management and validation.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from adgen.shared.errors import ConfigError

DEFAULT_FALLBACK_VIDEO_URL = (
    "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/BigBuckBunny.mp4"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Provider credentials. Each one is optional so that a missing key only
    # disables the features that need it; those features raise ConfigError.
    openai_api_key: Optional[str] = None
    google_api_key: Optional[str] = None

    # Supabase configuration
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None
    supabase_jwt_secret: Optional[str] = None

    # Frontend configuration
    frontend_url: str = "http://localhost:5173"

    # Environment
    environment: Literal["development", "staging", "production"] = "development"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_dir: Optional[str] = "logs"

    # Models
    analysis_model: str = "gpt-4o-mini"
    copy_model: str = "gpt-4o-mini"
    image_model: str = "gemini-2.5-flash-image"
    video_model: str = "veo-3.1-generate-preview"

    # Upload limits
    max_upload_size_mb: int = 10

    # Image variations
    variation_count: int = 3
    variation_concurrency: int = 3

    # Video generation
    # VIDEO_POLL_INTERVAL_SECONDS x VIDEO_MAX_POLL_ATTEMPTS is the polling ceiling (2 minutes by default)
    video_poll_interval_seconds: float = 10.0
    video_max_poll_attempts: int = 12
    video_resolution: str = "720p"
    video_aspect_ratio: str = "16:9"
    fallback_video_url: str = DEFAULT_FALLBACK_VIDEO_URL

    # Storage buckets
    images_bucket: str = "generated-images"
    videos_bucket: str = "generated-videos"

    # Usage
    monthly_credits: int = 50
    recent_generations_limit: int = 6

    @field_validator("openai_api_key", "google_api_key", "supabase_service_key", "supabase_jwt_secret")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty strings as unset."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("openai_api_key")
    @classmethod
    def validate_openai_api_key(cls, v: Optional[str]) -> Optional[str]:
        """Validate OpenAI API key format."""
        if v is None:
            return v
        if not v.startswith("sk-"):
            raise ConfigError("OPENAI_API_KEY must start with 'sk-'")
        if len(v) < 20:
            raise ConfigError("OPENAI_API_KEY appears to be invalid")
        return v

    @field_validator("google_api_key")
    @classmethod
    def validate_google_api_key(cls, v: Optional[str]) -> Optional[str]:
        """Validate Google API key format."""
        if v is not None and len(v) < 20:
            raise ConfigError("GOOGLE_API_KEY appears to be invalid")
        return v

    @field_validator("supabase_url")
    @classmethod
    def validate_supabase_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate Supabase URL format."""
        if not v:
            return None
        if not v.startswith(("http://", "https://")):
            raise ConfigError("SUPABASE_URL must be a valid HTTP/HTTPS URL")
        return v.rstrip("/")

    @field_validator("frontend_url")
    @classmethod
    def validate_frontend_url(cls, v: str) -> str:
        """Validate frontend URL format."""
        if not v.startswith(("http://", "https://")):
            raise ConfigError("FRONTEND_URL must be a valid HTTP/HTTPS URL")
        return v

    @field_validator(
        "max_upload_size_mb",
        "variation_count",
        "variation_concurrency",
        "video_max_poll_attempts",
        "monthly_credits",
        "recent_generations_limit",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Counts and limits must be positive."""
        if v < 1:
            raise ConfigError("Numeric limits must be at least 1")
        return v

    @field_validator("video_poll_interval_seconds")
    @classmethod
    def validate_poll_interval(cls, v: float) -> float:
        """Polling interval cannot be negative."""
        if v < 0:
            raise ConfigError("VIDEO_POLL_INTERVAL_SECONDS cannot be negative")
        return v

    @property
    def max_upload_size_bytes(self) -> int:
        """Upload limit in bytes."""
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def supabase_configured(self) -> bool:
        """True when both the Supabase URL and service key are present."""
        return bool(self.supabase_url and self.supabase_service_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load settings once per process.

    Returns:
        Settings instance

    Raises:
        ConfigError: If the environment holds invalid values
    """
    try:
        return Settings()
    except ConfigError:
        raise
    except Exception as e:
        raise ConfigError(f"Failed to load configuration: {str(e)}") from e
