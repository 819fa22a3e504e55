"""
Validation utilities.

Shared validation utilities for common input validation tasks.
"""

from typing import get_args

from adgen.shared.errors import ValidationError
from adgen.shared.models.marketing import Platform, Tone


def validate_file_size(
    file_size_bytes: int,
    max_size_bytes: int
) -> None:
    """
    Validate file size.

    Args:
        file_size_bytes: File size in bytes
        max_size_bytes: Maximum allowed size in bytes

    Raises:
        ValidationError: If file is empty or exceeds the maximum
    """
    if file_size_bytes < 0:
        raise ValidationError("File size cannot be negative")

    if file_size_bytes == 0:
        raise ValidationError("Image file is empty")

    if file_size_bytes > max_size_bytes:
        max_size_mb = max_size_bytes / (1024 * 1024)
        file_size_mb = file_size_bytes / (1024 * 1024)
        raise ValidationError(
            f"File size ({file_size_mb:.2f} MB) exceeds maximum "
            f"of {max_size_mb:.0f} MB. Please upload a smaller image."
        )


def validate_prompt(
    prompt: str,
    min_length: int = 10,
    max_length: int = 3000
) -> str:
    """
    Validate a user-supplied video prompt.

    Returns:
        The stripped prompt

    Raises:
        ValidationError: If prompt is invalid
    """
    if not prompt or not isinstance(prompt, str):
        raise ValidationError("Prompt is required")

    prompt = prompt.strip()

    if len(prompt) < min_length:
        raise ValidationError(
            f"Prompt must be at least {min_length} characters long "
            f"(current: {len(prompt)})"
        )

    if len(prompt) > max_length:
        raise ValidationError(
            f"Prompt must be at most {max_length} characters long "
            f"(current: {len(prompt)})"
        )

    return prompt


def validate_platform(platform: str) -> str:
    """Validate a social platform name."""
    allowed = get_args(Platform)
    if platform not in allowed:
        raise ValidationError(f"Unsupported platform '{platform}'. Supported: {', '.join(allowed)}")
    return platform


def validate_tone(tone: str) -> str:
    """Validate a copy tone."""
    allowed = get_args(Tone)
    if tone not in allowed:
        raise ValidationError(f"Unsupported tone '{tone}'. Supported: {', '.join(allowed)}")
    return tone
