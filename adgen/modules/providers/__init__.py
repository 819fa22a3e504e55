"""
Provider clients.

Explicitly constructed wrappers around the OpenAI and Google GenAI SDKs.
"""

from typing import Optional, TypeVar

from adgen.modules.providers.genai_client import GenAIClient, InlineImage, VideoJob
from adgen.modules.providers.llm_client import (
    CompletionClient,
    CompletionResult,
    image_message_part,
    text_message_part,
)
from adgen.shared.errors import ConfigError

C = TypeVar("C")


def require_client(client: Optional[C], env_var: str, feature: str) -> C:
    """
    Return ``client`` or fail fast when its credential was not configured.

    Raises:
        ConfigError: Naming the missing environment variable
    """
    if client is None:
        raise ConfigError(f"{env_var} is required for {feature}. Add it to your environment.")
    return client


__all__ = [
    "CompletionClient",
    "CompletionResult",
    "GenAIClient",
    "InlineImage",
    "VideoJob",
    "image_message_part",
    "require_client",
    "text_message_part",
]
