"""
OpenAI chat completion client.

Used for image analysis, variation prompts and marketing copy.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from openai import APIError, APITimeoutError, AsyncOpenAI
from openai import RateLimitError as OpenAIRateLimitError

from adgen.shared.errors import ConfigError, GenerationError, RateLimitError, RetryableError
from adgen.shared.logging import get_logger
from adgen.shared.retry import retry_with_backoff

logger = get_logger("providers.llm_client")

Message = Dict[str, Any]


@dataclass
class CompletionResult:
    text: str
    model: str
    input_tokens: int
    output_tokens: int


def image_message_part(data_url: str, detail: str = "high") -> Message:
    """Build a user-message content part that embeds an image."""
    return {"type": "image_url", "image_url": {"url": data_url, "detail": detail}}


def text_message_part(text: str) -> Message:
    """Build a user-message content part holding text."""
    return {"type": "text", "text": text}


class CompletionClient:
    """Thin async wrapper over the OpenAI chat completions endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        default_model: str = "gpt-4o-mini",
        timeout: float = 90.0,
        client: Optional[AsyncOpenAI] = None
    ):
        """
        Initialize the completion client.

        Args:
            api_key: OpenAI API key
            default_model: Model used when a call does not name one
            timeout: Request timeout in seconds
            client: Pre-built AsyncOpenAI instance (tests)

        Raises:
            ConfigError: If the API key is missing
        """
        if not api_key:
            raise ConfigError(
                "OPENAI_API_KEY is required for image analysis, prompt generation and copywriting"
            )
        self.default_model = default_model
        self.timeout = timeout
        self._client = client or AsyncOpenAI(api_key=api_key, timeout=timeout)

    @retry_with_backoff(max_attempts=3, base_delay=2)
    async def complete(
        self,
        messages: List[Message],
        model: Optional[str] = None,
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> CompletionResult:
        """
        Run one chat completion.

        Args:
            messages: Role-tagged messages; user content may embed images
            model: Model override
            max_tokens: Completion token limit
            temperature: Sampling temperature

        Returns:
            CompletionResult with the trimmed response text

        Raises:
            RateLimitError: If the provider keeps rate limiting after retries
            RetryableError: If the request keeps timing out after retries
            GenerationError: On any other API error or an empty response
        """
        model = model or self.default_model
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except OpenAIRateLimitError as e:
            raise RateLimitError(f"OpenAI rate limit: {str(e)}") from e
        except APITimeoutError as e:
            raise RetryableError(f"OpenAI request timed out: {str(e)}") from e
        except APIError as e:
            logger.error(
                "OpenAI API error",
                extra={"model": model, "error": str(e), "error_type": type(e).__name__}
            )
            raise GenerationError(f"OpenAI API error: {str(e)}") from e

        choice = response.choices[0] if response.choices else None
        text = (choice.message.content or "").strip() if choice else ""
        if not text:
            raise GenerationError("OpenAI returned an empty response")

        usage = getattr(response, "usage", None)
        input_tokens = getattr(usage, "prompt_tokens", 0) or 0
        output_tokens = getattr(usage, "completion_tokens", 0) or 0

        logger.info(
            "Completion finished",
            extra={
                "model": model,
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
            }
        )

        return CompletionResult(
            text=text,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
