"""
Decoding of JSON returned by language models.

Models often wrap JSON in a markdown code fence. Every call site goes through
decode_json_payload, which strips the fence, parses the JSON and validates it
against a pydantic schema in one step.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Generic, Type, TypeVar, Union

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaValidationError

T = TypeVar("T")

_WRAPPED_FENCE = re.compile(r"^```[\w-]*[ \t]*\n?(.*?)\n?[ \t]*```$", re.DOTALL)
_EMBEDDED_FENCE = re.compile(r"```[\w-]*[ \t]*\n(.*?)\n[ \t]*```", re.DOTALL)


@dataclass(frozen=True)
class Decoded(Generic[T]):
    """Successfully decoded and validated payload."""

    value: T


@dataclass(frozen=True)
class DecodeFailure:
    """Payload could not be parsed or did not match the schema."""

    reason: str
    raw_text: str


DecodeResult = Union[Decoded[T], DecodeFailure]


def strip_code_fence(text: str) -> str:
    """
    Remove a surrounding markdown code fence, if any.

    Handles ```json ... ``` and bare ``` ... ``` wrappers, as well as a single
    fenced block embedded in surrounding prose. Text without a fence is only
    trimmed, so applying this twice gives the same result as applying it once.

    Args:
        text: Raw model output

    Returns:
        The enclosed content, trimmed
    """
    stripped = (text or "").strip()

    match = _WRAPPED_FENCE.match(stripped)
    if match:
        return match.group(1).strip()

    match = _EMBEDDED_FENCE.search(stripped)
    if match:
        return match.group(1).strip()

    return stripped


def decode_json_payload(text: str, schema: Union[Type[T], Any]) -> DecodeResult:
    """
    Strip fences, parse JSON and validate it against ``schema``.

    Args:
        text: Raw model output
        schema: Any type pydantic can validate (a BaseModel, List[Model], dict, ...)

    Returns:
        Decoded with the validated value, or DecodeFailure with the reason
    """
    cleaned = strip_code_fence(text)
    if not cleaned:
        return DecodeFailure(reason="empty response", raw_text=text or "")

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        return DecodeFailure(reason=f"invalid JSON: {e.msg} at position {e.pos}", raw_text=text)

    try:
        value = TypeAdapter(schema).validate_python(data)
    except SchemaValidationError as e:
        return DecodeFailure(reason=f"schema mismatch: {e.error_count()} error(s): {e.errors()[0]['msg']}", raw_text=text)

    return Decoded(value=value)
