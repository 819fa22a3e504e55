from typing import List

import pytest

from adgen.shared.json_payload import Decoded, DecodeFailure, decode_json_payload, strip_code_fence
from adgen.shared.models import VariationPrompt

PAYLOAD = '[{"name": "Noir", "prompt": "Black and white studio shot", "description": "High contrast"}]'


@pytest.mark.parametrize("wrapped", [
    PAYLOAD,
    f"```json\n{PAYLOAD}\n```",
    f"```\n{PAYLOAD}\n```",
    f"  ```json\n{PAYLOAD}\n```  \n",
    f"Here are your prompts:\n```json\n{PAYLOAD}\n```\nEnjoy!",
])
def test_fenced_and_unfenced_payloads_decode_identically(wrapped):
    result = decode_json_payload(wrapped, List[VariationPrompt])

    assert isinstance(result, Decoded)
    assert result.value == decode_json_payload(PAYLOAD, List[VariationPrompt]).value
    assert result.value[0].prompt_text == "Black and white studio shot"


@pytest.mark.parametrize("text", [PAYLOAD, f"```json\n{PAYLOAD}\n```", "plain words", ""])
def test_strip_code_fence_is_idempotent(text):
    once = strip_code_fence(text)
    assert strip_code_fence(once) == once


def test_single_line_fence_is_stripped():
    assert strip_code_fence('```{"a": 1}```') == '{"a": 1}'


def test_empty_response_is_a_failure():
    result = decode_json_payload("   ", dict)
    assert isinstance(result, DecodeFailure)
    assert result.reason == "empty response"


def test_invalid_json_is_a_failure():
    result = decode_json_payload("```json\n[{\"name\": \n```", List[VariationPrompt])
    assert isinstance(result, DecodeFailure)
    assert result.reason.startswith("invalid JSON")


def test_schema_mismatch_is_a_failure():
    result = decode_json_payload('[{"name": "Noir"}]', List[VariationPrompt])
    assert isinstance(result, DecodeFailure)
    assert result.reason.startswith("schema mismatch")
    assert result.raw_text == '[{"name": "Noir"}]'
