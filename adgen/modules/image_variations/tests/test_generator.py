"""
Tests for the image variation fan-out.
"""

import base64

import pytest

from adgen.conftest import FakeGenAI, TEST_SUPABASE_URL, make_image_bytes
from adgen.modules.image_variations import generate_variation, generate_variations
from adgen.modules.persistence import PersistenceAdapter
from adgen.modules.providers import InlineImage
from adgen.shared.errors import ConfigError, GenerationError, RateLimitError
from adgen.shared.models import Degraded, Failed, Ok


@pytest.mark.asyncio
async def test_one_failure_does_not_cancel_the_others(encoded_png, variation_prompts):
    genai = FakeGenAI(image_results={"neon diner": GenerationError("Google GenAI error during image generation: blocked")})

    batch = await generate_variations(genai, variation_prompts, encoded_png)

    assert [v.style_name for v in batch.variations] == ["Golden Hour", "Studio White"]
    assert len(batch.failures) == 1
    assert batch.failures[0].style_name == "Neon Night"
    assert "blocked" in batch.failures[0].reason
    assert batch.succeeded
    assert len(genai.image_calls) == 3


@pytest.mark.asyncio
async def test_anonymous_variations_are_data_urls(encoded_png, variation_prompts):
    batch = await generate_variations(FakeGenAI(), variation_prompts, encoded_png)

    assert len(batch.variations) == 3
    for variation, prompt in zip(batch.variations, variation_prompts):
        assert variation.artifact_url.startswith("data:image/png;base64,")
        assert variation.prompt_used == prompt.prompt_text
        assert variation.id is None


@pytest.mark.asyncio
async def test_original_image_is_sent_with_every_prompt(encoded_png, variation_prompts):
    genai = FakeGenAI()

    await generate_variations(genai, variation_prompts, encoded_png, model="gemini-test")

    for call in genai.image_calls:
        assert call["image_bytes"] == encoded_png.decode()
        assert call["mime_type"] == "image/png"
        assert call["model"] == "gemini-test"


@pytest.mark.asyncio
async def test_first_inline_image_wins(encoded_png, variation_prompts):
    first = make_image_bytes(color=(0, 0, 255))
    genai = FakeGenAI(image_results={
        "golden hour": [InlineImage(first), InlineImage(make_image_bytes(color=(0, 255, 0)))],
    })

    outcome = await generate_variation(genai, variation_prompts[0], encoded_png)

    assert isinstance(outcome, Ok)
    assert outcome.value.artifact_url == f"data:image/png;base64,{base64.b64encode(first).decode()}"
    assert genai.parts_consumed == 1


@pytest.mark.asyncio
async def test_empty_parts_are_skipped(encoded_png, variation_prompts):
    genai = FakeGenAI(image_results={"golden hour": [InlineImage(b""), InlineImage(b"jpeg-bytes", "image/jpeg")]})

    outcome = await generate_variation(genai, variation_prompts[0], encoded_png)

    assert outcome.value.artifact_url.startswith("data:image/jpeg;base64,")


@pytest.mark.asyncio
async def test_base64_text_parts_are_decoded(encoded_png, variation_prompts):
    raw = make_image_bytes()
    genai = FakeGenAI(image_results={"golden hour": [InlineImage(base64.b64encode(raw).decode("ascii"))]})

    outcome = await generate_variation(genai, variation_prompts[0], encoded_png)

    assert outcome.value.artifact_url == f"data:image/png;base64,{base64.b64encode(raw).decode()}"


@pytest.mark.asyncio
async def test_stream_without_image_is_failed(encoded_png, variation_prompts):
    genai = FakeGenAI(image_results={"golden hour": []})

    outcome = await generate_variation(genai, variation_prompts[0], encoded_png)

    assert outcome == Failed(reason="No image data returned for Golden Hour")


@pytest.mark.asyncio
async def test_rate_limit_is_failed_with_error_type(encoded_png, variation_prompts):
    genai = FakeGenAI(image_results={"golden hour": RateLimitError("quota exceeded")})

    outcome = await generate_variation(genai, variation_prompts[0], encoded_png)

    assert isinstance(outcome, Failed)
    assert outcome.error_type == "RateLimitError"


@pytest.mark.asyncio
async def test_unexpected_error_is_contained(encoded_png, variation_prompts):
    genai = FakeGenAI(image_results={"seamless white": RuntimeError("socket closed")})

    batch = await generate_variations(genai, variation_prompts, encoded_png)

    assert len(batch.variations) == 2
    assert batch.failures[0].reason == "socket closed"


@pytest.mark.asyncio
async def test_all_failures_means_not_succeeded(encoded_png, variation_prompts):
    genai = FakeGenAI(image_results={"Burger": GenerationError("down")})

    batch = await generate_variations(genai, variation_prompts, encoded_png)

    assert not batch.succeeded
    assert len(batch.failures) == 3


@pytest.mark.asyncio
async def test_signed_in_variations_are_stored_and_recorded(encoded_png, variation_prompts, persistence, fake_supabase):
    original = f"{TEST_SUPABASE_URL}/storage/v1/object/public/generated-images/user-1/original.png"

    batch = await generate_variations(
        FakeGenAI(), variation_prompts, encoded_png,
        user_id="user-1", persistence=persistence, original_image_url=original,
    )

    assert not batch.degraded
    assert all(v.id for v in batch.variations)
    stored = fake_supabase.storage.objects["generated-images"]
    assert len(stored) == 3
    assert all(path.startswith("user-1/variation_") for path in stored)

    rows = fake_supabase.tables["image_variations"]
    assert {row["prompt_used"] for row in rows} == {p.prompt_text for p in variation_prompts}
    assert all(row["original_image_url"] == original for row in rows)
    assert all(row["generated_image_url"].startswith(TEST_SUPABASE_URL) for row in rows)


@pytest.mark.asyncio
async def test_storage_failure_keeps_data_url(encoded_png, variation_prompts, persistence, fake_supabase):
    fake_supabase.storage.failing_buckets.add("generated-images")

    outcome = await generate_variation(
        FakeGenAI(), variation_prompts[0], encoded_png, user_id="user-1", persistence=persistence
    )

    assert isinstance(outcome, Degraded)
    assert outcome.value.is_ephemeral
    assert "Could not save Golden Hour" in outcome.reason
    assert fake_supabase.tables["image_variations"] == []


@pytest.mark.asyncio
async def test_record_failure_keeps_public_url(encoded_png, variation_prompts, persistence, fake_supabase):
    fake_supabase.failing_tables.add("image_variations")

    outcome = await generate_variation(
        FakeGenAI(), variation_prompts[0], encoded_png, user_id="user-1", persistence=persistence
    )

    assert isinstance(outcome, Degraded)
    assert outcome.value.artifact_url.startswith(f"{TEST_SUPABASE_URL}/storage/v1/object/public/generated-images/user-1/")
    assert "Could not record Golden Hour" in outcome.reason


@pytest.mark.asyncio
async def test_missing_client_is_config_error(encoded_png, variation_prompts):
    with pytest.raises(ConfigError, match="GOOGLE_API_KEY"):
        await generate_variations(None, variation_prompts, encoded_png)
