"""
Tests for marketing copy and the marketing variation set.
"""

import json

import pytest

from adgen.conftest import completion_calls, make_completion_client
from adgen.modules.marketing import (
    build_copy_prompt,
    generate_marketing_content,
    marketing_variation_prompts,
)
from adgen.shared.errors import ConfigError, GenerationError, ValidationError

COPY_JSON = json.dumps({
    "title": "Taste the Fire",
    "engagingLine": "Flame-grilled happiness in every bite",
    "content": "Our Classic Cheeseburger is stacked with melted cheese on a sesame bun.",
    "hashtags": ["#burger", "#foodie", "#cheeseburger", "#grill", "#lunch"],
    "callToAction": "Order Now",
})


@pytest.mark.asyncio
async def test_generate_marketing_content(sample_analysis):
    client = make_completion_client(f"```json\n{COPY_JSON}\n```")

    content = await generate_marketing_content(client, sample_analysis, "instagram", "casual", "Burger Barn")

    assert content.title == "Taste the Fire"
    assert content.engaging_line == "Flame-grilled happiness in every bite"
    assert content.call_to_action == "Order Now"
    assert len(content.hashtags) == 5

    prompt = completion_calls(client)[0]["messages"][0]["content"]
    assert "Brand: Burger Barn" in prompt
    assert "instagram platform with casual tone" in prompt


@pytest.mark.asyncio
async def test_invalid_platform_is_rejected_before_any_call(sample_analysis):
    client = make_completion_client(COPY_JSON)

    with pytest.raises(ValidationError, match="platform"):
        await generate_marketing_content(client, sample_analysis, "myspace", "casual")

    assert completion_calls(client) == []


@pytest.mark.asyncio
async def test_invalid_tone_is_rejected(sample_analysis):
    with pytest.raises(ValidationError, match="tone"):
        await generate_marketing_content(make_completion_client(COPY_JSON), sample_analysis, "tiktok", "grumpy")


@pytest.mark.asyncio
async def test_missing_client_is_config_error(sample_analysis):
    with pytest.raises(ConfigError, match="OPENAI_API_KEY"):
        await generate_marketing_content(None, sample_analysis, "instagram", "casual")


@pytest.mark.asyncio
async def test_unparseable_copy_is_generation_error(sample_analysis):
    client = make_completion_client("Taste the Fire! Order now.")

    with pytest.raises(GenerationError, match="marketing content"):
        await generate_marketing_content(client, sample_analysis, "facebook", "funny")


def test_copy_prompt_defaults(sample_analysis):
    prompt = build_copy_prompt(sample_analysis.model_copy(update={"key_features": []}), "linkedin", "professional")

    assert "Brand: Your Brand" in prompt
    assert "Key Features: quality" in prompt
    assert "Colors: golden brown, red, green" in prompt


def test_marketing_variation_prompts(sample_analysis):
    prompts = marketing_variation_prompts(sample_analysis)

    assert [p.name for p in prompts] == ["Modern Minimal", "Vibrant Lifestyle", "Luxury Premium"]
    assert all("burger" in p.prompt_text for p in prompts)
