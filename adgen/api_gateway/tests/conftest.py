"""
Fixtures for the API gateway: an orchestrator over fake providers and a
TestClient app built around it.
"""

import json

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from adgen.api_gateway.container import Services
from adgen.api_gateway.main import create_app
from adgen.api_gateway.orchestrator import AdGenOrchestrator
from adgen.conftest import TEST_JWT_SECRET, FakeGenAI, make_completion_client
from adgen.modules.video_generator import generator as video_generator_module
from adgen.shared.database import DatabaseClient

VIDEO_BYTES = b"\x00\x00\x00\x18ftypmp42fake-video"

ANALYSIS_JSON = json.dumps({
    "productName": "Classic Cheeseburger",
    "productType": "burger",
    "colors": ["golden brown", "red"],
    "style": "rustic",
    "mood": "warm",
    "keyFeatures": ["sesame bun", "melted cheese"],
})

PROMPTS_JSON = json.dumps([
    {"name": "Golden Hour", "prompt": "Burger in warm golden hour light", "description": "Warm outdoor light"},
    {"name": "Neon Night", "prompt": "Burger under neon diner signs", "description": "Moody neon"},
    {"name": "Studio White", "prompt": "Burger on seamless white studio backdrop", "description": "Clean studio"},
])

COPY_JSON = json.dumps({
    "title": "Taste the Fire",
    "engagingLine": "Flame-grilled happiness",
    "content": "Our new burger is here.",
    "hashtags": ["#burger", "#foodie"],
    "callToAction": "Order Now",
})


async def fake_download(url):
    return VIDEO_BYTES


def auth_header(user_id: str = "user-1", secret: str = TEST_JWT_SECRET) -> dict:
    token = jwt.encode({"sub": user_id, "aud": "authenticated"}, secret, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_orchestrator(settings, persistence, monkeypatch):
    """
    Build an orchestrator; pass None to leave a provider unconfigured.

    Finished videos are served from memory and the settings poll with no wait.
    """
    monkeypatch.setattr(video_generator_module, "download_video_bytes", fake_download)

    def _make(*responses, genai="default", persistence=persistence, completion="default"):
        if completion == "default":
            completion = make_completion_client(*responses) if responses else None
        if genai == "default":
            genai = FakeGenAI()
        return AdGenOrchestrator(settings, completion, genai, persistence)

    return _make


@pytest.fixture
def make_client(settings, fake_supabase):
    """Start the app around an orchestrator; use as a context manager."""
    def _make(orchestrator: AdGenOrchestrator) -> TestClient:
        database = DatabaseClient(fake_supabase, retry_base_delay=0) if orchestrator.persistence else None
        services = Services(
            settings=settings,
            orchestrator=orchestrator,
            completion=orchestrator.completion,
            genai=orchestrator.genai,
            persistence=orchestrator.persistence,
            database=database,
        )
        return TestClient(create_app(services=services))

    return _make
