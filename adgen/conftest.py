"""
Shared pytest fixtures and fakes.

Provides fake OpenAI and Google GenAI clients, an in-memory Supabase client
and small sample images built with Pillow.
"""

import io
import os
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from uuid import uuid4

# Keep test runs from writing log files
os.environ.setdefault("LOG_DIR", "")

import pytest
from PIL import Image

from adgen.modules.media_encoder import encode_image
from adgen.modules.persistence import PersistenceAdapter
from adgen.modules.providers import CompletionClient, InlineImage, VideoJob
from adgen.shared import retry
from adgen.shared.config import Settings
from adgen.shared.database import DatabaseClient
from adgen.shared.models import ImageAnalysis, VariationPrompt
from adgen.shared.storage import StorageClient

TEST_OPENAI_KEY = "sk-test123456789012345678901234567890"
TEST_GOOGLE_KEY = "test-google-key-123456789012345678901234567890"
TEST_JWT_SECRET = "test_jwt_secret_123456789012345678901234567890"
TEST_SUPABASE_URL = "https://test.supabase.co"


def make_image_bytes(fmt: str = "PNG", size=(32, 32), color=(200, 40, 40)) -> bytes:
    """Render a solid-color image in the given format."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------

def completion_response(content: Optional[str], prompt_tokens: int = 120, completion_tokens: int = 80):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
    )


class FakeChatCompletions:
    """Returns queued responses in order; the last one repeats."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, str) or item is None:
            return completion_response(item)
        return item


class FakeOpenAI:
    def __init__(self, responses):
        self.chat = SimpleNamespace(completions=FakeChatCompletions(responses))


def make_completion_client(*responses) -> CompletionClient:
    """CompletionClient backed by FakeOpenAI answering with ``responses``."""
    return CompletionClient(TEST_OPENAI_KEY, client=FakeOpenAI(responses))


def completion_calls(client: CompletionClient) -> List[Dict[str, Any]]:
    return client._client.chat.completions.calls


# ---------------------------------------------------------------------------
# Google GenAI
# ---------------------------------------------------------------------------

class FakeGenAI:
    """
    Stand-in for GenAIClient.

    ``image_results`` maps a substring of the prompt to the parts streamed for
    it, or to an exception raised by the stream. Prompts with no match stream
    one PNG part.
    """

    def __init__(
        self,
        image_results: Optional[Dict[str, Any]] = None,
        video_jobs: Optional[List[VideoJob]] = None,
        video_error: Optional[Exception] = None,
        api_key: str = TEST_GOOGLE_KEY
    ):
        self.api_key = api_key
        self.image_results = image_results or {}
        self.video_jobs = list(video_jobs or [
            VideoJob(operation="op-1", done=True, video_uri="https://generativelanguage.example/v1/files/abc:download?alt=media")
        ])
        self.video_error = video_error
        self.image_calls: List[Dict[str, Any]] = []
        self.parts_consumed = 0
        self.video_calls: List[Dict[str, Any]] = []
        self.poll_count = 0

    def _parts_for(self, prompt: str):
        for key, result in self.image_results.items():
            if key in prompt:
                return result
        return [InlineImage(data=make_image_bytes(), mime_type="image/png")]

    async def stream_image_parts(self, model, prompt, image_bytes=None, mime_type="image/png"):
        self.image_calls.append({"model": model, "prompt": prompt, "image_bytes": image_bytes, "mime_type": mime_type})
        result = self._parts_for(prompt)
        if isinstance(result, Exception):
            raise result
        for part in result:
            self.parts_consumed += 1
            yield part

    def _next_job(self) -> VideoJob:
        return self.video_jobs.pop(0) if len(self.video_jobs) > 1 else self.video_jobs[0]

    async def start_video_job(self, **kwargs) -> VideoJob:
        self.video_calls.append(kwargs)
        if self.video_error is not None:
            raise self.video_error
        return self._next_job()

    async def poll_video_job(self, job: VideoJob) -> VideoJob:
        self.poll_count += 1
        return self._next_job()

    def video_download_url(self, uri: str) -> str:
        separator = "&" if "?" in uri else "?"
        return f"{uri}{separator}key={self.api_key}"


# ---------------------------------------------------------------------------
# Supabase
# ---------------------------------------------------------------------------

class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    def upload(self, path, file, file_options=None):
        if self.name in self.storage.failing_buckets:
            raise Exception("storage unavailable")
        objects = self.storage.objects[self.name]
        if path in objects:
            raise Exception("The resource already exists")
        objects[path] = {"data": file, "content_type": (file_options or {}).get("content-type")}
        return SimpleNamespace(path=path)

    def get_public_url(self, path):
        return f"{TEST_SUPABASE_URL}/storage/v1/object/public/{self.name}/{path}"

    def remove(self, paths):
        removed = [p for p in paths if self.storage.objects[self.name].pop(p, None) is not None]
        return [{"name": p} for p in removed]


class FakeStorage:
    def __init__(self):
        self.objects: Dict[str, Dict[str, Dict[str, Any]]] = defaultdict(dict)
        self.failing_buckets = set()

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeQuery:
    """Chainable query over an in-memory table."""

    def __init__(self, supabase: "FakeSupabase", table: str):
        self.supabase = supabase
        self.table = table
        self.operation = "select"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.max_rows = None

    def select(self, *columns, **kwargs):
        return self

    def insert(self, payload, **kwargs):
        self.operation = "insert"
        self.payload = payload
        return self

    def delete(self, **kwargs):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: (row.get(column) or "") >= value)
        return self

    def order(self, column, desc=False, **kwargs):
        self.order_by = (column, desc)
        return self

    def limit(self, count, **kwargs):
        self.max_rows = count
        return self

    def _matches(self):
        return [row for row in self.supabase.tables[self.table] if all(f(row) for f in self.filters)]

    def execute(self):
        if self.table in self.supabase.failing_tables:
            raise Exception(f"table {self.table} unavailable")

        rows = self.supabase.tables[self.table]
        if self.operation == "insert":
            row = dict(self.payload, id=str(uuid4()), created_at=self.supabase.next_timestamp())
            rows.append(row)
            return SimpleNamespace(data=[dict(row)])

        matches = self._matches()
        if self.operation == "delete":
            self.supabase.tables[self.table] = [row for row in rows if row not in matches]
            return SimpleNamespace(data=[dict(row) for row in matches])

        if self.order_by:
            column, desc = self.order_by
            matches = sorted(matches, key=lambda row: row.get(column) or "", reverse=desc)
        count = len(matches)
        if self.max_rows is not None:
            matches = matches[:self.max_rows]
        return SimpleNamespace(data=[dict(row) for row in matches], count=count)


class FakeSupabase:
    """In-memory Supabase client covering the storage and table calls we use."""

    def __init__(self):
        self.storage = FakeStorage()
        self.tables: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.failing_tables = set()
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def table(self, name):
        return FakeQuery(self, name)

    def next_timestamp(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    """Skip retry backoff delays."""
    async def _no_sleep(delay):
        return None

    monkeypatch.setattr(retry.asyncio, "sleep", _no_sleep)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        openai_api_key=TEST_OPENAI_KEY,
        google_api_key=TEST_GOOGLE_KEY,
        supabase_url=TEST_SUPABASE_URL,
        supabase_service_key="test_service_key_1234567890123456789012345678901234567890",
        supabase_jwt_secret=TEST_JWT_SECRET,
        log_dir="",
        video_poll_interval_seconds=0,
    )


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes("JPEG")


@pytest.fixture
def encoded_png(png_bytes):
    return encode_image(png_bytes, mime_type="image/png", filename="burger.png")


@pytest.fixture
def sample_analysis() -> ImageAnalysis:
    return ImageAnalysis(
        product_name="Classic Cheeseburger",
        product_type="burger",
        colors=["golden brown", "red", "green"],
        style="rustic food photography",
        mood="warm",
        key_features=["sesame bun", "melted cheese"],
    )


@pytest.fixture
def variation_prompts() -> List[VariationPrompt]:
    return [
        VariationPrompt(name="Golden Hour", prompt_text="Burger in warm golden hour light", description="Warm outdoor light"),
        VariationPrompt(name="Neon Night", prompt_text="Burger under neon diner signs", description="Moody neon"),
        VariationPrompt(name="Studio White", prompt_text="Burger on seamless white studio backdrop", description="Clean studio"),
    ]


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def persistence(fake_supabase) -> PersistenceAdapter:
    return PersistenceAdapter(
        StorageClient(fake_supabase),
        DatabaseClient(fake_supabase, retry_base_delay=0),
    )


@pytest.fixture
def fake_genai() -> FakeGenAI:
    return FakeGenAI()
