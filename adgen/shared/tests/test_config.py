"""
Tests for configuration management.
"""

import pytest

from adgen.shared.config import DEFAULT_FALLBACK_VIDEO_URL, Settings
from adgen.shared.errors import ConfigError

VALID_OPENAI_KEY = "sk-test123456789012345678901234567890"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "OPENAI_API_KEY", "GOOGLE_API_KEY", "SUPABASE_URL", "SUPABASE_SERVICE_KEY",
        "SUPABASE_JWT_SECRET", "FRONTEND_URL", "VARIATION_COUNT",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_credentials():
    settings = Settings(_env_file=None)

    assert settings.openai_api_key is None
    assert settings.google_api_key is None
    assert settings.supabase_configured is False
    assert settings.variation_count == 3
    assert settings.video_poll_interval_seconds == 10.0
    assert settings.video_max_poll_attempts == 12
    assert settings.fallback_video_url == DEFAULT_FALLBACK_VIDEO_URL
    assert settings.max_upload_size_bytes == 10 * 1024 * 1024


def test_settings_loads_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        f"OPENAI_API_KEY={VALID_OPENAI_KEY}\n"
        "SUPABASE_URL=https://test.supabase.co/\n"
        "SUPABASE_SERVICE_KEY=service-key\n"
        "VARIATION_COUNT=4\n"
    )

    settings = Settings(_env_file=str(env_file))

    assert settings.openai_api_key == VALID_OPENAI_KEY
    assert settings.supabase_url == "https://test.supabase.co"
    assert settings.supabase_configured is True
    assert settings.variation_count == 4


def test_environment_variables_are_case_insensitive(monkeypatch):
    monkeypatch.setenv("openai_api_key", VALID_OPENAI_KEY)
    assert Settings(_env_file=None).openai_api_key == VALID_OPENAI_KEY


def test_blank_credentials_are_unset(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "   ")
    monkeypatch.setenv("GOOGLE_API_KEY", "")
    settings = Settings(_env_file=None)
    assert settings.openai_api_key is None
    assert settings.google_api_key is None


def test_openai_key_must_start_with_sk(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "pk-test123456789012345678901234567890")
    with pytest.raises(ConfigError, match="must start with 'sk-'"):
        Settings(_env_file=None)


def test_short_openai_key_rejected(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-short")
    with pytest.raises(ConfigError, match="appears to be invalid"):
        Settings(_env_file=None)


def test_short_google_key_rejected(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "abc")
    with pytest.raises(ConfigError, match="GOOGLE_API_KEY"):
        Settings(_env_file=None)


def test_settings_validates_supabase_url(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "invalid-url")
    with pytest.raises(ConfigError, match="SUPABASE_URL"):
        Settings(_env_file=None)


def test_settings_validates_frontend_url(monkeypatch):
    monkeypatch.setenv("FRONTEND_URL", "localhost:5173")
    with pytest.raises(ConfigError, match="FRONTEND_URL"):
        Settings(_env_file=None)


def test_variation_count_must_be_positive(monkeypatch):
    monkeypatch.setenv("VARIATION_COUNT", "0")
    with pytest.raises(ConfigError):
        Settings(_env_file=None)


def test_negative_poll_interval_rejected():
    with pytest.raises(ConfigError):
        Settings(_env_file=None, video_poll_interval_seconds=-1)
