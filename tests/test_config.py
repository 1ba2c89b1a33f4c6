"""Tests for environment configuration."""

from pathlib import Path

import pytest

from fit_sync.config import DEFAULT_DEBOUNCE_SECONDS, Settings
from fit_sync.errors import ConfigError


def test_defaults():
    settings = Settings.from_env({})
    assert settings.debounce_seconds == DEFAULT_DEBOUNCE_SECONDS
    assert settings.supabase_url == ""


def test_reads_environment():
    settings = Settings.from_env(
        {
            "FIT_SYNC_DATA_DIR": "/tmp/fit",
            "FIT_SYNC_SUPABASE_URL": "https://xyz.supabase.co/",
            "FIT_SYNC_SUPABASE_ANON_KEY": "anon",
            "FIT_SYNC_DEBOUNCE_SECONDS": "0.5",
        }
    )
    assert settings.data_dir == Path("/tmp/fit")
    assert settings.supabase_url == "https://xyz.supabase.co"
    assert settings.debounce_seconds == 0.5
    settings.require_remote()


def test_invalid_number():
    with pytest.raises(ConfigError):
        Settings.from_env({"FIT_SYNC_HTTP_TIMEOUT": "soon"})


def test_require_remote_names_missing_values():
    with pytest.raises(ConfigError, match="FIT_SYNC_SUPABASE_ANON_KEY"):
        Settings.from_env({"FIT_SYNC_SUPABASE_URL": "https://xyz.supabase.co"}).require_remote()
