"""Tests for settings and store wiring."""
import pytest

from bilingual_archive.config import ArchiveSettings, build_store, load_settings
from bilingual_archive.storage import SqlNodeBackend


@pytest.fixture
def clean_env(monkeypatch):
    """Clear archive variables from the environment."""
    for name in (
        "ARCHIVE_DATA_PATH",
        "ARCHIVE_DATABASE_URL",
        "ARCHIVE_ADMIN_PASSCODE",
        "GEMINI_API_KEY",
        "GEMINI_MODEL",
        "GEMINI_BASE_URL",
        "GEMINI_TIMEOUT",
        "ARCHIVE_TRANSLATION_TONE",
        "ARCHIVE_TRANSLATION_COMPLEXITY",
        "ARCHIVE_LOG_LEVEL",
        "ARCHIVE_SEED_ON_EMPTY",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    """Test defaults without environment variables."""
    settings = load_settings()
    assert settings == ArchiveSettings()
    assert settings.admin_passcode == "770"
    assert settings.database_url == ""
    assert settings.seed_on_empty


def test_environment_and_overrides(clean_env):
    """Test reading variables and applying overrides."""
    clean_env.setenv("ARCHIVE_ADMIN_PASSCODE", "1234")
    clean_env.setenv("GEMINI_TIMEOUT", "15")
    clean_env.setenv("ARCHIVE_TRANSLATION_TONE", "modern")
    clean_env.setenv("ARCHIVE_SEED_ON_EMPTY", "false")

    settings = load_settings(gemini_model="gemini-pro")

    assert settings.admin_passcode == "1234"
    assert settings.gemini_timeout == 15
    assert settings.translation_tone == "modern"
    assert not settings.seed_on_empty
    assert settings.gemini_model == "gemini-pro"


def test_invalid_tone(clean_env):
    with pytest.raises(ValueError):
        ArchiveSettings(translation_tone="poetic")
    clean_env.setenv("ARCHIVE_TRANSLATION_TONE", "poetic")
    with pytest.raises(ValueError):
        load_settings()


def test_build_store_local_only(tmp_path):
    """Test that no database URL means a local-only store."""
    store = build_store(ArchiveSettings(data_path=str(tmp_path / "a.json")))
    assert store.local_only
    assert len(store.seed) == 8

    unseeded = build_store(ArchiveSettings(data_path=str(tmp_path / "b.json"), seed_on_empty=False))
    assert unseeded.seed == []


def test_build_store_remote(tmp_path):
    store = build_store(ArchiveSettings(
        data_path=str(tmp_path / "a.json"),
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'a.db'}",
    ))
    assert not store.local_only
    assert isinstance(store.remote, SqlNodeBackend)
