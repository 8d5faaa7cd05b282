"""Settings for the archive and factories that wire them up."""
import os
from dataclasses import dataclass, replace
from typing import Any

from .storage.local_store import LocalJsonBackend
from .storage.node_store import NodeStore, now_ms
from .storage.seed import default_seed
from .storage.sql_store import SqlNodeBackend

TRANSLATION_TONES = ("scholarly", "literal", "modern")
TRANSLATION_COMPLEXITIES = ("detailed", "concise")


@dataclass
class ArchiveSettings:
    """Configuration for the archive service."""
    data_path: str = "archive_data.json"
    database_url: str = ""
    admin_passcode: str = "770"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout: int = 60
    translation_tone: str = "scholarly"
    translation_complexity: str = "detailed"
    seed_on_empty: bool = True
    log_level: str = "INFO"

    def __post_init__(self):
        if self.translation_tone not in TRANSLATION_TONES:
            raise ValueError(
                f"translation_tone must be one of {TRANSLATION_TONES}, got {self.translation_tone!r}"
            )
        if self.translation_complexity not in TRANSLATION_COMPLEXITIES:
            raise ValueError(
                f"translation_complexity must be one of {TRANSLATION_COMPLEXITIES}, "
                f"got {self.translation_complexity!r}"
            )


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings(**overrides: Any) -> ArchiveSettings:
    """Build settings from environment variables.

    Args:
        **overrides: Field values that take precedence over the environment

    Returns:
        ArchiveSettings: Resolved settings
    """
    settings = ArchiveSettings(
        data_path=os.environ.get("ARCHIVE_DATA_PATH", "archive_data.json"),
        database_url=os.environ.get("ARCHIVE_DATABASE_URL", ""),
        admin_passcode=os.environ.get("ARCHIVE_ADMIN_PASSCODE", "770"),
        gemini_api_key=os.environ.get("GEMINI_API_KEY", ""),
        gemini_model=os.environ.get("GEMINI_MODEL", "gemini-1.5-flash"),
        gemini_base_url=os.environ.get(
            "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        ),
        gemini_timeout=int(os.environ.get("GEMINI_TIMEOUT", "60")),
        translation_tone=os.environ.get("ARCHIVE_TRANSLATION_TONE", "scholarly"),
        translation_complexity=os.environ.get("ARCHIVE_TRANSLATION_COMPLEXITY", "detailed"),
        seed_on_empty=_env_bool("ARCHIVE_SEED_ON_EMPTY", True),
        log_level=os.environ.get("ARCHIVE_LOG_LEVEL", "INFO"),
    )
    return replace(settings, **overrides) if overrides else settings


def build_store(settings: ArchiveSettings) -> NodeStore:
    """Create a node store for the given settings.

    A database URL makes the store remote-primary; otherwise it is local-only.
    """
    cache = LocalJsonBackend(settings.data_path)
    remote = SqlNodeBackend(settings.database_url) if settings.database_url else None
    seed = default_seed(now_ms()) if settings.seed_on_empty else []
    return NodeStore(cache=cache, remote=remote, seed=seed)
