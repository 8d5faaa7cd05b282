"""Fixtures for API tests."""
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from bilingual_archive.api.auth import PASSCODE_HEADER
from bilingual_archive.api.main import create_app
from bilingual_archive.config import ArchiveSettings
from bilingual_archive.translation import TranslationService

PASSCODE = "770"


@pytest.fixture
def settings(tmp_path):
    """Local-only settings in a temp dir."""
    return ArchiveSettings(
        data_path=str(tmp_path / "archive.json"),
        admin_passcode=PASSCODE,
        seed_on_empty=False,
    )


@pytest.fixture
def gemini():
    """Mock Gemini client that always answers."""
    client = Mock()
    client.generate = AsyncMock(return_value="<p>Translated</p>")
    client.close = AsyncMock()
    return client


@pytest.fixture
def client(settings, gemini):
    """Create test client."""
    app = create_app(settings, translator=TranslationService(gemini))
    with TestClient(app) as client:
        yield client


@pytest.fixture
def admin():
    """Headers carrying the admin passcode."""
    return {PASSCODE_HEADER: PASSCODE}
