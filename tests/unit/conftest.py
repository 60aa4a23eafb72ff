import pytest
from loguru import logger

from app.utils.config import Settings


@pytest.fixture
def make_settings(tmp_path):
    """Build Settings rooted in ``tmp_path`` with the directory layout in place."""

    def _make(**overrides):
        values = {
            "api_url": "https://api.test/remove",
            "api_key": "secret-key",
            "source_dir": tmp_path / "source",
            "destination_dir": tmp_path / "destination",
            "processed_dir": tmp_path / "processed",
            "settle_grace_period": 0,
        }
        values.update(overrides)
        settings = Settings(**values)
        for directory in settings.get_directories():
            directory.mkdir(parents=True, exist_ok=True)
        return settings

    return _make


@pytest.fixture
def log_messages():
    """Capture loguru messages emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
