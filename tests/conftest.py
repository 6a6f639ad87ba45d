"""Shared fixtures: isolated config, bot store and FastAPI test client."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from rawbot.config import RawbotConfig
from rawbot.models.bot import BotRecord
from rawbot.stores.bot_store import BotStore

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def graph_response(payload):
    """Fake requests.Response whose .json() returns payload."""
    response = MagicMock()
    response.status_code = 400 if isinstance(payload, dict) and "error" in payload else 200
    response.json.return_value = payload
    return response


@pytest.fixture
def config(tmp_path):
    return RawbotConfig(
        app_id="app-123",
        app_secret="secret-456",
        verify_token="verify-me",
        generative_api_key="gemini-key",
        redirect_base_url="https://rawbot.test",
        data_dir=tmp_path / "data",
    )


@pytest.fixture
def store(config):
    return BotStore(config.data_dir)


@pytest.fixture
def bot(store):
    record = BotRecord(
        id="bot-1",
        store_name="Ward Flowers",
        bot_name="Ward Assistant",
        license_key="RWB-1234-ABCD",
        subscription_end_date=(NOW + timedelta(days=30)).isoformat(),
        is_active=True,
        knowledge_base="Opening hours: 9-5",
        tone_value=50,
    )
    return store.put(record)


@pytest.fixture
def client(config, store):
    from web.main import create_app

    app = create_app(config, store=store)
    return TestClient(app)
