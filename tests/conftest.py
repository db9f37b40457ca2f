import pytest
from dotenv import load_dotenv

from context.conversation_store import ConversationStore

# Load environment variables from .env file for tests
load_dotenv()


@pytest.fixture
def store():
    """Fresh conversation store per test (never the process singleton)."""
    return ConversationStore()


@pytest.fixture
def api_env(monkeypatch):
    """Configure a known API key for the protected routes."""
    monkeypatch.setenv("API_KEYS", "test-key-1,test-key-2")
    return {"X-API-Key": "test-key-1"}
