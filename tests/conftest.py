"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient

from vrux.core import Settings, create_container
from vrux.main import create_app
from vrux.providers import GenerationOptions, MockProvider, ProviderChain
from vrux.store import ShareStore, TemplateStore, UserStore


# ============================================================================
# Pytest Hooks
# ============================================================================

def pytest_configure(config):
    """Keep real provider credentials out of the test run."""
    os.environ["OPENAI_API_KEY"] = ""
    os.environ["GOOGLE_API_KEY"] = ""
    os.environ["VRUX_LOG_LEVEL"] = "WARNING"


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def settings(tmp_path):
    """Test settings: no remote providers, no background alerting, no delays."""
    return Settings(
        openai_api_key="",
        gemini_api_key="",
        share_data_path=str(tmp_path / "shares.json"),
        dev_delay=0,
        mock_chunk_delay=0,
        enable_alerting=False,
        metrics_interval=60,
        services_interval=60,
        rate_limit_requests=50,
        log_level="WARNING",
    )


@pytest.fixture
def di_container(settings):
    """Dependency injection container for testing."""
    return create_container(settings)


@pytest.fixture
def options():
    return GenerationOptions(request_id="req_test")


# ============================================================================
# Provider Fixtures
# ============================================================================

@pytest.fixture
def mock_provider():
    return MockProvider(chunk_delay=0)


@pytest.fixture
def mock_chain(mock_provider):
    """Chain holding only the mock provider."""
    chain = ProviderChain()
    chain.register(mock_provider, priority=99)
    return chain


# ============================================================================
# Store Fixtures
# ============================================================================

@pytest.fixture
def template_store():
    return TemplateStore()


@pytest.fixture
def share_store(tmp_path):
    return ShareStore(tmp_path / "shares.json")


@pytest.fixture
def user_store():
    return UserStore(session_ttl=3600)


# ============================================================================
# App Fixtures
# ============================================================================

@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """Test client with the lifespan running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def demo_client(client):
    """Client signed in as the seeded demo account."""
    response = client.post("/api/auth/signin", json={"email": "demo@vrux.dev", "password": "demo123"})
    assert response.status_code == 200
    return client


@pytest.fixture
def container(client):
    return client.app.state.container


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture
def valid_component():
    return """() => {
  const [open, setOpen] = useState(false);
  return (
    <div className="p-4 rounded-lg">
      <button onClick={() => setOpen(!open)}>Toggle</button>
    </div>
  );
}"""
