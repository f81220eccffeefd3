"""Configuration and container tests."""

import pytest
from pydantic import ValidationError

from vrux.core import Settings
from vrux.generation import ComponentGenerator
from vrux.operations import AlertingEngine, DashboardFeed
from vrux.providers import ProviderChain
from vrux.store import ShareStore, UserStore


@pytest.mark.unit
def test_settings_defaults():
    settings = Settings()

    assert settings.port == 8000
    assert settings.rate_limit_window == 60
    assert settings.rate_limit_requests == 10
    assert settings.session_cookie == "session"
    assert settings.max_variants == 3
    assert settings.enable_cache is True


@pytest.mark.unit
def test_settings_read_prefixed_env(monkeypatch):
    monkeypatch.setenv("VRUX_PORT", "9000")
    monkeypatch.setenv("VRUX_DEV_MODE", "true")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")

    settings = Settings()

    assert settings.port == 9000
    assert settings.dev_mode is True
    assert settings.openai_api_key == "sk-env"


@pytest.mark.unit
@pytest.mark.parametrize("field,value", [("temperature", 3.0), ("temperature", -0.1), ("max_variants", 4), ("port", 0)])
def test_settings_validation(field, value):
    with pytest.raises(ValidationError):
        Settings(**{field: value})


@pytest.mark.unit
def test_container_singletons(di_container):
    assert di_container.get(ProviderChain) is di_container.get(ProviderChain)
    assert di_container.get(UserStore) is di_container.get(UserStore)

    generator = di_container.get(ComponentGenerator)
    assert generator.chain is di_container.get(ProviderChain)
    assert di_container.get(DashboardFeed).engine is di_container.get(AlertingEngine)


@pytest.mark.unit
def test_container_wires_settings(di_container, settings):
    chain = di_container.get(ProviderChain)

    assert [p.name for p in chain.providers] == ["OpenAI", "Gemini", "Mock"]
    assert di_container.get(ShareStore).path.name == "shares.json"
    assert len(di_container.get(UserStore)) == 2
