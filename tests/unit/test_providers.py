"""Tests for AI providers and the provider chain."""

import httpx
import pybreaker
import pytest
import respx

from vrux.core import LRUCache, loads
from vrux.providers import (
    GenerationMetrics,
    GenerationOptions,
    OpenAIProvider,
    ProviderChain,
    ProviderError,
    ProviderNotConfiguredError,
    calculate_quality_score,
)
from vrux.providers.mock import BUTTON_COMPONENT, CARD_COMPONENT, FORM_COMPONENT, pick_component

from ..fakes import FailingProvider

OPENAI_URL = "https://api.test/v1"


def openai_completion(content: str) -> dict:
    return {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 12, "completion_tokens": 34, "total_tokens": 46},
    }


# ============================================================================
# Quality score
# ============================================================================

@pytest.mark.unit
def test_quality_score_bounds():
    assert calculate_quality_score("") == 50
    assert 0 <= calculate_quality_score("undefined null // TODO ...") <= 100


@pytest.mark.unit
def test_quality_score_rewards_structure(valid_component):
    assert calculate_quality_score(valid_component) > calculate_quality_score("<div>hi</div>")


@pytest.mark.unit
def test_quality_score_penalises_placeholders():
    base = "const A = () => { return (<div className='x'>ok</div>) }"
    assert calculate_quality_score(base + " // TODO") == calculate_quality_score(base) - 10


# ============================================================================
# Mock provider
# ============================================================================

@pytest.mark.unit
@pytest.mark.parametrize(
    "prompt,expected",
    [
        ("A big shiny Button", BUTTON_COMPONENT),
        ("a pricing card", CARD_COMPONENT),
        ("contact form with validation", FORM_COMPONENT),
    ],
)
def test_mock_picks_component_by_keyword(prompt, expected):
    assert pick_component(prompt) == expected


@pytest.mark.unit
def test_mock_generic_component_embeds_prompt():
    prompt = "a timeline of " + "events " * 30
    code = pick_component(prompt)

    assert prompt[:100] + "..." in code
    assert "{prompt_excerpt}" not in code


@pytest.mark.unit
async def test_mock_generate(mock_provider):
    result = await mock_provider.generate("a button", "system")

    assert result.content == BUTTON_COMPONENT
    assert result.metrics.provider == "Mock"
    assert result.metrics.model == "mock-v1"
    assert result.metrics.total_tokens > 0


@pytest.mark.unit
async def test_mock_stream_chunks_and_final_metrics(mock_provider):
    chunks = [chunk async for chunk in mock_provider.stream("a card", "system")]

    assert chunks[0].is_first
    assert chunks[0].metrics["provider"] == "Mock"
    assert all(len(c.content) <= 50 for c in chunks)
    assert "".join(c.content for c in chunks) == CARD_COMPONENT
    assert chunks[-1].is_last
    assert "quality" in chunks[-1].metrics


# ============================================================================
# OpenAI provider
# ============================================================================

@pytest.mark.unit
async def test_openai_not_configured():
    provider = OpenAIProvider("", base_url=OPENAI_URL)

    assert await provider.is_available() is False
    health = await provider.health()
    assert health.available is False
    assert health.error == "API key not configured"
    with pytest.raises(ProviderNotConfiguredError):
        await provider.generate("prompt", "system")


@pytest.mark.unit
@respx.mock
async def test_openai_generate(valid_component):
    route = respx.post(f"{OPENAI_URL}/chat/completions").mock(
        return_value=httpx.Response(200, json=openai_completion(valid_component))
    )
    provider = OpenAIProvider("sk-test", base_url=OPENAI_URL)

    result = await provider.generate("a toggle", "system", GenerationOptions(model="gpt-4", user_id="usr_1"))

    assert result.content == valid_component
    assert result.metrics.total_tokens == 46
    assert result.metrics.model == "gpt-4"
    sent = route.calls.last.request
    assert sent.headers["Authorization"] == "Bearer sk-test"
    body = loads(sent.content)
    assert body["user"] == "usr_1"
    assert body["messages"][0] == {"role": "system", "content": "system"}


@pytest.mark.unit
@respx.mock
async def test_openai_unknown_model_uses_default(valid_component):
    route = respx.post(f"{OPENAI_URL}/chat/completions").mock(
        return_value=httpx.Response(200, json=openai_completion(valid_component))
    )
    provider = OpenAIProvider("sk-test", base_url=OPENAI_URL, model="gpt-4o")

    await provider.generate("a toggle", "system", GenerationOptions(model="gemini-2.0-flash-exp"))

    assert loads(route.calls.last.request.content)["model"] == "gpt-4o"


@pytest.mark.unit
@respx.mock
async def test_openai_error_status_carried():
    respx.post(f"{OPENAI_URL}/chat/completions").mock(return_value=httpx.Response(429, json={"error": "slow"}))
    provider = OpenAIProvider("sk-test", base_url=OPENAI_URL)

    with pytest.raises(ProviderError) as exc_info:
        await provider.generate("a toggle", "system")
    assert exc_info.value.status == 429


@pytest.mark.unit
@respx.mock
async def test_openai_cache_hit(valid_component):
    route = respx.post(f"{OPENAI_URL}/chat/completions").mock(
        return_value=httpx.Response(200, json=openai_completion(valid_component))
    )
    provider = OpenAIProvider("sk-test", base_url=OPENAI_URL, cache=LRUCache(max_size=10))

    first = await provider.generate("a toggle", "system", GenerationOptions(request_id="req_1"))
    second = await provider.generate("a toggle", "system", GenerationOptions(request_id="req_2"))

    assert route.call_count == 1
    assert first.cached is False
    assert second.cached is True
    assert second.metrics.cached is True
    assert second.content == first.content


@pytest.mark.unit
@respx.mock
async def test_openai_stream():
    body = (
        'data: {"choices":[{"delta":{"content":"() => "}}]}\n\n'
        "data: not-json\n\n"
        'data: {"choices":[{"delta":{"content":"<div/>"}}]}\n\n'
        "data: [DONE]\n\n"
    )
    respx.post(f"{OPENAI_URL}/chat/completions").mock(
        return_value=httpx.Response(200, content=body.encode(), headers={"content-type": "text/event-stream"})
    )
    provider = OpenAIProvider("sk-test", base_url=OPENAI_URL)

    chunks = [chunk async for chunk in provider.stream("a toggle", "system")]

    assert [c.content for c in chunks if c.content] == ["() => ", "<div/>"]
    assert chunks[0].is_first
    assert chunks[-1].is_last
    assert chunks[-1].metrics["totalTokens"] == 3


@pytest.mark.unit
@respx.mock
async def test_openai_breaker_opens_after_repeated_failures():
    respx.post(f"{OPENAI_URL}/chat/completions").mock(return_value=httpx.Response(500))
    provider = OpenAIProvider("sk-test", base_url=OPENAI_URL)

    for _ in range(5):
        with pytest.raises((ProviderError, pybreaker.CircuitBreakerError)):
            await provider.generate("a toggle", "system", GenerationOptions(cache=False))

    assert provider._breaker.current_state == "open"
    with pytest.raises(pybreaker.CircuitBreakerError):
        await provider.generate("a toggle", "system", GenerationOptions(cache=False))


@pytest.mark.unit
@respx.mock
async def test_openai_health_probe():
    respx.get(f"{OPENAI_URL}/models").mock(return_value=httpx.Response(200, json={"data": []}))
    provider = OpenAIProvider("sk-test", base_url=OPENAI_URL)

    health = await provider.health()

    assert health.available is True
    assert health.latency is not None


# ============================================================================
# Provider chain
# ============================================================================

@pytest.mark.unit
async def test_chain_orders_by_priority(mock_provider):
    chain = ProviderChain()
    chain.register(mock_provider, priority=99)
    chain.register(FailingProvider(), priority=1)

    assert [p.name for p in chain.providers] == ["Failing", "Mock"]
    assert chain.get("mock") is mock_provider


@pytest.mark.unit
async def test_chain_generate_falls_back(mock_provider):
    failing = FailingProvider()
    chain = ProviderChain()
    chain.register(failing, priority=1)
    chain.register(mock_provider, priority=99)

    result = await chain.generate_with_fallback("a button", "system")

    assert result.provider == "Mock"
    assert failing.calls == 1
    assert chain.stats["Failing"].failures == 1
    assert chain.stats["Mock"].calls == 1
    assert chain.error_rate == 50.0


@pytest.mark.unit
async def test_chain_skips_unconfigured_providers(mock_provider):
    chain = ProviderChain()
    chain.register(OpenAIProvider("", base_url=OPENAI_URL), priority=1)
    chain.register(mock_provider, priority=99)

    assert await chain.available_providers() == ["Mock"]
    result = await chain.generate_with_fallback("a card", "system")
    assert result.provider == "Mock"
    assert chain.stats["OpenAI"].calls == 0


@pytest.mark.unit
async def test_chain_raises_last_error_when_all_fail():
    chain = ProviderChain()
    chain.register(FailingProvider("A"), priority=1)
    chain.register(FailingProvider("B"), priority=2)

    with pytest.raises(ProviderError):
        await chain.generate_with_fallback("a card", "system")


@pytest.mark.unit
async def test_chain_stream_announces_each_attempt(mock_provider):
    chain = ProviderChain()
    chain.register(FailingProvider(partial="partial output"), priority=1)
    chain.register(mock_provider, priority=99)

    events = [event async for event in chain.stream_with_fallback("a button", "system")]
    announcements = [e.provider for e in events if e.provider]

    assert announcements == ["Failing", "Mock"]
    after_mock = events[[e.provider for e in events].index("Mock") + 1 :]
    assert "".join(e.content for e in after_mock) == BUTTON_COMPONENT


@pytest.mark.unit
async def test_chain_preferred_provider(mock_provider):
    chain = ProviderChain()
    chain.register(FailingProvider(), priority=1)
    chain.register(mock_provider, priority=99)

    assert (await chain.get_available_provider("Mock")) is mock_provider
    assert (await chain.get_available_provider()).name == "Failing"


@pytest.mark.unit
async def test_chain_all_health_reports_failures(mock_provider):
    class BrokenHealth(FailingProvider):
        async def health(self):
            raise RuntimeError("probe crashed")

    chain = ProviderChain()
    chain.register(BrokenHealth("Broken"), priority=1)
    chain.register(mock_provider, priority=99)

    health = await chain.all_health()

    assert health["Broken"].available is False
    assert health["Broken"].error == "probe crashed"
    assert health["Mock"].available is True


@pytest.mark.unit
def test_generation_metrics_camel_case():
    metrics = GenerationMetrics(provider="Mock", model="mock-v1", prompt_tokens=3)
    assert metrics.model_dump(by_alias=True)["promptTokens"] == 3
