"""Provider interface, shared types and quality scoring."""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator, Iterator
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

import pybreaker

from ..core import ApiModel, LRUCache, StreamCounter, get_logger, safe_json_dumps
from ..monitoring import metrics_collector

logger = get_logger(__name__)

_EXHAUSTED = object()


class ProviderError(Exception):
    """Provider call failed."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ProviderNotConfiguredError(ProviderError):
    """Provider has no credentials."""


@dataclass(frozen=True)
class GenerationOptions:
    """Per-call generation options."""

    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    user_id: str | None = None
    request_id: str | None = None
    cache: bool = True

    def cache_key(self, provider: str, prompt: str, system_prompt: str) -> str:
        # Request and user ids are excluded so identical prompts share entries
        return safe_json_dumps(
            {
                "provider": provider,
                "prompt": prompt,
                "system": system_prompt,
                "model": self.model,
                "temperature": self.temperature,
                "max_tokens": self.max_tokens,
                "top_p": self.top_p,
            }
        )


class GenerationMetrics(ApiModel):
    """Token usage, latency and quality of one generation."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    latency: float = 0.0
    provider: str
    model: str
    cached: bool = False
    quality: int = 0


@dataclass(frozen=True)
class GenerationResult:
    content: str
    metrics: GenerationMetrics
    cached: bool = False


@dataclass(frozen=True)
class StreamChunk:
    """One piece of streamed output. The last chunk carries final metrics."""

    content: str
    is_first: bool = False
    is_last: bool = False
    metrics: dict[str, Any] | None = None


class ProviderHealth(ApiModel):
    available: bool
    latency: float | None = None
    error: str | None = None
    last_checked: datetime


def calculate_quality_score(content: str) -> int:
    """
    Heuristic 0-100 quality score for generated component code.

    Starts at 50; rewards structure, hooks, styling, length and a JSX
    return; penalises placeholders and undefined/null.
    """
    score = 50

    if "export" in content or "function" in content or "=>" in content:
        score += 10
    if "useState" in content or "useEffect" in content:
        score += 10
    if "className" in content or "style" in content:
        score += 10

    if len(content) > 500:
        score += 10
    if "return" in content and "</" in content:
        score += 10

    if "// TODO" in content or "..." in content:
        score -= 10
    if "undefined" in content or "null" in content:
        score -= 5

    return max(0, min(100, score))


def estimate_tokens(text: str, chars_per_token: int = 4) -> int:
    return -(-len(text) // chars_per_token)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


class AIProvider(ABC):
    """Code generation provider."""

    name: str = ""
    supported_models: tuple[str, ...] = ()
    model: str | None = None

    @property
    def default_model(self) -> str:
        return self.model or self.supported_models[0]

    def resolve_model(self, options: GenerationOptions) -> str:
        # Requests may name another vendor's model; fall back to our default
        if options.model and options.model in self.supported_models:
            return options.model
        return self.default_model

    @abstractmethod
    async def is_available(self) -> bool:
        """Cheap check that the provider can take requests."""

    @abstractmethod
    async def health(self) -> ProviderHealth:
        """Probe the provider and report latency or the failure."""

    @abstractmethod
    async def generate(
        self, prompt: str, system_prompt: str, options: GenerationOptions | None = None
    ) -> GenerationResult:
        """Generate a complete component."""

    @abstractmethod
    def stream(
        self, prompt: str, system_prompt: str, options: GenerationOptions | None = None
    ) -> AsyncGenerator[StreamChunk, None]:
        """Stream a component as content chunks, ending with a metrics chunk."""


class RemoteProvider(AIProvider):
    """
    Provider backed by a blocking vendor client.

    Subclasses implement the sync ``_complete``, ``_stream_text`` and
    ``_ping`` calls; this class runs them in the default executor behind
    a circuit breaker, handles the request cache and builds metrics.
    Health probes bypass the breaker to test actual connectivity.
    """

    def __init__(self, cache: LRUCache[GenerationResult] | None = None) -> None:
        self._cache = cache

        class BreakerListener(pybreaker.CircuitBreakerListener):
            """Listener for circuit breaker state changes."""

            def state_change(self, cb, old_state, new_state):
                logger.warning(
                    "breaker_state_change",
                    breaker=cb.name,
                    from_state=str(old_state),
                    to_state=str(new_state),
                )

        self._breaker = pybreaker.CircuitBreaker(
            fail_max=5,
            reset_timeout=30,
            name=f"provider-{self.name.lower()}",
            listeners=[BreakerListener()],
        )

    @property
    @abstractmethod
    def configured(self) -> bool:
        """Whether credentials are present."""

    @abstractmethod
    def _complete(
        self, prompt: str, system_prompt: str, model: str, options: GenerationOptions
    ) -> tuple[str, dict[str, int]]:
        """Blocking completion. Returns content and token usage."""

    @abstractmethod
    def _stream_text(
        self, prompt: str, system_prompt: str, model: str, options: GenerationOptions
    ) -> Iterator[str]:
        """Blocking text stream. The request must be sent on first ``next()``."""

    @abstractmethod
    def _ping(self) -> None:
        """Blocking connectivity probe, raises on failure."""

    async def is_available(self) -> bool:
        return self.configured

    async def health(self) -> ProviderHealth:
        if not self.configured:
            return ProviderHealth(available=False, error="API key not configured", last_checked=now_utc())

        start = time.perf_counter()
        try:
            await asyncio.get_running_loop().run_in_executor(None, self._ping)
        except Exception as e:
            logger.warning("health_check_failed", provider=self.name, error=str(e))
            return ProviderHealth(available=False, error=str(e), last_checked=now_utc())
        latency = (time.perf_counter() - start) * 1000
        return ProviderHealth(available=True, latency=latency, last_checked=now_utc())

    async def generate(
        self, prompt: str, system_prompt: str, options: GenerationOptions | None = None
    ) -> GenerationResult:
        options = options or GenerationOptions()
        if not self.configured:
            raise ProviderNotConfiguredError(f"{self.name} not configured")

        cache_key = options.cache_key(self.name, prompt, system_prompt)
        if options.cache and self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                metrics_collector.record_cache_hit("provider")
                logger.info("cache_hit", provider=self.name, request_id=options.request_id)
                return replace(cached, cached=True, metrics=cached.metrics.model_copy(update={"cached": True}))
            metrics_collector.record_cache_miss("provider")

        model = self.resolve_model(options)
        start = time.perf_counter()
        try:
            content, usage = await asyncio.get_running_loop().run_in_executor(
                None, self._breaker.call, self._complete, prompt, system_prompt, model, options
            )
        except Exception as e:
            metrics_collector.record_provider_call(self.name, "error", time.perf_counter() - start)
            logger.error("generation_failed", provider=self.name, request_id=options.request_id, error=str(e))
            raise

        duration = time.perf_counter() - start
        metrics_collector.record_provider_call(self.name, "success", duration)

        result = GenerationResult(
            content=content,
            metrics=GenerationMetrics(
                prompt_tokens=usage.get("prompt_tokens", 0),
                completion_tokens=usage.get("completion_tokens", 0),
                total_tokens=usage.get("total_tokens", 0),
                latency=duration * 1000,
                provider=self.name,
                model=model,
                quality=calculate_quality_score(content),
            ),
        )

        if options.cache and self._cache is not None and content:
            self._cache.set(cache_key, result)

        logger.info(
            "generation_complete",
            provider=self.name,
            request_id=options.request_id,
            latency_ms=round(result.metrics.latency, 1),
            quality=result.metrics.quality,
        )
        return result

    async def stream(
        self, prompt: str, system_prompt: str, options: GenerationOptions | None = None
    ) -> AsyncGenerator[StreamChunk, None]:
        options = options or GenerationOptions()
        if not self.configured:
            raise ProviderNotConfiguredError(f"{self.name} not configured")

        model = self.resolve_model(options)
        loop = asyncio.get_running_loop()
        start = time.perf_counter()
        counter = StreamCounter()
        content = ""

        gen = self._stream_text(prompt, system_prompt, model, options)
        try:
            # The breaker guards opening the stream; mid-stream failures still propagate
            chunk = await loop.run_in_executor(None, self._breaker.call, next, gen, _EXHAUSTED)
            while chunk is not _EXHAUSTED:
                if chunk:
                    yield StreamChunk(
                        content=chunk,
                        is_first=counter.count == 0,
                        metrics={"provider": self.name, "model": model, "cached": False}
                        if counter.count == 0
                        else None,
                    )
                    counter.track(chunk)
                    content += chunk
                chunk = await loop.run_in_executor(None, next, gen, _EXHAUSTED)
        except Exception as e:
            metrics_collector.record_provider_call(self.name, "error", time.perf_counter() - start)
            logger.error("stream_failed", provider=self.name, request_id=options.request_id, error=str(e))
            raise

        latency = (time.perf_counter() - start) * 1000
        metrics_collector.record_provider_call(self.name, "success", latency / 1000)
        quality = calculate_quality_score(content)

        yield StreamChunk(
            content="",
            is_last=True,
            metrics={"latency": latency, "quality": quality, "totalTokens": counter.estimated_tokens},
        )
        logger.info(
            "stream_complete",
            provider=self.name,
            request_id=options.request_id,
            latency_ms=round(latency, 1),
            content_length=counter.chars,
            quality=quality,
        )
