"""
Provider Chain
Priority-ordered provider selection with fallback
"""

import asyncio
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any

from ..core import get_logger
from .base import AIProvider, GenerationMetrics, GenerationOptions, ProviderHealth, now_utc

logger = get_logger(__name__)


@dataclass(frozen=True)
class FallbackResult:
    content: str
    provider: str
    metrics: GenerationMetrics | None = None


@dataclass(frozen=True)
class StreamEvent:
    """Chain stream item: a provider announcement or a provider chunk."""

    content: str = ""
    provider: str | None = None
    metrics: dict[str, Any] | None = None


@dataclass
class ProviderStats:
    """Call outcomes per provider, read by the alerting engine."""

    calls: int = 0
    failures: int = 0

    @property
    def error_rate(self) -> float:
        """Failure percentage."""
        return self.failures * 100.0 / self.calls if self.calls else 0.0


@dataclass(order=True)
class _Entry:
    priority: int
    provider: AIProvider = field(compare=False)


class ProviderChain:
    """
    Ordered set of providers.

    Lower priority numbers are tried first. The mock provider is
    registered last and acts as the final fallback.
    """

    def __init__(self) -> None:
        self._entries: list[_Entry] = []
        self.stats: dict[str, ProviderStats] = {}

    def register(self, provider: AIProvider, priority: int) -> None:
        """
        Register a provider.

        Args:
            provider: Provider instance
            priority: Position in the chain, lowest first
        """
        if provider.name in self.stats:
            logger.warning("provider_already_registered", provider=provider.name)
            return
        self._entries.append(_Entry(priority, provider))
        self._entries.sort()
        self.stats[provider.name] = ProviderStats()
        logger.info("provider_registered", provider=provider.name, priority=priority)

    @property
    def providers(self) -> list[AIProvider]:
        return [entry.provider for entry in self._entries]

    def get(self, name: str) -> AIProvider | None:
        lowered = name.lower()
        return next((p for p in self.providers if p.name.lower() == lowered), None)

    def _record(self, provider: AIProvider, ok: bool) -> None:
        stats = self.stats[provider.name]
        stats.calls += 1
        if not ok:
            stats.failures += 1

    @property
    def error_rate(self) -> float:
        """Failure percentage across all providers."""
        calls = sum(s.calls for s in self.stats.values())
        failures = sum(s.failures for s in self.stats.values())
        return failures * 100.0 / calls if calls else 0.0

    async def get_available_provider(self, preferred: str | None = None) -> AIProvider:
        """
        Pick a provider for a request.

        The preferred provider wins when it is available. Otherwise the
        first provider that is available and reports healthy is used, with
        the last registered provider as the fallback.
        """
        if preferred:
            candidate = self.get(preferred)
            if candidate is not None and await candidate.is_available():
                logger.info("provider_selected", provider=candidate.name, preferred=True)
                return candidate

        for provider in self.providers:
            try:
                if await provider.is_available():
                    health = await provider.health()
                    if health.available:
                        logger.info("provider_selected", provider=provider.name, latency=health.latency)
                        return provider
            except Exception as e:
                logger.warning("provider_health_failed", provider=provider.name, error=str(e))

        fallback = self.providers[-1]
        logger.info("providers_unavailable", fallback=fallback.name)
        return fallback

    async def available_providers(self) -> list[str]:
        return [p.name for p in self.providers if await p.is_available()]

    async def generate_with_fallback(
        self, prompt: str, system_prompt: str, options: GenerationOptions | None = None
    ) -> FallbackResult:
        """
        Generate with the first provider that succeeds.

        Raises:
            Exception: The last provider error when every provider fails
        """
        options = options or GenerationOptions()
        last_error: Exception | None = None

        for provider in self.providers:
            if not await provider.is_available():
                continue
            logger.info("generation_attempt", provider=provider.name, request_id=options.request_id)
            try:
                result = await provider.generate(prompt, system_prompt, options)
            except Exception as e:
                self._record(provider, ok=False)
                last_error = e
                logger.error("provider_failed", provider=provider.name, request_id=options.request_id, error=str(e))
                continue
            self._record(provider, ok=True)
            return FallbackResult(content=result.content, provider=provider.name, metrics=result.metrics)

        raise last_error or RuntimeError("All AI providers failed")

    async def stream_with_fallback(
        self, prompt: str, system_prompt: str, options: GenerationOptions | None = None
    ) -> AsyncGenerator[StreamEvent, None]:
        """
        Stream from the first provider that completes.

        Each attempt starts with a ``StreamEvent(provider=name)``
        announcement. A provider that fails mid-stream hands over to the
        next one, so consumers should reset their buffer on every
        announcement.
        """
        options = options or GenerationOptions()
        last_error: Exception | None = None

        for provider in self.providers:
            if not await provider.is_available():
                continue
            logger.info("stream_attempt", provider=provider.name, request_id=options.request_id)
            yield StreamEvent(provider=provider.name)
            try:
                async for chunk in provider.stream(prompt, system_prompt, options):
                    yield StreamEvent(content=chunk.content, metrics=chunk.metrics)
            except Exception as e:
                self._record(provider, ok=False)
                last_error = e
                logger.error("provider_stream_failed", provider=provider.name, request_id=options.request_id, error=str(e))
                continue
            self._record(provider, ok=True)
            return

        raise last_error or RuntimeError("All AI providers failed to stream")

    async def all_health(self) -> dict[str, ProviderHealth]:
        """Check every provider concurrently."""

        async def check(provider: AIProvider) -> ProviderHealth:
            try:
                return await provider.health()
            except Exception as e:
                return ProviderHealth(available=False, error=str(e) or "Health check failed", last_checked=now_utc())

        results = await asyncio.gather(*(check(p) for p in self.providers))
        return {p.name: health for p, health in zip(self.providers, results)}

    def close(self) -> None:
        for provider in self.providers:
            close = getattr(provider, "close", None)
            if close is not None:
                close()
