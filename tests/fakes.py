"""Test doubles shared across test modules."""

from collections.abc import AsyncGenerator

from vrux.providers import (
    AIProvider,
    GenerationMetrics,
    GenerationResult,
    ProviderError,
    ProviderHealth,
    StreamChunk,
    now_utc,
)


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FailingProvider(AIProvider):
    """Available provider whose calls always fail, optionally after some output."""

    supported_models = ("failing-v1",)

    def __init__(self, name: str = "Failing", partial: str = "") -> None:
        self.name = name
        self.partial = partial
        self.calls = 0

    async def is_available(self) -> bool:
        return True

    async def health(self) -> ProviderHealth:
        return ProviderHealth(available=True, latency=1, last_checked=now_utc())

    async def generate(self, prompt, system_prompt, options=None) -> GenerationResult:
        self.calls += 1
        raise ProviderError("boom", status=500)

    async def stream(self, prompt, system_prompt, options=None) -> AsyncGenerator[StreamChunk, None]:
        self.calls += 1
        if self.partial:
            yield StreamChunk(content=self.partial, is_first=True)
        raise ProviderError("stream broke", status=502)


class ScriptedProvider(AIProvider):
    """Returns the scripted contents in order, recording prompts."""

    name = "Scripted"
    supported_models = ("scripted-v1",)

    def __init__(self, *contents: str) -> None:
        self.contents = list(contents)
        self.prompts: list[str] = []

    async def is_available(self) -> bool:
        return True

    async def health(self) -> ProviderHealth:
        return ProviderHealth(available=True, last_checked=now_utc())

    async def generate(self, prompt, system_prompt, options=None) -> GenerationResult:
        self.prompts.append(prompt)
        content = self.contents.pop(0)
        return GenerationResult(
            content=content,
            metrics=GenerationMetrics(provider=self.name, model="scripted-v1", prompt_tokens=5, total_tokens=9),
        )

    async def stream(self, prompt, system_prompt, options=None) -> AsyncGenerator[StreamChunk, None]:
        result = await self.generate(prompt, system_prompt, options)
        yield StreamChunk(content=result.content, is_first=True)
        yield StreamChunk(content="", is_last=True, metrics={"quality": 80})
