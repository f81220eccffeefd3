"""
Component Generator
Single-shot generation with validation retry, and multi-variant streaming.
"""

import asyncio
import time
from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass, field
from typing import Any

from returns.result import Failure

from ..core import GenerationError, RateLimitError, check_component, get_logger
from ..core.id import new_request_id
from ..core.tracing import trace_operation_async
from ..monitoring import metrics_collector
from ..providers import GenerationMetrics, GenerationOptions, ProviderChain
from . import events
from .cleaning import clean_streamed_code, strip_fences
from .prompts import COMPONENT_SYSTEM_PROMPT, STREAM_SYSTEM_PROMPT, PromptBuilder
from .samples import DEV_PROVIDER, pick_sample

logger = get_logger(__name__)

MAX_VARIANTS = 3


@dataclass(frozen=True)
class GeneratedComponent:
    code: str
    provider: str
    usage: dict[str, int] = field(default_factory=dict)
    retried: bool = False
    metrics: GenerationMetrics | None = None


def _usage(metrics: GenerationMetrics | None) -> dict[str, int]:
    if metrics is None:
        return {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}
    return {
        "prompt_tokens": metrics.prompt_tokens,
        "completion_tokens": metrics.completion_tokens,
        "total_tokens": metrics.total_tokens,
    }


class ComponentGenerator:
    """Generates React components through the provider chain."""

    def __init__(self, chain: ProviderChain, dev_delay: float = 1.0, expose_errors: bool = False) -> None:
        self.chain = chain
        self.dev_delay = dev_delay
        self.expose_errors = expose_errors

    def _provider_failure(self, error: Exception) -> Exception:
        status = getattr(error, "status", None)
        if status == 429:
            return RateLimitError("Rate limit exceeded. Please try again later.")
        if status == 401:
            return GenerationError("AI service authentication failed", code="PROVIDER_AUTH_FAILED")
        message = str(error) if self.expose_errors else "Failed to generate UI. Please try again."
        return GenerationError(message)

    async def generate_component(self, prompt: str, options: GenerationOptions | None = None) -> GeneratedComponent:
        """
        Generate one validated component.

        Generated code that fails validation is regenerated once, with the
        same provider, from a stricter prompt.

        Raises:
            GenerationError: Providers failed, or the retry is still invalid
            RateLimitError: The provider reported a rate limit
        """
        options = options or GenerationOptions()
        start = time.perf_counter()

        async with trace_operation_async("generate_component", request_id=options.request_id):
            try:
                result = await self.chain.generate_with_fallback(prompt, COMPONENT_SYSTEM_PROMPT, options)
            except Exception as e:
                metrics_collector.record_generation("error", time.perf_counter() - start)
                metrics_collector.record_error(type(e).__name__, "generator")
                raise self._provider_failure(e) from e

            checked = check_component(strip_fences(result.content))
            retried = False
            metrics = result.metrics

            if isinstance(checked, Failure):
                logger.error(
                    "validation_failed",
                    request_id=options.request_id,
                    errors=list(checked.failure().errors),
                    prompt=prompt[:100],
                )
                retried = True
                provider = self.chain.get(result.provider)
                try:
                    retry = await provider.generate(PromptBuilder.retry(prompt), COMPONENT_SYSTEM_PROMPT, options)
                except Exception as e:
                    metrics_collector.record_generation("error", time.perf_counter() - start)
                    raise self._provider_failure(e) from e

                checked = check_component(strip_fences(retry.content))
                if isinstance(checked, Failure):
                    metrics_collector.record_generation("invalid", time.perf_counter() - start)
                    raise GenerationError(
                        "Failed to generate valid component code",
                        code="INVALID_COMPONENT",
                        details=list(checked.failure().errors),
                    )
                metrics = retry.metrics

            code = checked.unwrap()

        duration = time.perf_counter() - start
        metrics_collector.record_generation("success", duration)
        if metrics is not None:
            metrics_collector.record_generation_tokens(metrics.prompt_tokens, metrics.completion_tokens)
            metrics_collector.record_quality(metrics.quality)

        logger.info(
            "component_generated",
            request_id=options.request_id,
            provider=result.provider,
            prompt_length=len(prompt),
            response_length=len(code),
            retried=retried,
            duration_ms=round(duration * 1000, 2),
        )
        return GeneratedComponent(
            code=code,
            provider=result.provider,
            usage=_usage(metrics),
            retried=retried,
            metrics=metrics,
        )

    async def stream_variants(
        self,
        prompt: str,
        variants: int = MAX_VARIANTS,
        *,
        model: str | None = None,
        temperature: float | None = None,
        style: str | None = None,
        request_id: str | None = None,
        user_id: str | None = None,
        providers: list[str] | None = None,
        remaining_requests: Callable[[], int] | None = None,
    ) -> AsyncGenerator[events.Frame, None]:
        """
        Stream up to three component variants as frames.

        Emits ``metadata`` first, then per variant ``variant_start``,
        ``provider``, ``content``... and ``variant_complete``. A failed
        variant yields ``variant_error`` and the next variant starts. The
        stream ends with ``done``, or ``error`` on an unexpected failure.

        Args:
            prompt: User prompt
            variants: Variants to generate, capped at three
            model: Preferred model, passed to providers
            temperature: Sampling temperature
            style: Style name reported for every variant
            request_id: Request ID, generated when missing
            user_id: Caller, forwarded to providers
            providers: Provider names reported in the metadata frame
            remaining_requests: Reads the caller's remaining rate-limit budget
        """
        request_id = request_id or new_request_id()
        variant_count = min(variants, MAX_VARIANTS)
        start = time.perf_counter()

        try:
            if providers is None:
                providers = await self.chain.available_providers()
            yield self._emit(events.metadata(request_id, variant_count, providers))

            options = GenerationOptions(
                model=model,
                temperature=temperature,
                user_id=user_id,
                request_id=request_id,
            )
            for index in range(variant_count):
                variant_style = PromptBuilder.variant_style(index, style)
                variant_prompt = PromptBuilder.variant(prompt, index, variant_count)
                yield self._emit(events.variant_start(index, variant_style))

                full_content = ""
                provider_used = ""
                metrics: dict[str, Any] = {}
                try:
                    async for chunk in self.chain.stream_with_fallback(variant_prompt, STREAM_SYSTEM_PROMPT, options):
                        if chunk.provider:
                            # A fallback provider restarts the variant
                            provider_used = chunk.provider
                            full_content = ""
                            yield self._emit(events.provider(index, chunk.provider))
                        if chunk.content:
                            full_content += chunk.content
                            yield self._emit(events.content(index, chunk.content))
                        if chunk.metrics:
                            metrics.update(chunk.metrics)
                except Exception as e:
                    logger.error("variant_failed", request_id=request_id, variant=index, error=str(e))
                    metrics_collector.record_error(type(e).__name__, "stream")
                    yield self._emit(events.variant_error(index))
                    continue

                if "quality" in metrics:
                    metrics_collector.record_quality(int(metrics["quality"]))
                yield self._emit(
                    events.variant_complete(index, clean_streamed_code(full_content), provider_used, metrics, variant_style)
                )
        except Exception as e:
            logger.error("stream_generation_failed", request_id=request_id, error=str(e), exc_info=True)
            metrics_collector.record_generation("error", time.perf_counter() - start, method="stream")
            message = str(e) if self.expose_errors else "An unexpected error occurred. Please try again."
            yield self._emit(events.error(message, request_id))
            return

        total_ms = (time.perf_counter() - start) * 1000
        metrics_collector.record_generation("success", total_ms / 1000, method="stream")
        logger.info(
            "stream_generated",
            request_id=request_id,
            prompt_length=len(prompt),
            variant_count=variant_count,
            duration_ms=round(total_ms, 2),
            user_id=user_id,
        )
        remaining = remaining_requests() if remaining_requests else 0
        yield self._emit(events.done(remaining, total_ms, request_id))

    @staticmethod
    def _emit(frame: events.Frame) -> events.Frame:
        metrics_collector.record_stream_event(frame["type"])
        return frame

    async def dev_component(self, prompt: str) -> GeneratedComponent:
        """Canned component after a simulated delay; no provider involved."""
        await asyncio.sleep(self.dev_delay)
        return GeneratedComponent(code=pick_sample(prompt), provider=DEV_PROVIDER, usage=_usage(None))
