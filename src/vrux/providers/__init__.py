"""AI code generation providers."""

from .base import (
    AIProvider,
    RemoteProvider,
    ProviderError,
    ProviderNotConfiguredError,
    GenerationOptions,
    GenerationMetrics,
    GenerationResult,
    StreamChunk,
    ProviderHealth,
    calculate_quality_score,
    now_utc,
)
from .openai import OpenAIProvider
from .gemini import GeminiProvider
from .mock import MockProvider
from .registry import ProviderChain, FallbackResult, StreamEvent, ProviderStats

__all__ = [
    "AIProvider",
    "RemoteProvider",
    "ProviderError",
    "ProviderNotConfiguredError",
    "GenerationOptions",
    "GenerationMetrics",
    "GenerationResult",
    "StreamChunk",
    "ProviderHealth",
    "calculate_quality_score",
    "now_utc",
    "OpenAIProvider",
    "GeminiProvider",
    "MockProvider",
    "ProviderChain",
    "FallbackResult",
    "StreamEvent",
    "ProviderStats",
]
