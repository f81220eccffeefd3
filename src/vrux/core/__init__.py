"""Core utilities and infrastructure."""

from .config import Settings, get_settings
from .errors import (
    VruxError,
    ValidationError,
    AuthenticationError,
    SessionExpiredError,
    ForbiddenError,
    NotFoundError,
    ConflictError,
    RateLimitError,
    ApiLimitError,
    ProviderUnavailableError,
    GenerationError,
)
from .validate import (
    ApiModel,
    GenerateRequest,
    StreamRequest,
    DevGenerateRequest,
    ComponentValidation,
    contains_malicious_patterns,
    is_valid_email,
    sanitize_generated_code,
    validate_generated_component,
    check_component,
)
from .logging_config import configure_logging, get_logger, LogContext
from .stream import StreamCounter, split_chunks
from .json import dumps, loads, loads_object, safe_json_dumps, JSONParseError
from .hash import Algorithm, hash_string, hash_bytes
from .cache import LRUCache, Stats
from .rate_limit import RateLimiter


def create_container(settings: Settings | None = None):
    """Create dependency injection container (lazy import to avoid circular deps)."""
    from .container import create_container as _create_container

    return _create_container(settings)


__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "VruxError",
    "ValidationError",
    "AuthenticationError",
    "SessionExpiredError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "ApiLimitError",
    "ProviderUnavailableError",
    "GenerationError",
    # Validation
    "ApiModel",
    "GenerateRequest",
    "StreamRequest",
    "DevGenerateRequest",
    "ComponentValidation",
    "contains_malicious_patterns",
    "is_valid_email",
    "sanitize_generated_code",
    "validate_generated_component",
    "check_component",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # Streaming
    "StreamCounter",
    "split_chunks",
    # JSON
    "dumps",
    "loads",
    "loads_object",
    "safe_json_dumps",
    "JSONParseError",
    # DI
    "create_container",
    # Hashing
    "Algorithm",
    "hash_string",
    "hash_bytes",
    # Caching
    "LRUCache",
    "Stats",
    # Rate limiting
    "RateLimiter",
]
