"""Input validation with strong typing.

Request models for the generation endpoints, prompt screening, and
validation/sanitizing of generated component code.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from returns.result import Failure, Result, Success

MIN_PROMPT_LENGTH = 10
MAX_PROMPT_LENGTH = 2000
MAX_STREAM_PROMPT_LENGTH = 1000
MAX_VARIANTS = 3
MIN_PASSWORD_LENGTH = 8

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MALICIOUS_PATTERNS = [
    re.compile(r"<script[\s\S]*?>[\s\S]*?</script>", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"eval\s*\(", re.IGNORECASE),
    re.compile(r"document\.cookie", re.IGNORECASE),
    re.compile(r"window\.location", re.IGNORECASE),
    re.compile(r"innerHTML\s*=", re.IGNORECASE),
    re.compile(r"__proto__|constructor|prototype", re.IGNORECASE),
    re.compile(r"require\s*\(['\"]child_process['\"]\)", re.IGNORECASE),
    re.compile(r"process\.env", re.IGNORECASE),
    re.compile(r"fs\.|require\(['\"]fs['\"]\)", re.IGNORECASE),
]

_SCRIPT_TAG = re.compile(r"<script[\s\S]*?>[\s\S]*?</script>", re.IGNORECASE)
_INLINE_HANDLER = re.compile(r"on\w+\s*=\s*[\"'][^\"']*[\"']", re.IGNORECASE)
_JS_URL = re.compile(r"javascript:[^\"'\s]*", re.IGNORECASE)
_DOM_ACCESS = re.compile(r"(document\.|window\.|eval\(|Function\()", re.IGNORECASE)
_JSX_ELEMENT = re.compile(r"<(\w+)([^>]*)>")

SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self'; script-src 'self' 'unsafe-inline' 'unsafe-eval'; "
        "style-src 'self' 'unsafe-inline';"
    ),
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

GenerateModel = Literal["gpt-4o", "gpt-4", "claude-3-opus", "claude-3-sonnet", "gemini-2.0-flash-exp"]
VariantStyle = Literal["modern", "bold", "elegant"]


class ApiModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestValidator(ApiModel):
    """Base validator with strict configuration."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        strict=True,
        validate_assignment=True,
        extra="ignore",
        frozen=True,  # Immutable by default
    )


def contains_malicious_patterns(text: str) -> bool:
    """Check text against the known script-injection and escape patterns."""
    return any(pattern.search(text) for pattern in MALICIOUS_PATTERNS)


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


class GenerateRequest(RequestValidator):
    """Validated single-component generation request."""

    prompt: str = Field(min_length=MIN_PROMPT_LENGTH, max_length=MAX_PROMPT_LENGTH)
    model: GenerateModel | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, ge=100, le=4000)

    @field_validator("prompt")
    @classmethod
    def validate_prompt(cls, v: str) -> str:
        """Reject prompts carrying injection patterns."""
        if contains_malicious_patterns(v):
            raise ValueError("Prompt contains potentially harmful content")
        return v


class StreamRequest(RequestValidator):
    """Validated multi-variant streaming request."""

    prompt: str = Field(min_length=1, max_length=MAX_STREAM_PROMPT_LENGTH)
    variants: int = Field(default=MAX_VARIANTS, ge=1, le=MAX_VARIANTS)
    model: str | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    style: VariantStyle | None = None

    @field_validator("prompt")
    @classmethod
    def validate_prompt(cls, v: str) -> str:
        """Ensure prompt is non-empty after stripping."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Prompt cannot be empty")
        return stripped


class DevGenerateRequest(ApiModel):
    """Development-mode request; only presence of a prompt is checked."""

    prompt: str | None = None


@dataclass(frozen=True)
class ComponentRejection:
    """Why generated code was rejected."""

    message: str
    errors: tuple[str, ...] = ()


@dataclass
class ComponentValidation:
    """Outcome of validating generated component code."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    sanitized: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"isValid": self.is_valid, "errors": self.errors, "sanitized": self.sanitized}


def sanitize_generated_code(code: str) -> str:
    """
    Strip executable content from generated code.

    Removes script tags and inline string handlers, neutralises
    ``javascript:`` URLs and drops direct DOM/eval access.
    """
    code = _SCRIPT_TAG.sub("", code)
    code = _INLINE_HANDLER.sub("", code)
    code = _JS_URL.sub("#", code)
    code = _DOM_ACCESS.sub("", code)
    return code


def validate_generated_component(code: str) -> ComponentValidation:
    """
    Validate generated component code.

    Args:
        code: Component source with fences already stripped

    Returns:
        Validation outcome with the sanitized code
    """
    errors: list[str] = []

    if "return" not in code and "=>" not in code:
        errors.append("Component must return JSX")

    if contains_malicious_patterns(code):
        errors.append("Code contains potentially harmful patterns")

    if not _JSX_ELEMENT.search(code):
        errors.append("No valid JSX elements found")

    return ComponentValidation(
        is_valid=not errors,
        errors=errors,
        sanitized=sanitize_generated_code(code),
    )


def check_component(code: str) -> Result[str, ComponentRejection]:
    """
    Validate generated component (Result pattern version).

    Returns:
        Success with sanitized code, or Failure with the collected errors
    """
    outcome = validate_generated_component(code)
    if outcome.is_valid:
        return Success(outcome.sanitized)
    return Failure(ComponentRejection("; ".join(outcome.errors), tuple(outcome.errors)))
