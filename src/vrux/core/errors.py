"""Service error hierarchy.

Every error raised across a request boundary is a ``VruxError``; the API
layer turns it into ``{"error", "message", "code"}`` JSON with its status.
"""

from datetime import datetime
from typing import Any


class VruxError(Exception):
    """Base service error."""

    status_code: int = 500
    error: str = "Internal Server Error"
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, *, code: str | None = None, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.extra = extra

    def to_dict(self) -> dict[str, Any]:
        """Export as response payload."""
        payload: dict[str, Any] = {
            "error": self.error,
            "message": self.message,
            "code": self.code,
        }
        payload.update(self.extra)
        return payload


class ValidationError(VruxError):
    """Request or payload failed validation."""

    status_code = 400
    error = "Invalid request"
    code = "VALIDATION_ERROR"


class AuthenticationError(VruxError):
    """Missing or invalid credentials."""

    status_code = 401
    error = "Authentication Required"
    code = "AUTH_REQUIRED"


class SessionExpiredError(AuthenticationError):
    error = "Invalid Session"
    code = "SESSION_EXPIRED"


class ForbiddenError(VruxError):
    status_code = 403
    error = "Forbidden"
    code = "FORBIDDEN"


class NotFoundError(VruxError):
    status_code = 404
    error = "Not Found"
    code = "NOT_FOUND"


class ConflictError(VruxError):
    status_code = 409
    error = "Conflict"
    code = "CONFLICT"


class RateLimitError(VruxError):
    """Sliding-window rate limit exceeded."""

    status_code = 429
    error = "Too many requests. Please try again later."
    code = "RATE_LIMITED"

    def __init__(self, message: str, reset_time: datetime | None = None) -> None:
        super().__init__(
            message,
            resetTime=reset_time.isoformat() if reset_time else None,
            remainingRequests=0,
        )
        self.reset_time = reset_time


class ApiLimitError(VruxError):
    """Plan API call allowance used up."""

    status_code = 429
    error = "API Limit Exceeded"
    code = "API_LIMIT_EXCEEDED"

    def __init__(self, used: int, limit: int, plan: str) -> None:
        super().__init__(
            f"You have reached your {plan} plan limit of {limit} API calls. Please upgrade your plan.",
            usage={"used": used, "limit": limit, "plan": plan},
        )


class ProviderUnavailableError(VruxError):
    """No AI provider can serve the request."""

    status_code = 503
    error = "AI service temporarily unavailable"
    code = "PROVIDERS_UNAVAILABLE"


class GenerationError(VruxError):
    """Provider output could not be turned into a valid component."""

    status_code = 500
    error = "Failed to generate UI. Please try again."
    code = "GENERATION_FAILED"
