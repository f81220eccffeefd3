"""
Stream Frames
Builders for the variant stream frames and their SSE encoding.
"""

from typing import Any

from ..core import dumps

Frame = dict[str, Any]

ERROR_SUGGESTIONS = (
    "Try simplifying your prompt",
    "Check if the service is experiencing high load",
    "Try again in a few moments",
)


def encode_sse(frame: Frame) -> bytes:
    """Encode a frame as one ``data: <json>`` server-sent event."""
    return b"data: " + dumps(frame) + b"\n\n"


def metadata(request_id: str, variant_count: int, providers: list[str]) -> Frame:
    return {"type": "metadata", "requestId": request_id, "variantCount": variant_count, "providers": providers}


def variant_start(variant: int, style: str) -> Frame:
    return {"type": "variant_start", "variant": variant, "style": style}


def provider(variant: int, name: str) -> Frame:
    return {"type": "provider", "variant": variant, "provider": name}


def content(variant: int, text: str) -> Frame:
    return {"type": "content", "variant": variant, "content": text}


def variant_complete(variant: int, code: str, provider_name: str, metrics: dict[str, Any], style: str) -> Frame:
    return {
        "type": "variant_complete",
        "variant": variant,
        "code": code,
        "provider": provider_name,
        "metrics": metrics,
        "style": style,
    }


def variant_error(variant: int) -> Frame:
    return {"type": "variant_error", "variant": variant, "error": "Failed to generate this variant", "canRetry": True}


def done(remaining_requests: int, total_time: float, request_id: str) -> Frame:
    return {"type": "done", "remainingRequests": remaining_requests, "totalTime": total_time, "requestId": request_id}


def error(message: str, request_id: str) -> Frame:
    return {
        "type": "error",
        "error": "Failed to generate UI",
        "message": message,
        "requestId": request_id,
        "canRetry": True,
        "suggestions": list(ERROR_SUGGESTIONS),
    }
