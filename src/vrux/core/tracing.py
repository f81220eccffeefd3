"""
Request Tracing
Lightweight spans for generation, logged through structlog and kept in a
short buffer for the operations feed.
"""

import contextvars
import time
import uuid
from collections import deque
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

_trace_id: contextvars.ContextVar[str] = contextvars.ContextVar("trace_id", default="")
_span_id: contextvars.ContextVar[str] = contextvars.ContextVar("span_id", default="")

SLOW_SPAN_SECONDS = 1.0


@dataclass
class Span:
    """Represents a single traced operation."""

    trace_id: str
    span_id: str
    parent_id: str
    name: str
    service: str
    start_time: float
    end_time: float = 0.0
    duration: float = 0.0
    tags: dict[str, str] = field(default_factory=dict)
    error: Exception | None = None
    status_code: int = 200

    def finish(self) -> None:
        """Mark span as complete."""
        self.end_time = time.time()
        self.duration = self.end_time - self.start_time

    def set_tag(self, key: str, value: Any) -> None:
        self.tags[key] = str(value)

    def set_error(self, error: Exception) -> None:
        """Record an error in the span."""
        self.error = error
        self.status_code = 500

    def to_dict(self) -> dict[str, Any]:
        """Export in the dashboard trace format."""
        return {
            "traceId": self.trace_id,
            "spanId": self.span_id,
            "parentId": self.parent_id or None,
            "operation": self.name,
            "service": self.service,
            "startTime": self.start_time,
            "duration": round(self.duration * 1000, 2),
            "status": "error" if self.error else "ok",
            "tags": dict(self.tags),
        }


class Tracer:
    """Creates spans and hands finished ones to the log and to subscribers."""

    def __init__(self, service: str, buffer_size: int = 100) -> None:
        self.service = service
        self._recent: deque[Span] = deque(maxlen=buffer_size)
        self._listeners: list[Callable[[Span], None]] = []

    def start_span(self, name: str, **tags: str) -> Span:
        trace_id = _trace_id.get() or uuid.uuid4().hex
        span = Span(
            trace_id=trace_id,
            span_id=uuid.uuid4().hex[:16],
            parent_id=_span_id.get(),
            name=name,
            service=self.service,
            start_time=time.time(),
            tags=tags,
        )
        _trace_id.set(trace_id)
        _span_id.set(span.span_id)
        return span

    def submit(self, span: Span) -> None:
        """Process completed span."""
        fields = {
            "trace_id": span.trace_id,
            "span_id": span.span_id,
            "operation": span.name,
            "duration_ms": span.duration * 1000,
            "status_code": span.status_code,
            **span.tags,
        }
        if span.parent_id:
            fields["parent_id"] = span.parent_id

        if span.error:
            logger.error("span_completed_with_error", error=str(span.error), **fields)
        elif span.duration > SLOW_SPAN_SECONDS:
            logger.warning("span_completed_slow", **fields)
        else:
            logger.debug("span_completed", **fields)

        self._recent.append(span)
        for listener in list(self._listeners):
            listener(span)

    def recent(self, limit: int = 20) -> list[Span]:
        """Most recent finished spans, newest first."""
        return list(reversed(self._recent))[:limit]

    def subscribe(self, listener: Callable[[Span], None]) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[Span], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)


_tracer: Tracer | None = None


def init_tracer(service: str) -> Tracer:
    """Initialize global tracer."""
    global _tracer
    _tracer = Tracer(service)
    return _tracer


def _pop_span(span: Span) -> None:
    # Back to the parent span; a root span also ends its trace
    _span_id.set(span.parent_id)
    if not span.parent_id:
        _trace_id.set("")


@asynccontextmanager
async def trace_operation_async(operation: str, **kwargs: Any) -> AsyncGenerator[Span | None, None]:
    """Async context manager for tracing operations."""
    if _tracer is None:
        yield None
        return

    span = _tracer.start_span(operation, **{k: str(v) for k, v in kwargs.items()})
    try:
        yield span
    except Exception as e:
        span.set_error(e)
        raise
    finally:
        span.finish()
        _tracer.submit(span)
        _pop_span(span)
