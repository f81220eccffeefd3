"""
Stream Parser
Incremental parsing of the variant event stream on the consumer side.
"""

from collections.abc import AsyncIterable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..core import JSONParseError, get_logger, loads_object

logger = get_logger(__name__)

DATA_PREFIX = "data: "

Event = dict[str, Any]


class StreamParser:
    """
    Splits a chunked text stream into decoded ``data:`` events.

    Chunks may end mid-line; the partial line is held until the next
    chunk completes it. Lines without the ``data: `` prefix are ignored.
    Payloads that are not JSON objects are dropped and counted.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self.skipped = 0

    def feed(self, chunk: str) -> list[Event]:
        self._buffer += chunk
        *lines, self._buffer = self._buffer.split("\n")
        return [event for event in map(self._parse_line, lines) if event is not None]

    def flush(self) -> list[Event]:
        """Parse whatever is left once the stream has ended."""
        line, self._buffer = self._buffer, ""
        event = self._parse_line(line)
        return [event] if event is not None else []

    def _parse_line(self, line: str) -> Event | None:
        line = line.rstrip("\r")
        if not line.startswith(DATA_PREFIX):
            return None
        try:
            return loads_object(line[len(DATA_PREFIX) :])
        except JSONParseError:
            self.skipped += 1
            logger.debug("stream_line_skipped", line=line[:80])
            return None


class VariantStatus(str, Enum):
    STREAMING = "streaming"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class Variant:
    index: int
    style: str | None = None
    code: str = ""
    provider: str | None = None
    metrics: dict[str, Any] = field(default_factory=dict)
    status: VariantStatus = VariantStatus.STREAMING
    error: str | None = None


_TEXT_FIELDS = ("content", "code", "style", "provider", "error")


def _well_typed(event: Event) -> bool:
    if any(event.get(key) is not None and not isinstance(event[key], str) for key in _TEXT_FIELDS):
        return False
    metrics = event.get("metrics")
    return metrics is None or isinstance(metrics, dict)


class VariantAccumulator:
    """Builds per-variant code from parsed stream events, in arrival order."""

    def __init__(self) -> None:
        self.variants: dict[int, Variant] = {}
        self.metadata: Event | None = None
        self.done: Event | None = None
        self.error: Event | None = None
        self.ignored = 0

    @property
    def finished(self) -> bool:
        return self.done is not None or self.error is not None

    def _slot(self, event: Event) -> Variant | None:
        index = event.get("variant")
        if not isinstance(index, int):
            return None
        if index not in self.variants:
            self.variants[index] = Variant(index=index)
        return self.variants[index]

    def apply(self, event: Event) -> None:
        """Fold one event into the variants. Events with the wrong field types are counted in ``ignored``."""
        kind = event.get("type")

        if kind == "metadata":
            self.metadata = event
        elif kind == "done":
            self.done = event
        elif kind == "error":
            self.error = event
        elif kind in ("variant_start", "provider", "content", "variant_complete", "variant_error"):
            variant = self._slot(event) if _well_typed(event) else None
            if variant is None:
                self.ignored += 1
                return
            if kind == "variant_start":
                variant.style = event.get("style")
            elif kind == "provider":
                # Fallback to another provider restarts the variant's code
                variant.provider = event.get("provider")
                variant.code = ""
            elif kind == "content":
                variant.code += event.get("content") or ""
            elif kind == "variant_complete":
                variant.code = event.get("code") or variant.code
                variant.provider = event.get("provider") or variant.provider
                variant.metrics = event.get("metrics") or {}
                variant.style = event.get("style") or variant.style
                variant.status = VariantStatus.COMPLETE
            else:
                variant.status = VariantStatus.FAILED
                variant.error = event.get("error")

    def completed(self) -> list[Variant]:
        """Completed variants ordered by index."""
        return [v for _, v in sorted(self.variants.items()) if v.status is VariantStatus.COMPLETE]


def parse_stream(chunks: Iterable[str]) -> VariantAccumulator:
    """Run a whole chunk sequence through parser and accumulator."""
    parser = StreamParser()
    accumulator = VariantAccumulator()
    for chunk in chunks:
        for event in parser.feed(chunk):
            accumulator.apply(event)
    for event in parser.flush():
        accumulator.apply(event)
    return accumulator


async def aparse_stream(chunks: AsyncIterable[str]) -> VariantAccumulator:
    """Async variant of :func:`parse_stream`."""
    parser = StreamParser()
    accumulator = VariantAccumulator()
    async for chunk in chunks:
        for event in parser.feed(chunk):
            accumulator.apply(event)
    for event in parser.flush():
        accumulator.apply(event)
    return accumulator
