"""Tests for the consumer-side stream parser and variant accumulator."""

import pytest
from hypothesis import given, strategies as st

from vrux.core import safe_json_dumps
from vrux.streaming import StreamParser, VariantAccumulator, VariantStatus, aparse_stream, parse_stream

EVENTS = [
    {"type": "metadata", "requestId": "req_1", "variantCount": 2, "providers": ["Mock"]},
    {"type": "variant_start", "variant": 0, "style": "modern"},
    {"type": "provider", "variant": 0, "provider": "OpenAI"},
    {"type": "content", "variant": 0, "content": "partial"},
    {"type": "provider", "variant": 0, "provider": "Mock"},
    {"type": "content", "variant": 0, "content": "() => {"},
    {"type": "content", "variant": 0, "content": " return <div/> }"},
    {"type": "variant_start", "variant": 1, "style": "bold"},
    {"type": "variant_error", "variant": 1, "error": "Failed to generate this variant", "canRetry": True},
    {"type": "done", "remainingRequests": 9, "totalTime": 12.5, "requestId": "req_1"},
]


def sse(events) -> str:
    return "".join(f"data: {safe_json_dumps(event)}\n\n" for event in events)


@pytest.mark.unit
def test_parser_handles_split_lines():
    parser = StreamParser()

    assert parser.feed('data: {"type": "do') == []
    assert parser.feed('ne"}\n') == [{"type": "done"}]


@pytest.mark.unit
def test_parser_ignores_other_lines_and_counts_bad_json():
    parser = StreamParser()

    events = parser.feed(': comment\nevent: x\ndata: {broken\ndata: [1]\ndata: {"type": "done"}\n')

    assert events == [{"type": "done"}]
    assert parser.skipped == 2


@pytest.mark.unit
def test_parser_flush_parses_unterminated_line():
    parser = StreamParser()

    assert parser.feed('data: {"type": "done"}') == []
    assert parser.flush() == [{"type": "done"}]
    assert parser.flush() == []


@pytest.mark.unit
def test_parser_handles_crlf():
    assert StreamParser().feed('data: {"type": "done"}\r\n') == [{"type": "done"}]


@pytest.mark.unit
@given(st.lists(st.integers(min_value=1, max_value=40), min_size=1, max_size=100))
def test_parser_chunking_does_not_change_events(cuts):
    """Property test: any chunking of the stream yields the same events."""
    text = sse(EVENTS)
    chunks, position = [], 0
    for cut in cuts:
        chunks.append(text[position : position + cut])
        position += cut
    chunks.append(text[position:])

    parser = StreamParser()
    events = [event for chunk in chunks for event in parser.feed(chunk)] + parser.flush()

    assert events == EVENTS


@pytest.mark.unit
def test_accumulator_builds_variants():
    result = parse_stream([sse(EVENTS)])

    assert result.metadata["variantCount"] == 2
    assert result.finished
    assert result.done["remainingRequests"] == 9

    first = result.variants[0]
    # The second provider announcement discarded the partial output
    assert first.code == "() => { return <div/> }"
    assert first.provider == "Mock"
    assert first.style == "modern"
    assert first.status is VariantStatus.STREAMING

    second = result.variants[1]
    assert second.status is VariantStatus.FAILED
    assert second.error == "Failed to generate this variant"


@pytest.mark.unit
def test_accumulator_complete_replaces_streamed_code():
    accumulator = VariantAccumulator()
    accumulator.apply({"type": "content", "variant": 0, "content": "raw"})
    accumulator.apply(
        {
            "type": "variant_complete",
            "variant": 0,
            "code": "() => <div/>",
            "provider": "Mock",
            "metrics": {"quality": 80},
            "style": "elegant",
        }
    )

    [variant] = accumulator.completed()
    assert variant.code == "() => <div/>"
    assert variant.metrics == {"quality": 80}
    assert variant.style == "elegant"


@pytest.mark.unit
def test_accumulator_ignores_unknown_and_malformed_events():
    accumulator = VariantAccumulator()
    accumulator.apply({"type": "heartbeat"})
    accumulator.apply({"type": "content", "variant": "zero", "content": "x"})

    assert accumulator.variants == {}
    assert accumulator.ignored == 1
    assert not accumulator.finished


@pytest.mark.unit
def test_accumulator_ignores_events_with_wrong_field_types():
    frames = [
        {"type": "content", "variant": 0, "content": 123},
        {"type": "content", "variant": 1, "content": "() => <p/>"},
        {"type": "variant_complete", "variant": 1, "code": ["not", "code"], "provider": "Mock"},
        {"type": "variant_complete", "variant": 1, "code": "() => <p/>", "metrics": "fast"},
        {"type": "variant_complete", "variant": 1, "code": None, "provider": "Mock"},
    ]

    result = parse_stream([sse(frames)])

    assert result.ignored == 3
    assert 0 not in result.variants
    [variant] = result.completed()
    assert variant.code == "() => <p/>"
    assert variant.provider == "Mock"


@pytest.mark.unit
def test_accumulator_records_error_frame():
    result = parse_stream([sse([{"type": "error", "error": "Failed to generate UI", "canRetry": True}])])

    assert result.finished
    assert result.error["canRetry"] is True


@pytest.mark.unit
async def test_aparse_stream():
    async def chunks():
        text = sse(EVENTS)
        for i in range(0, len(text), 7):
            yield text[i : i + 7]

    result = await aparse_stream(chunks())

    assert result.variants[0].code == "() => { return <div/> }"
    assert result.done is not None
