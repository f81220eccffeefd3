"""Fast JSON encoding and decoding.

orjson encodes (SSE frames, share store file), msgspec decodes
(incoming stream frames, persisted data).
"""

from typing import Any

import msgspec
import orjson

_decoder = msgspec.json.Decoder()


class JSONParseError(Exception):
    """JSON parsing failed."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


def dumps(obj: Any, indent: bool = False) -> bytes:
    """
    Encode object to JSON bytes.

    Datetimes are written as ISO 8601 strings.

    Args:
        obj: Object to encode
        indent: Pretty-print with two-space indentation
    """
    option = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(obj, option=option | orjson.OPT_NON_STR_KEYS)


def safe_json_dumps(obj: Any) -> str:
    """Encode object to a compact JSON string."""
    return dumps(obj).decode("utf-8")


def loads(data: str | bytes) -> Any:
    """
    Decode JSON text.

    Raises:
        JSONParseError: If the text is not valid JSON
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    try:
        return _decoder.decode(data)
    except msgspec.DecodeError as e:
        raise JSONParseError(f"Invalid JSON: {e}", e) from e


def loads_object(data: str | bytes) -> dict[str, Any]:
    """
    Decode JSON text that must be an object.

    Raises:
        JSONParseError: If invalid or not a JSON object
    """
    result = loads(data)
    if not isinstance(result, dict):
        raise JSONParseError(f"Expected dict, got {type(result).__name__}")
    return result
