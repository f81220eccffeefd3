"""Consumer-side parsing of the variant event stream."""

from .parser import (
    StreamParser,
    VariantAccumulator,
    Variant,
    VariantStatus,
    parse_stream,
    aparse_stream,
)

__all__ = [
    "StreamParser",
    "VariantAccumulator",
    "Variant",
    "VariantStatus",
    "parse_stream",
    "aparse_stream",
]
