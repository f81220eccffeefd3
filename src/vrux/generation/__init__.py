"""Component generation: prompts, cleaning and the variant stream."""

from .generator import ComponentGenerator, GeneratedComponent
from .cleaning import strip_fences, clean_streamed_code
from .events import encode_sse
from .prompts import PromptBuilder, VARIANT_STYLES
from .samples import pick_sample, DEV_PROVIDER

__all__ = [
    "ComponentGenerator",
    "GeneratedComponent",
    "strip_fences",
    "clean_streamed_code",
    "encode_sse",
    "PromptBuilder",
    "VARIANT_STYLES",
    "pick_sample",
    "DEV_PROVIDER",
]
