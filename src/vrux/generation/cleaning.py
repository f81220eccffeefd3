"""Clean raw model output into a renderable component."""

import re

_OPENING_FENCE = re.compile(r"^```(?:jsx?|javascript|tsx?|typescript)?\n?", re.MULTILINE)
_CLOSING_FENCE = re.compile(r"```$", re.MULTILINE)
_IMPORT_LINE = re.compile(r"^import\s+.*$", re.MULTILINE)
_EXPORT_DEFAULT = re.compile(r"^export\s+default\s+", re.MULTILINE)
_EXPORT = re.compile(r"^export\s+", re.MULTILINE)

# Anchored at the start of the code only
_FUNCTION_DECL = re.compile(r"^function\s*\w*\s*\([^)]*\)\s*{")
_CONST_ARROW = re.compile(r"^const\s+\w+\s*=\s*\([^)]*\)\s*=>\s*{")
_CONST_FUNCTION = re.compile(r"^const\s+\w+\s*=\s*function\s*\([^)]*\)\s*{")

ARROW_HEAD = "() => {"


def strip_fences(code: str) -> str:
    """Remove markdown code fences and surrounding whitespace."""
    code = _OPENING_FENCE.sub("", code)
    code = _CLOSING_FENCE.sub("", code)
    return code.strip()


def clean_streamed_code(code: str) -> str:
    """
    Normalise streamed output to an anonymous arrow component.

    Fences, import lines and export keywords are removed. A leading
    ``function X() {``, ``const X = () => {`` or ``const X = function() {``
    becomes ``() => {``; anything else is wrapped in an arrow body.
    """
    code = _OPENING_FENCE.sub("", code)
    code = _CLOSING_FENCE.sub("", code)
    code = _IMPORT_LINE.sub("", code)
    code = _EXPORT_DEFAULT.sub("", code)
    code = _EXPORT.sub("", code)
    code = code.strip()

    if code.startswith("()"):
        return code

    for pattern in (_FUNCTION_DECL, _CONST_ARROW, _CONST_FUNCTION):
        code = pattern.sub(ARROW_HEAD, code, count=1)

    if not code.startswith("()"):
        code = f"{ARROW_HEAD}\n{code}\n}}"
    return code
