"""
Input sanitization for user-supplied text and filenames.

Strips markup and script-injection vectors from free text before it reaches
a prompt or the chat log. Both functions are total: they never raise and
coerce non-string input to a safe default.

Dependencies: re (stdlib)
System role: Input sanitizer stage of the chat pipeline
"""

import re
from typing import Any

MAX_FILENAME_LENGTH = 255

# Whole blocks whose body is executable or styling, removed including content
_BLOCK_PATTERN = re.compile(
    r"<\s*(script|style)\b[^>]*>.*?<\s*/\s*\1\s*>",
    re.IGNORECASE | re.DOTALL,
)
_TAG_PATTERN = re.compile(r"</?[A-Za-z!][^<>]*>")
_ANGLE_PATTERN = re.compile(r"[<>]")
_SCHEME_PATTERN = re.compile(
    r"(?:javascript|vbscript)\s*:|data\s*:\s*text/html",
    re.IGNORECASE,
)
_HANDLER_PATTERN = re.compile(r"\bon\w+\s*=", re.IGNORECASE)
# Keep \t (0x09) and \n (0x0a); \r is normalised separately
_CONTROL_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

_UNSAFE_FILENAME_PATTERN = re.compile(r"[^\w.\-]", re.UNICODE)
_UNDERSCORE_RUN_PATTERN = re.compile(r"_+")


def sanitize_text(raw: Any) -> str:
    """
    Remove markup and injection vectors from free text.

    Args:
        raw: Untrusted input, usually the student's chat message

    Returns:
        str: Cleaned, trimmed text. Non-string input yields "".

    Example:
        >>> sanitize_text("<script>alert(1)</script>Hello")
        'Hello'
    """
    if not isinstance(raw, str):
        return ""

    text = raw.replace("\r\n", "\n").replace("\r", "\n")
    text = _BLOCK_PATTERN.sub("", text)
    text = _TAG_PATTERN.sub("", text)
    text = _ANGLE_PATTERN.sub("", text)

    # Repeat until stable so nested fragments like "javajavascript:script:" collapse
    previous = None
    while previous != text:
        previous = text
        text = _SCHEME_PATTERN.sub("", text)
        text = _HANDLER_PATTERN.sub("", text)

    text = _CONTROL_PATTERN.sub("", text)
    return text.strip()


def sanitize_filename(raw: Any) -> str:
    """
    Reduce a filename to a safe subset of characters.

    Path separators and anything outside word characters, dots and hyphens
    become underscores; runs of underscores collapse to one and are trimmed
    from both ends. The result is capped at 255 characters.

    Args:
        raw: Untrusted filename

    Returns:
        str: Safe filename, or "untitled" when nothing usable remains
    """
    if not isinstance(raw, str):
        return "untitled"

    name = _UNSAFE_FILENAME_PATTERN.sub("_", raw)
    name = _UNDERSCORE_RUN_PATTERN.sub("_", name).strip("_")
    # Leading dots would produce hidden files or traversal fragments
    name = name.lstrip(".")
    name = name[:MAX_FILENAME_LENGTH]
    return name or "untitled"
