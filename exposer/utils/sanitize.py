"""
Input Sanitization Utilities

Plain-text sanitization for values that are echoed back into generated
markup, such as shortcode attributes.
"""

import html
import re
from typing import Any

import bleach


def sanitize_plain_text(text: Any) -> str:
    """
    Strip all HTML tags and return plain text only.

    Non-string values are converted with ``str()`` first; ``None`` becomes "".

    Args:
        text: The value to sanitize

    Returns:
        Plain text with HTML tags stripped and whitespace collapsed
    """
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)

    # Strip all HTML tags; literal characters such as & come back unescaped
    cleaned = html.unescape(bleach.clean(text, tags=[], strip=True))

    # Normalize whitespace
    cleaned = re.sub(r"\s+", " ", cleaned).strip()

    return cleaned
