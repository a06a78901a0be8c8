import re

from unidecode import unidecode


def slugify(text):
    """Lower-case ASCII slug; runs of anything but letters, digits and ``_`` become ``-``."""
    if not text or not isinstance(text, str):
        raise ValueError("slugify() requires a non-empty string")
    text = unidecode(text).lower()
    text = re.sub(r"[^a-z0-9_]+", "-", text).strip("-")
    return text
