"""
Shortcode syntax helpers.

Shortcodes look like ``[tag key="value"]`` or ``[tag key="value"]inner[/tag]``.
Only tags that are registered are expanded; everything else is left as is.
"""

from __future__ import annotations

import re

# key="value" | key='value' | key=value
_ATTR_PATTERN = re.compile(
    r"""([\w-]+)\s*=\s*"([^"]*)"(?:\s|$)"""
    r"""|([\w-]+)\s*=\s*'([^']*)'(?:\s|$)"""
    r"""|([\w-]+)\s*=\s*([^\s'"]+)(?:\s|$)"""
)


def shortcode_pattern(tags: list[str]) -> re.Pattern[str]:
    """Compile a pattern matching any of the given tags, with optional enclosed content."""
    tag_alternation = "|".join(re.escape(tag) for tag in sorted(tags, key=len, reverse=True))
    return re.compile(
        r"\[(?P<tag>" + tag_alternation + r")(?![\w-])"
        r"(?P<attrs>[^\]/]*(?:/(?!\])[^\]/]*)*?)"
        r"(?:(?P<self_closing>/)\]"
        r"|\](?:(?P<content>[^\[]*(?:\[(?!/(?P=tag)\])[^\[]*)*)\[/(?P=tag)\])?)"
    )


def parse_attributes(text: str) -> dict[str, str]:
    """Parse the attribute part of a shortcode into a dict (keys lower-cased)."""
    atts: dict[str, str] = {}
    for match in _ATTR_PATTERN.finditer(text.strip() + " "):
        if match.group(1):
            atts[match.group(1).lower()] = match.group(2)
        elif match.group(3):
            atts[match.group(3).lower()] = match.group(4)
        elif match.group(5):
            atts[match.group(5).lower()] = match.group(6)
    return atts


def build_shortcode(tag: str, atts: dict[str, str], content: str | None = None) -> str:
    """Render the invocation string for a tag, its attributes and optional inner content."""
    shortcode = "[" + tag
    for key, value in atts.items():
        shortcode += f' {key}="{value}"'
    shortcode += "]"
    if content is not None:
        shortcode += f"{content}[/{tag}]"
    return shortcode
