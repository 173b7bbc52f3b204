from __future__ import annotations

import bleach
from markdownify import markdownify as _html_to_md

_ALLOWED_TAGS: list[str] = [
    "p",
    "br",
    "strong",
    "b",
    "em",
    "i",
    "u",
    "sub",
    "sup",
    "ul",
    "ol",
    "li",
    "blockquote",
]


def looks_like_html(text: str) -> bool:
    return "<" in text and ">" in text and "</" in text


def description_to_markdown(value: str | None) -> str:
    """Imported term descriptions as Markdown.

    Plain text passes through unchanged; HTML is cleaned with ``bleach``
    (scripts and unknown tags stripped) before conversion.
    """
    text = (value or "").strip()
    if not text or not looks_like_html(text):
        return text

    cleaned = bleach.clean(text, tags=_ALLOWED_TAGS, attributes={}, strip=True)
    return (_html_to_md(cleaned, heading_style="ATX") or "").strip()
