"""
rich_text.py: plain-text projection of chapter bodies.

Chapter content is stored as an opaque HTML blob produced by the editor.
Everything here works on its readable text, never on the markup.
"""

import re
from bs4 import BeautifulSoup

_WHITESPACE = re.compile(r"\s+")


def to_plain_text(content: str | None) -> str:
    """Strip markup and collapse whitespace."""
    if not content:
        return ""
    text = BeautifulSoup(content, "html.parser").get_text(separator=" ")
    return _WHITESPACE.sub(" ", text).strip()


def word_count(content: str | None) -> int:
    text = to_plain_text(content)
    return len(text.split()) if text else 0


def excerpt(content: str | None, length: int = 160) -> str:
    """First `length` characters of the plain text, cut on a word boundary."""
    text = to_plain_text(content)
    if len(text) <= length:
        return text
    cut = text[:length].rsplit(" ", 1)[0]
    return cut + "..."
