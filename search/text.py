"""
Text Normalizer — turn a markup fragment into a plain display string.

Steps, in order:
  - strip every <...> tag
  - decode a fixed entity table (unknown entities pass through)
  - collapse whitespace runs to a single space
  - trim

The steps are repeated until the text stops changing, so a decoded
``&lt;b&gt;`` never survives as a tag and normalize() is idempotent.
"""

from __future__ import annotations

import re
from typing import Dict, Optional

TAG_RE = re.compile(r"<[^>]*>")
WHITESPACE_RE = re.compile(r"\s+")

ENTITIES: Dict[str, str] = {
    "&nbsp;": " ",
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
}

# Single pass: "&amp;lt;" decodes to "&lt;", not "<"
ENTITY_RE = re.compile("|".join(re.escape(e) for e in ENTITIES))


def _step(text: str) -> str:
    text = TAG_RE.sub("", text)
    text = ENTITY_RE.sub(lambda m: ENTITIES[m.group(0)], text)
    text = WHITESPACE_RE.sub(" ", text)
    return text.strip()


def normalize(fragment, limit: Optional[int] = None) -> str:
    """
    Normalize a markup fragment to plain text.

    Never raises; anything that is not a string becomes "".
    ``limit`` truncates the result (no ellipsis).
    """
    if not isinstance(fragment, str):
        return ""

    text = fragment
    while True:
        # every step that changes the text shortens it or only rewrites
        # whitespace, so this terminates
        stepped = _step(text)
        if stepped == text:
            break
        text = stepped

    if limit is not None:
        text = truncate(text, limit)
    return text


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` characters and drop trailing space."""
    if limit < 0:
        limit = 0
    return text[:limit].rstrip()
