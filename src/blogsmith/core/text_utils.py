"""Shared text processing utilities.

Helpers for turning Markdown prose into plain text and tokens, used by the
duplicate detector and the HTML index.
"""

import re
import unicodedata
from typing import List, Optional

_FENCED = re.compile(r"^ {0,3}(`{3,}|~{3,})[^\n]*\n.*?^ {0,3}\1[ \t]*$", re.MULTILINE | re.DOTALL)
_MATH = re.compile(r"\$\$.*?\$\$", re.DOTALL)
_INLINE_CODE = re.compile(r"`[^`\n]*`")
_IMAGE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
_LINK = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_HTML_TAG = re.compile(r"<[^>]+>")
_MARKUP = re.compile(r"[#>*_~|]+")
_WORD = re.compile(r"[a-z0-9]+(?:'[a-z]+)?")


def strip_accents(text: str) -> str:
    """Return ASCII-ish text by removing accent marks via Unicode normalization.

    Examples:
        >>> strip_accents("Müller")
        'Muller'
    """
    return "".join(
        c for c in unicodedata.normalize("NFKD", text)
        if not unicodedata.combining(c)
    )


def markdown_to_text(markdown: Optional[str]) -> str:
    """Reduce Markdown to its prose.

    Code fences, ``$$`` math, inline code, images and HTML tags are dropped;
    links keep their text. Whitespace is collapsed.

    Examples:
        >>> markdown_to_text("See [the paper](https://x.org) for `code`.")
        'See the paper for .'
    """
    if not markdown:
        return ""
    text = _FENCED.sub(" ", markdown)
    text = _MATH.sub(" ", text)
    text = _INLINE_CODE.sub("", text)
    text = _IMAGE.sub(" ", text)
    text = _LINK.sub(r"\1", text)
    text = _HTML_TAG.sub(" ", text)
    text = _MARKUP.sub(" ", text)
    return re.sub(r"\s+", " ", text).strip()


def tokenize(text: Optional[str]) -> List[str]:
    """Lowercase word tokens with accents removed.

    Examples:
        >>> tokenize("Refinement-type checking, naïvely!")
        ['refinement', 'type', 'checking', 'naively']
    """
    if not text:
        return []
    return _WORD.findall(strip_accents(text).lower())


def excerpt(markdown: Optional[str], limit: int = 200) -> str:
    """First *limit* characters of the prose, cut at a word boundary."""
    text = markdown_to_text(markdown)
    if len(text) <= limit:
        return text
    cut = text[:limit].rsplit(" ", 1)[0]
    return cut.rstrip(",.;:") + "…"
