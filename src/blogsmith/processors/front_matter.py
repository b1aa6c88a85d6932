"""Splitting and parsing of YAML front matter."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import yaml

from ..core.models import FrontMatter

logger = logging.getLogger(__name__)

_OPEN = "---"
_CLOSE = ("---", "...")


class FrontMatterError(ValueError):
    """Front matter could not be split or parsed.

    ``line`` is the 1-based line number within the post file when known.
    """

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.line = line


def split_front_matter(text: str) -> Tuple[Optional[str], str, int]:
    """Split *text* into (raw YAML, body, first body line).

    The YAML is ``None`` when the file does not start with a ``---`` line.
    Raises FrontMatterError when the block is opened but never closed.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != _OPEN:
        return None, text, 1

    for index in range(1, len(lines)):
        if lines[index].rstrip() in _CLOSE:
            raw = "".join(lines[1:index])
            body = "".join(lines[index + 1:])
            return raw, body, index + 2

    raise FrontMatterError("front matter opened with '---' but never closed", line=1)


def parse_front_matter_block(raw: Optional[str]) -> FrontMatter:
    """Parse a raw YAML block (as returned by split_front_matter).

    Line numbers in errors are relative to the block; the first block line
    is line 2 of the file.
    """
    if raw is None:
        return FrontMatter()

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        line = None
        mark = getattr(exc, "problem_mark", None)
        if mark is not None:
            line = mark.line + 2
        problem = getattr(exc, "problem", None) or str(exc)
        raise FrontMatterError(f"invalid YAML in front matter: {problem}", line=line) from exc

    if data is None:
        return FrontMatter(present=True)
    if not isinstance(data, dict):
        raise FrontMatterError(
            f"front matter must be a mapping, got {type(data).__name__}", line=2
        )
    return FrontMatter.from_mapping(data)


def parse_front_matter(text: str) -> FrontMatter:
    """Parse the front matter of a whole post file."""
    raw, _body, _line = split_front_matter(text)
    return parse_front_matter_block(raw)


__all__ = [
    "FrontMatterError",
    "split_front_matter",
    "parse_front_matter_block",
    "parse_front_matter",
]
