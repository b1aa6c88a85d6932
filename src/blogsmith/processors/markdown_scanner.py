"""
Structural scan of a Markdown post body.

This is not a Markdown renderer. It walks the body once to find fenced code
blocks, then scans the remaining prose (with code fences and inline code
spans blanked out) for ``$$`` math, then the remaining prose (math blanked
too) for images, links and ATX headings. Blanking
keeps every character offset and line number intact, so reported lines match
the file.
"""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass, field
from typing import List, Optional

from ..core.models import CodeBlock, Heading, ImageRef, Link, MathBlock

_FENCE_OPEN = re.compile(r"^( {0,3})(`{3,}|~{3,})(.*)$")
_HEADING = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?(?:[ \t]+#+)?[ \t]*$")
_INLINE_CODE = re.compile(r"(?<!`)(`+)(?!`)((?:(?!\n[ \t]*\n).)+?)(?<!`)\1(?!`)", re.DOTALL)
_MATH_DELIM = re.compile(r"(?<!\\)\$\$")

# Link destinations may contain one level of balanced parentheses, as in
# Wikipedia URLs like /wiki/Refinement_(computing).
_TARGET = r"\(\s*<?((?:[^()\s<>]|\([^()\s<>]*\))*)>?(?:\s+[\"'](.*?)[\"'])?\s*\)"
_IMAGE = re.compile(r"!\[([^\]]*)\]" + _TARGET)
_LINK = re.compile(r"(?<!!)\[([^\]]*)\]" + _TARGET)
_REF_DEF = re.compile(r"^ {0,3}\[([^\]^][^\]]*)\]:[ \t]*<?(\S+?)>?(?:[ \t]+[\"'(](.*?)[\"')])?[ \t]*$", re.MULTILINE)
_AUTOLINK = re.compile(r"<((?:https?|mailto):[^>\s]+)>")


@dataclass
class ScanResult:
    code_blocks: List[CodeBlock] = field(default_factory=list)
    math_blocks: List[MathBlock] = field(default_factory=list)
    images: List[ImageRef] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)
    headings: List[Heading] = field(default_factory=list)


def _blank(text: str) -> str:
    """Replace every character except newlines with a space."""
    return re.sub(r"[^\n]", " ", text)


class _LineIndex:
    """Maps character offsets in the body to file line numbers."""

    def __init__(self, text: str, start_line: int):
        self._starts = [0] + [m.end() for m in re.finditer(r"\n", text)]
        self._start_line = start_line

    def line_of(self, offset: int) -> int:
        return bisect.bisect_right(self._starts, offset) - 1 + self._start_line


def _split_fences(body: str, start_line: int, result: ScanResult) -> str:
    """Collect fenced code blocks and return the body with them blanked out."""
    lines = body.splitlines(keepends=True)
    prose: List[str] = []
    open_block: Optional[dict] = None

    for index, line in enumerate(lines):
        line_no = start_line + index
        stripped = line.rstrip("\r\n")

        if open_block is None:
            match = _FENCE_OPEN.match(stripped)
            if match and not (match.group(2)[0] == "`" and "`" in match.group(3)):
                info = match.group(3).strip()
                open_block = {
                    "line": line_no,
                    "fence": match.group(2),
                    "info": info,
                    "language": info.split()[0] if info else None,
                    "content": [],
                }
                prose.append(_blank(line))
            else:
                prose.append(line)
            continue

        fence = open_block["fence"]
        closing = re.match(r"^ {0,3}(" + re.escape(fence[0]) + r"{" + str(len(fence)) + r",})[ \t]*$", stripped)
        prose.append(_blank(line))
        if closing:
            result.code_blocks.append(
                CodeBlock(
                    line=open_block["line"],
                    end_line=line_no,
                    fence=fence,
                    language=open_block["language"],
                    info=open_block["info"],
                    content="".join(open_block["content"]),
                )
            )
            open_block = None
        else:
            open_block["content"].append(line)

    if open_block is not None:
        result.code_blocks.append(
            CodeBlock(
                line=open_block["line"],
                end_line=start_line + max(len(lines) - 1, 0),
                fence=open_block["fence"],
                language=open_block["language"],
                info=open_block["info"],
                content="".join(open_block["content"]),
                closed=False,
            )
        )

    return "".join(prose)


def _scan_math(text: str, index: _LineIndex, result: ScanResult) -> str:
    """Collect ``$$`` math and return *text* with the math blanked out."""
    delimiters = [m.start() for m in _MATH_DELIM.finditer(text)]
    pieces: List[str] = []
    cursor = 0
    for i in range(0, len(delimiters) - 1, 2):
        start, end = delimiters[i], delimiters[i + 1]
        result.math_blocks.append(
            MathBlock(
                line=index.line_of(start),
                end_line=index.line_of(end),
                content=text[start + 2:end].strip(),
            )
        )
        pieces.append(text[cursor:start])
        pieces.append(_blank(text[start:end + 2]))
        cursor = end + 2

    if len(delimiters) % 2:
        last = delimiters[-1]
        result.math_blocks.append(
            MathBlock(
                line=index.line_of(last),
                end_line=index.line_of(len(text)),
                content=text[last + 2:].strip(),
                closed=False,
            )
        )
        pieces.append(text[cursor:last])
        pieces.append(_blank(text[last:]))
        cursor = len(text)

    pieces.append(text[cursor:])
    return "".join(pieces)


def scan_markdown(body: str, start_line: int = 1) -> ScanResult:
    """Scan *body*, whose first line is line *start_line* of the file."""
    result = ScanResult()
    index = _LineIndex(body, start_line)

    prose = _split_fences(body, start_line, result)
    prose = _INLINE_CODE.sub(lambda m: _blank(m.group(0)), prose)

    prose = _scan_math(prose, index, result)

    for line_offset, line in enumerate(prose.splitlines()):
        match = _HEADING.match(line)
        if match:
            result.headings.append(
                Heading(line=start_line + line_offset, level=len(match.group(1)), text=(match.group(2) or "").strip())
            )

    for match in _IMAGE.finditer(prose):
        result.images.append(
            ImageRef(line=index.line_of(match.start()), alt=match.group(1).strip(), path=match.group(2), title=match.group(3))
        )
    prose = _IMAGE.sub(lambda m: _blank(m.group(0)), prose)

    for match in _LINK.finditer(prose):
        result.links.append(
            Link(line=index.line_of(match.start()), text=match.group(1).strip(), url=match.group(2), title=match.group(3))
        )
    for match in _AUTOLINK.finditer(prose):
        result.links.append(Link(line=index.line_of(match.start()), text=match.group(1), url=match.group(1)))
    for match in _REF_DEF.finditer(prose):
        result.links.append(
            Link(
                line=index.line_of(match.start()),
                text=match.group(1).strip(),
                url=match.group(2),
                title=match.group(3),
                reference=True,
            )
        )
    result.links.sort(key=lambda link: link.line)

    return result


__all__ = ["ScanResult", "scan_markdown"]
