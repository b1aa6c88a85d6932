"""
Loading of post files from disk.

Problems in the file content are recorded as issues on the returned Post so a
single bad post never stops a lint run over a whole directory.
"""

import datetime
import logging
import re
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Union

from ..core.models import ERROR, FrontMatter, Issue, Post
from .front_matter import FrontMatterError, parse_front_matter_block, split_front_matter
from .markdown_scanner import scan_markdown

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS = ("*.md", "*.markdown")

_DATED_NAME = re.compile(r"^(\d{4})-(\d{2})-(\d{2})-(.+)$")


def parse_post_filename(path: Path) -> tuple:
    """Return (slug, date) from a Jekyll style ``YYYY-MM-DD-slug.md`` name.

    Names without a valid date prefix yield the stem as slug and no date.
    """
    stem = path.stem
    match = _DATED_NAME.match(stem)
    if not match:
        return stem, None
    year, month, day, slug = match.groups()
    try:
        return slug, datetime.date(int(year), int(month), int(day))
    except ValueError:
        return stem, None


def _front_matter_date(front_matter: FrontMatter) -> Optional[datetime.date]:
    value = front_matter.extra.get("date")
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return None


def load_post(path: Union[str, Path]) -> Post:
    """Read and parse a single post file."""
    path = Path(path)
    slug, date = parse_post_filename(path)
    issues: List[Issue] = []

    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        logger.warning("Post %s is not valid UTF-8: %s", path, exc)
        issues.append(Issue(ERROR, "encoding", f"file is not valid UTF-8: {exc.reason}"))
        return Post(path=path, front_matter=FrontMatter(), body="", slug=slug, date=date, issues=issues)

    front_matter = FrontMatter()
    body, body_line = text, 1
    try:
        raw, body, body_line = split_front_matter(text)
        front_matter = parse_front_matter_block(raw)
    except FrontMatterError as exc:
        logger.debug("Front matter error in %s: %s", path, exc)
        issues.append(Issue(ERROR, "front-matter-syntax", str(exc), exc.line))

    scan = scan_markdown(body, body_line)
    return Post(
        path=path,
        front_matter=front_matter,
        body=body,
        body_line=body_line,
        slug=slug,
        date=date or _front_matter_date(front_matter),
        code_blocks=scan.code_blocks,
        math_blocks=scan.math_blocks,
        images=scan.images,
        links=scan.links,
        headings=scan.headings,
        issues=issues,
    )


def _skipped(path: Path, root: Path) -> bool:
    parts = path.relative_to(root).parts[:-1]
    return any(part.startswith(("_site", ".")) for part in parts)


def discover_posts(root: Union[str, Path], patterns: Sequence[str] = DEFAULT_PATTERNS) -> Iterator[Path]:
    """Yield post files under *root* sorted by path.

    A file path is yielded as-is. Generated output (``_site``) and hidden
    directories are skipped.
    """
    root = Path(root)
    if root.is_file():
        yield root
        return
    if not root.is_dir():
        raise FileNotFoundError(f"Posts directory not found: {root}")

    found = set()
    for pattern in patterns:
        for candidate in root.rglob(pattern):
            if candidate.is_file() and not _skipped(candidate, root):
                found.add(candidate)
    yield from sorted(found)


def load_posts(paths: Iterable[Union[str, Path]], patterns: Sequence[str] = DEFAULT_PATTERNS) -> List[Post]:
    """Load every post found under *paths* (files or directories), without duplicates."""
    seen = set()
    posts: List[Post] = []
    for entry in paths:
        for post_path in discover_posts(entry, patterns):
            key = post_path.resolve()
            if key in seen:
                continue
            seen.add(key)
            posts.append(load_post(post_path))
    logger.info("Loaded %d post(s)", len(posts))
    return posts


__all__ = [
    "DEFAULT_PATTERNS",
    "parse_post_filename",
    "load_post",
    "discover_posts",
    "load_posts",
]
