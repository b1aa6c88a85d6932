"""
Data models for parsed blog posts.

A post is YAML front matter followed by a Markdown body. The scanner does not
render Markdown; it records the structural elements the site renderer cares
about (code fences, ``$$`` math, images, links, headings) with their line
numbers so that validation messages can point back into the file.
"""

from __future__ import annotations

import base64
import datetime
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

ERROR = "error"
WARNING = "warning"

# Keys with a documented meaning for the blog layout.
KNOWN_KEYS = ("layout", "title", "subtitle", "tags", "comments", "mathjax", "author")


@dataclass
class FrontMatter:
    """Post metadata. Known keys are typed attributes, everything else is in ``extra``."""

    layout: Any = None
    title: Any = None
    subtitle: Any = None
    tags: Any = None
    comments: Any = None
    mathjax: Any = None
    author: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)
    present: bool = False
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "FrontMatter":
        known = {key: data[key] for key in KNOWN_KEYS if key in data}
        if isinstance(known.get("tags"), str):
            # Jekyll accepts `tags: a b c`
            known["tags"] = known["tags"].split()
        extra = {key: value for key, value in data.items() if key not in KNOWN_KEYS}
        return cls(present=True, raw=dict(data), extra=extra, **known)

    def has(self, key: str) -> bool:
        return key in self.raw

    def tag_list(self) -> List[str]:
        """Tags as strings, ignoring malformed values."""
        if not isinstance(self.tags, list):
            return []
        return [str(tag) for tag in self.tags if tag is not None]


@dataclass
class CodeBlock:
    line: int
    end_line: int
    fence: str
    language: Optional[str]
    info: str
    content: str
    closed: bool = True


@dataclass
class MathBlock:
    line: int
    end_line: int
    content: str
    closed: bool = True


@dataclass
class ImageRef:
    line: int
    alt: str
    path: str
    title: Optional[str] = None

    @property
    def is_remote(self) -> bool:
        return self.path.startswith(("http://", "https://", "//", "data:"))


@dataclass
class Link:
    line: int
    text: str
    url: str
    title: Optional[str] = None
    reference: bool = False

    @property
    def is_external(self) -> bool:
        return self.url.startswith(("http://", "https://"))


@dataclass
class Heading:
    line: int
    level: int
    text: str


@dataclass
class Issue:
    severity: str
    code: str
    message: str
    line: Optional[int] = None

    def format(self, path: Optional[Path] = None) -> str:
        location = str(path) if path else ""
        if self.line is not None:
            location = f"{location}:{self.line}" if location else f"line {self.line}"
        prefix = f"{location}: " if location else ""
        return f"{prefix}{self.severity}: {self.message} [{self.code}]"


@dataclass
class Post:
    path: Path
    front_matter: FrontMatter
    body: str
    body_line: int = 1
    slug: str = ""
    date: Optional[datetime.date] = None
    code_blocks: List[CodeBlock] = field(default_factory=list)
    math_blocks: List[MathBlock] = field(default_factory=list)
    images: List[ImageRef] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)
    headings: List[Heading] = field(default_factory=list)
    issues: List[Issue] = field(default_factory=list)

    @property
    def title(self) -> str:
        title = self.front_matter.title
        return str(title) if title else self.slug

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation."""
        return {
            "path": str(self.path),
            "slug": self.slug,
            "date": self.date.isoformat() if self.date else None,
            "front_matter": _jsonable(self.front_matter.raw),
            "code_blocks": [asdict(block) for block in self.code_blocks],
            "math_blocks": [asdict(block) for block in self.math_blocks],
            "images": [asdict(image) for image in self.images],
            "links": [asdict(link) for link in self.links],
            "headings": [asdict(heading) for heading in self.headings],
            "issues": [asdict(issue) for issue in self.issues],
        }


def _jsonable(value: Any) -> Any:
    # yaml.safe_load also produces dates, sets (!!set) and bytes (!!binary)
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return [_jsonable(v) for v in sorted(value, key=str)]
    if isinstance(value, bytes):
        return base64.b64encode(value).decode('ascii')
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return value
