"""Front matter and body validation for posts."""

from __future__ import annotations

import logging
import urllib.parse
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.models import ERROR, KNOWN_KEYS, WARNING, Issue, Post

logger = logging.getLogger(__name__)

_STRING_KEYS = ("layout", "title", "subtitle", "author")
_BOOL_KEYS = ("comments", "mathjax")


@dataclass
class ValidationRules:
    """Validation settings, normally built from the ``front_matter`` and ``code`` config sections."""

    required: List[str] = field(default_factory=lambda: ["layout", "title"])
    allowed_layouts: List[str] = field(default_factory=list)
    allow_unknown_keys: bool = False
    extra_keys: List[str] = field(default_factory=list)
    allowed_languages: List[str] = field(default_factory=list)
    site_root: Optional[Path] = None

    @classmethod
    def from_config(cls, config_manager) -> "ValidationRules":
        fm = config_manager.get_section('front_matter')
        code = config_manager.get_section('code')
        return cls(
            required=list(fm['required']),
            allowed_layouts=list(fm['allowed_layouts']),
            allow_unknown_keys=bool(fm['allow_unknown_keys']),
            extra_keys=list(fm['extra_keys']),
            allowed_languages=list(code['allowed_languages']),
            site_root=config_manager.get_site_root(),
        )


def _type_name(value: Any) -> str:
    return type(value).__name__


class PostValidator:
    """Checks a parsed Post against ValidationRules and returns issues."""

    def __init__(self, rules: Optional[ValidationRules] = None):
        self.rules = rules or ValidationRules()

    def validate(self, post: Post) -> List[Issue]:
        """Return every issue for *post*, including those recorded while loading."""
        issues = list(post.issues)
        if any(issue.code in ("front-matter-syntax", "encoding") for issue in issues):
            # Without metadata the remaining checks only add noise
            return issues

        issues.extend(self._check_front_matter(post))
        issues.extend(self._check_code(post))
        issues.extend(self._check_math(post))
        issues.extend(self._check_images(post))
        issues.sort(key=lambda issue: (issue.line or 0, issue.severity != ERROR))
        return issues

    def _check_front_matter(self, post: Post) -> List[Issue]:
        fm = post.front_matter
        issues: List[Issue] = []

        if not fm.present:
            issues.append(Issue(ERROR, "missing-front-matter", "post has no YAML front matter", 1))
            return issues

        for key in self.rules.required:
            if not fm.has(key):
                issues.append(Issue(ERROR, "missing-key", f"required front matter key '{key}' is missing", 1))

        for key in _STRING_KEYS:
            value = getattr(fm, key)
            if fm.has(key) and not isinstance(value, str):
                issues.append(Issue(ERROR, "wrong-type", f"'{key}' must be a string, got {_type_name(value)}", 1))

        if fm.has("title") and isinstance(fm.title, str) and not fm.title.strip():
            issues.append(Issue(ERROR, "empty-title", "'title' is empty", 1))

        for key in _BOOL_KEYS:
            value = getattr(fm, key)
            if fm.has(key) and not isinstance(value, bool):
                issues.append(Issue(ERROR, "wrong-type", f"'{key}' must be true or false, got {value!r}", 1))

        if fm.has("tags"):
            tags = fm.tags
            if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
                issues.append(Issue(ERROR, "wrong-type", "'tags' must be a list of strings", 1))
            else:
                for tag, count in Counter(tags).items():
                    if count > 1:
                        issues.append(Issue(WARNING, "duplicate-tag", f"tag '{tag}' is listed {count} times", 1))

        if self.rules.allowed_layouts and isinstance(fm.layout, str) and fm.layout not in self.rules.allowed_layouts:
            issues.append(
                Issue(
                    ERROR,
                    "unknown-layout",
                    f"layout '{fm.layout}' is not one of: {', '.join(self.rules.allowed_layouts)}",
                    1,
                )
            )

        if not self.rules.allow_unknown_keys:
            accepted = set(KNOWN_KEYS) | set(self.rules.extra_keys)
            for key in fm.extra:
                if key not in accepted:
                    issues.append(Issue(WARNING, "unknown-key", f"unknown front matter key '{key}'", 1))

        return issues

    def _check_code(self, post: Post) -> List[Issue]:
        issues: List[Issue] = []
        allowed = {lang.lower() for lang in self.rules.allowed_languages}
        for block in post.code_blocks:
            if not block.closed:
                issues.append(Issue(ERROR, "unclosed-fence", f"code fence '{block.fence}' is never closed", block.line))
            if not block.language:
                issues.append(Issue(WARNING, "code-without-language", "code block has no language tag", block.line))
            elif allowed and block.language.lower() not in allowed:
                issues.append(
                    Issue(WARNING, "unexpected-language", f"code block language '{block.language}' is not allowed", block.line)
                )
        return issues

    def _check_math(self, post: Post) -> List[Issue]:
        issues: List[Issue] = []
        for block in post.math_blocks:
            if not block.closed:
                issues.append(Issue(ERROR, "unbalanced-math", "'$$' has no closing '$$'", block.line))
        if post.math_blocks and post.front_matter.mathjax is not True:
            first = post.math_blocks[0]
            issues.append(
                Issue(WARNING, "math-without-mathjax", "post contains $$ math but 'mathjax' is not true", first.line)
            )
        return issues

    def _resolve_image(self, post: Post, target: str) -> Optional[Path]:
        path_part = urllib.parse.unquote(urllib.parse.urlsplit(target).path)
        if path_part.startswith("/"):
            if self.rules.site_root is None:
                return None
            return self.rules.site_root / path_part.lstrip("/")
        return post.path.parent / path_part

    def _check_images(self, post: Post) -> List[Issue]:
        issues: List[Issue] = []
        for image in post.images:
            if not image.alt:
                issues.append(Issue(WARNING, "image-without-alt", f"image '{image.path}' has no alt text", image.line))
            if not image.path:
                issues.append(Issue(ERROR, "empty-image-path", "image reference has an empty path", image.line))
                continue
            if image.is_remote:
                continue
            resolved = self._resolve_image(post, image.path)
            if resolved is not None and not resolved.exists():
                issues.append(Issue(ERROR, "missing-image", f"image '{image.path}' not found at {resolved}", image.line))
        return issues


def has_errors(issues: List[Issue], strict: bool = False) -> bool:
    """True when *issues* should fail a run; with *strict* warnings count too."""
    if strict:
        return bool(issues)
    return any(issue.severity == ERROR for issue in issues)


def summarize(results: Dict[Path, List[Issue]]) -> Dict[str, int]:
    """Count posts, errors and warnings across a lint run."""
    errors = sum(1 for issues in results.values() for issue in issues if issue.severity == ERROR)
    warnings = sum(1 for issues in results.values() for issue in issues if issue.severity == WARNING)
    return {"posts": len(results), "errors": errors, "warnings": warnings}


__all__ = ["ValidationRules", "PostValidator", "has_errors", "summarize"]
