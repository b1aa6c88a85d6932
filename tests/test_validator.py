"""Tests for post validation rules."""

from __future__ import annotations

import sys
import textwrap
from pathlib import Path

import pytest

# Ensure the repository's src/ directory is importable without installation.
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from blogsmith.processors.post_loader import load_post  # noqa: E402
from blogsmith.processors.validator import (  # noqa: E402
    PostValidator,
    ValidationRules,
    has_errors,
    summarize,
)

FIXTURE_SITE = Path(__file__).parent / "fixtures" / "site"


def _post(tmp_path, text, name="2020-01-02-post.md"):
    path = tmp_path / name
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return load_post(path)


def _codes(issues):
    return sorted(issue.code for issue in issues)


@pytest.fixture
def validator():
    return PostValidator(ValidationRules(allowed_layouts=["post"], site_root=FIXTURE_SITE))


def test_fixture_posts_are_clean(validator):
    for path in sorted((FIXTURE_SITE / "_posts").glob("*.md")):
        assert validator.validate(load_post(path)) == [], path


def test_missing_front_matter(tmp_path, validator):
    issues = validator.validate(_post(tmp_path, "Just text.\n"))
    assert _codes(issues) == ["missing-front-matter"]
    assert has_errors(issues)


def test_missing_required_keys_and_wrong_types(tmp_path, validator):
    post = _post(
        tmp_path,
        """\
        ---
        title: 42
        tags: [a, 3]
        comments: "yes"
        ---
        body
        """,
    )
    issues = validator.validate(post)
    assert _codes(issues) == ["missing-key", "wrong-type", "wrong-type", "wrong-type"]
    messages = " ".join(issue.message for issue in issues)
    assert "'layout'" in messages
    assert "'title' must be a string" in messages
    assert "'tags' must be a list of strings" in messages
    assert "'comments' must be true or false" in messages


def test_empty_title_and_unknown_layout(tmp_path, validator):
    post = _post(tmp_path, "---\nlayout: page\ntitle: '  '\n---\n")
    assert _codes(validator.validate(post)) == ["empty-title", "unknown-layout"]


def test_unknown_keys_warn_unless_allowed(tmp_path):
    text = "---\nlayout: post\ntitle: T\nsummary: extra\ndate: 2020-01-02\n---\n"
    post = _post(tmp_path, text)

    issues = PostValidator(ValidationRules(extra_keys=["date"])).validate(post)
    assert [(i.code, i.severity) for i in issues] == [("unknown-key", "warning")]
    assert "summary" in issues[0].message
    assert not has_errors(issues)
    assert has_errors(issues, strict=True)

    relaxed = PostValidator(ValidationRules(allow_unknown_keys=True))
    assert relaxed.validate(post) == []


def test_duplicate_tags_warn(tmp_path, validator):
    post = _post(tmp_path, "---\nlayout: post\ntitle: T\ntags: [a, b, a]\n---\n")
    issues = validator.validate(post)
    assert _codes(issues) == ["duplicate-tag"]
    assert "'a'" in issues[0].message


def test_code_block_checks(tmp_path):
    post = _post(
        tmp_path,
        """\
        ---
        layout: post
        title: Code
        ---
        ```
        untagged
        ```

        ```python
        print(1)
        ```

        ```haskell
        main = pure ()
        """,
    )
    rules = ValidationRules(allowed_languages=["Haskell"])
    issues = PostValidator(rules).validate(post)
    assert [(i.code, i.line) for i in issues] == [
        ("code-without-language", 5),
        ("unexpected-language", 9),
        ("unclosed-fence", 13),
    ]


def test_math_requires_mathjax_flag(tmp_path, validator):
    without = _post(tmp_path, "---\nlayout: post\ntitle: M\n---\n$$x$$\n", name="a.md")
    assert [(i.code, i.line) for i in validator.validate(without)] == [("math-without-mathjax", 5)]

    with_flag = _post(tmp_path, "---\nlayout: post\ntitle: M\nmathjax: true\n---\n$$x$$\n", name="b.md")
    assert validator.validate(with_flag) == []


def test_unbalanced_math_is_an_error(tmp_path, validator):
    post = _post(tmp_path, "---\nlayout: post\ntitle: M\nmathjax: true\n---\n$$ x\n")
    assert _codes(validator.validate(post)) == ["unbalanced-math"]


def test_image_checks(tmp_path, validator):
    (tmp_path / "local.png").write_bytes(b"png")
    post = _post(
        tmp_path,
        """\
        ---
        layout: post
        title: Images
        ---
        ![ok](/assets/img/haystack-explorer.png)
        ![](local.png)
        ![gone](/assets/img/missing.png)
        ![remote](https://example.org/x.png)
        ![empty]()
        """,
    )
    issues = validator.validate(post)
    assert [(i.code, i.line) for i in issues] == [
        ("image-without-alt", 6),
        ("missing-image", 7),
        ("empty-image-path", 9),
    ]


def test_site_absolute_images_skipped_without_site_root(tmp_path):
    post = _post(tmp_path, "---\nlayout: post\ntitle: I\n---\n![a](/nowhere.png)\n")
    assert PostValidator(ValidationRules(site_root=None)).validate(post) == []


def test_syntax_error_short_circuits(tmp_path, validator):
    post = _post(tmp_path, "---\ntitle: [unclosed\n---\n```\n")
    issues = validator.validate(post)
    assert _codes(issues) == ["front-matter-syntax"]


def test_summarize_counts():
    from blogsmith.core.models import Issue

    results = {
        Path("a.md"): [Issue("error", "x", "m"), Issue("warning", "y", "m")],
        Path("b.md"): [],
    }
    assert summarize(results) == {"posts": 2, "errors": 1, "warnings": 1}
