"""Tests for near-duplicate detection."""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

# Ensure the repository's src/ directory is importable without installation.
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from blogsmith.core.models import FrontMatter, Post  # noqa: E402
from blogsmith.core.text_utils import excerpt, markdown_to_text, tokenize  # noqa: E402
from blogsmith.processors.duplicates import find_duplicates, similarity_matrix  # noqa: E402
from blogsmith.processors.post_loader import load_posts  # noqa: E402

FIXTURE_POSTS = Path(__file__).parent / "fixtures" / "site" / "_posts"


def _post(name: str, body: str) -> Post:
    return Post(path=Path(name), front_matter=FrontMatter(), body=body, slug=name)


def test_fixture_reposts_are_detected():
    posts = load_posts([FIXTURE_POSTS])
    pairs = find_duplicates(posts, threshold=0.9)
    assert len(pairs) == 1
    assert {pairs[0].first.slug, pairs[0].second.slug} == {"haystack", "haystack-repost"}
    assert pairs[0].score == pytest.approx(1.0, abs=1e-5)


def test_distinct_posts_are_not_paired():
    posts = [
        _post("a", "Refinement types attach predicates to base types."),
        _post("b", "Refinement types attach predicates to base types!"),
        _post("c", "Sourdough bread needs flour, water, salt and patience."),
    ]
    pairs = find_duplicates(posts, threshold=0.9)
    assert [(p.first.slug, p.second.slug) for p in pairs] == [("a", "b")]


def test_code_and_math_do_not_count_as_prose():
    shared = "The checker rejects this program because the constraint fails."
    posts = [
        _post("a", shared + "\n\n```haskell\nincr x = x - 1\n```\n"),
        _post("b", shared + "\n\n$$ v > x $$\n"),
    ]
    pairs = find_duplicates(posts, threshold=0.99)
    assert len(pairs) == 1


def test_similarity_matrix_is_symmetric_with_zero_rows_for_empty_posts():
    posts = [_post("a", "alpha beta"), _post("b", "beta gamma"), _post("c", "")]
    sims = similarity_matrix(posts)
    assert sims.shape == (3, 3)
    assert np.allclose(sims, sims.T)
    assert sims[0, 1] == pytest.approx(0.5)
    assert np.all(sims[2] == 0)


def test_fewer_than_two_posts():
    assert find_duplicates([_post("a", "text")]) == []


@pytest.mark.parametrize("threshold", [0.0, -0.5, 1.5])
def test_invalid_threshold(threshold):
    with pytest.raises(ValueError):
        find_duplicates([_post("a", "x"), _post("b", "x")], threshold=threshold)


def test_markdown_to_text_and_tokenize():
    text = markdown_to_text("## Title\n\nSee [the paper](https://x.org) and ![img](a.png) `code`.")
    assert text == "Title See the paper and ."
    assert tokenize("Naïve Refinement-Types") == ["naive", "refinement", "types"]


def test_excerpt_cuts_at_word_boundary():
    assert excerpt("short text") == "short text"
    long_text = "word " * 100
    result = excerpt(long_text, limit=22)
    assert result == "word word word word…"
