"""Near-duplicate detection between posts.

Each post body is reduced to prose, tokenised and turned into a term-frequency
vector over the vocabulary of all posts. Vectors are normalised to unit
length so the pairwise dot products of the stacked matrix are cosine
similarities.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence

import numpy as np

from ..core.models import Post
from ..core.text_utils import markdown_to_text, tokenize

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.9


@dataclass
class DuplicatePair:
    first: Post
    second: Post
    score: float


def _term_matrix(documents: Sequence[List[str]]) -> np.ndarray:
    vocabulary: Dict[str, int] = {}
    for tokens in documents:
        for token in tokens:
            vocabulary.setdefault(token, len(vocabulary))

    matrix = np.zeros((len(documents), max(len(vocabulary), 1)), dtype=np.float32)
    for row, tokens in enumerate(documents):
        for token in tokens:
            matrix[row, vocabulary[token]] += 1.0
    return matrix


def similarity_matrix(posts: Sequence[Post]) -> np.ndarray:
    """Return the ``n x n`` cosine similarity matrix of the post bodies.

    Posts without any words get zero similarity to everything, themselves
    included.
    """
    documents = [tokenize(markdown_to_text(post.body)) for post in posts]
    matrix = _term_matrix(documents)

    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    norms[norms == 0] = 1.0
    unit = matrix / norms
    return unit @ unit.T


def find_duplicates(posts: Sequence[Post], threshold: float = DEFAULT_THRESHOLD) -> List[DuplicatePair]:
    """Return post pairs whose similarity is at least *threshold*, highest first."""
    if not 0.0 < threshold <= 1.0:
        raise ValueError(f"threshold must be in (0, 1], got {threshold}")
    if len(posts) < 2:
        return []

    sims = similarity_matrix(posts)
    rows, cols = np.triu_indices(len(posts), k=1)
    scores = sims[rows, cols]
    # float32 dot products of identical vectors can land just under 1.0
    selected = np.nonzero(scores >= threshold - 1e-6)[0]

    pairs = [
        DuplicatePair(posts[int(rows[i])], posts[int(cols[i])], min(float(scores[i]), 1.0))
        for i in selected
    ]
    pairs.sort(key=lambda pair: pair.score, reverse=True)
    logger.info("Found %d near-duplicate pair(s) among %d posts", len(pairs), len(posts))
    return pairs


__all__ = ["DEFAULT_THRESHOLD", "DuplicatePair", "similarity_matrix", "find_duplicates"]
