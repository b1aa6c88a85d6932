"""
Duplicates command: report near-duplicate posts.
"""

import logging
from typing import List, Optional, Sequence

from ..core.command_context import CommandContext
from ..processors.duplicates import DuplicatePair, find_duplicates

logger = logging.getLogger(__name__)


def run(
    config_path: Optional[str],
    paths: Optional[Sequence[str]] = None,
    threshold: Optional[float] = None,
) -> List[DuplicatePair]:
    """Compare all posts pairwise; *threshold* overrides ``duplicates.threshold``."""
    ctx = CommandContext(config_path)
    if threshold is None:
        threshold = float(ctx.section('duplicates')['threshold'])

    posts = ctx.load_posts(paths)
    pairs = find_duplicates(posts, threshold)
    for pair in pairs:
        logger.debug("%.3f %s <-> %s", pair.score, pair.first.path, pair.second.path)
    return pairs
