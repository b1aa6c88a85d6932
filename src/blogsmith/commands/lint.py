"""
Lint command: validate front matter and body structure of posts.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..core.command_context import CommandContext
from ..core.models import Issue
from ..processors.validator import PostValidator, ValidationRules

logger = logging.getLogger(__name__)


def run(config_path: Optional[str], paths: Optional[Sequence[str]] = None) -> Dict[Path, List[Issue]]:
    """Validate every post under *paths* (default: the configured posts dir).

    Returns a mapping of post path to its issues, in path order. Posts without
    issues map to an empty list.
    """
    logger.info("Starting lint command")
    ctx = CommandContext(config_path)
    validator = PostValidator(ValidationRules.from_config(ctx.config_manager))

    results: Dict[Path, List[Issue]] = {}
    for post in ctx.load_posts(paths):
        issues = validator.validate(post)
        results[post.path] = issues
        if issues:
            logger.debug("%s: %d issue(s)", post.path, len(issues))

    logger.info("Lint finished for %d post(s)", len(results))
    return results
