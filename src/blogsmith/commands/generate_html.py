"""
Generate an HTML index of posts.

Relative output paths are written under ``<data_dir>/``; absolute paths are
used as given.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from ..core.command_context import CommandContext
from ..core.paths import resolve_data_file
from ..processors.html_generator import HTMLGenerator

logger = logging.getLogger(__name__)


def run(
    config_path: Optional[str],
    paths: Optional[Sequence[str]] = None,
    *,
    output: Optional[str] = None,
    group_by: Optional[str] = None,
    title: Optional[str] = None,
) -> Path:
    """Render the index and return the path it was written to."""
    logger.info("Starting HTML index generation")
    ctx = CommandContext(config_path)
    html_cfg = ctx.section('html')

    target = resolve_data_file(output or html_cfg['output'], ensure_parent=True)
    posts = ctx.load_posts(paths)

    HTMLGenerator().generate_index(
        posts,
        str(target),
        title=title or html_cfg['title'],
        group_by=group_by or html_cfg['group_by'],
    )
    return target
