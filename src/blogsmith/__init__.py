from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .commands import duplicates as duplicates_cmd
from .commands import generate_html as html_cmd
from .commands import inspect as inspect_cmd
from .commands import links as links_cmd
from .commands import lint as lint_cmd
from .core.config import ConfigManager, DEFAULT_CONFIG_PATH
from .core.models import Issue
from .processors.duplicates import DuplicatePair
from .processors.front_matter import FrontMatterError, parse_front_matter
from .processors.link_checker import LinkUsage
from .processors.post_loader import discover_posts, load_post

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = str(DEFAULT_CONFIG_PATH)

__version__ = "0.1.0"

__all__ = [
    'lint',
    'inspect',
    'duplicates',
    'links',
    'html',
    'status',
    'load_post',
    'parse_front_matter',
    'FrontMatterError',
]


def lint(paths: Optional[Sequence[str]] = None, config_path: Optional[str] = None) -> Dict[Path, List[Issue]]:
    """Validate posts and return their issues keyed by path.

    Args:
        paths: Post files or directories; defaults to the configured posts dir.
        config_path: Path to main YAML config; defaults to the data dir config.
    """
    return lint_cmd.run(config_path or _DEFAULT_CONFIG, paths)


def inspect(path: str) -> Dict[str, Any]:
    """Return the parsed structure of a single post as plain data."""
    return inspect_cmd.run(path)


def duplicates(
    paths: Optional[Sequence[str]] = None,
    *,
    threshold: Optional[float] = None,
    config_path: Optional[str] = None,
) -> List[DuplicatePair]:
    """Find near-duplicate post pairs at or above *threshold* (default from config)."""
    return duplicates_cmd.run(config_path or _DEFAULT_CONFIG, paths, threshold)


def links(
    paths: Optional[Sequence[str]] = None,
    *,
    rps: Optional[float] = None,
    refresh: bool = False,
    config_path: Optional[str] = None,
) -> List[LinkUsage]:
    """Check external links of posts.

    Args:
        paths: Post files or directories; defaults to the configured posts dir.
        rps: Requests/second throttle (optional)
        refresh: Ignore the link cache when True
        config_path: Path to config (optional)
    """
    return links_cmd.run(config_path or _DEFAULT_CONFIG, paths, rps=rps, refresh=refresh)


def html(
    paths: Optional[Sequence[str]] = None,
    *,
    output_path: Optional[str] = None,
    group_by: Optional[str] = None,
    title: Optional[str] = None,
    config_path: Optional[str] = None,
) -> Path:
    """Write the HTML post index and return where it was written."""
    return html_cmd.run(
        config_path or _DEFAULT_CONFIG,
        paths,
        output=output_path,
        group_by=group_by,
        title=title,
    )


def status(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Return configuration and posts directory status for programmatic use."""
    cfg_path = config_path or _DEFAULT_CONFIG
    info: Dict[str, Any] = {'config_path': cfg_path}
    if not os.path.exists(cfg_path):
        info.update({'valid': False, 'error': f'Config file not found: {cfg_path}'})
        return info
    try:
        cm = ConfigManager(cfg_path)
        valid = cm.validate_config()
        posts_dir = cm.get_posts_dir()
        post_count = None
        if valid and posts_dir.is_dir():
            post_count = sum(1 for _ in discover_posts(posts_dir, cm.get_post_patterns()))
        info.update({
            'valid': bool(valid),
            'posts_dir': str(posts_dir),
            'post_count': post_count,
            'site_root': str(cm.get_site_root()),
        })
        return info
    except Exception as e:
        info.update({'valid': False, 'error': str(e)})
        return info
