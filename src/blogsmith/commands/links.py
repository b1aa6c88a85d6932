"""
Links command: check external hyperlinks and remote images referenced by posts.

Results are cached in the link cache database (``links.cache_path``) so that
repeated runs only fetch URLs whose cached result is older than
``links.ttl_days``.
"""

import logging
from typing import List, Optional, Sequence

from ..core.command_context import CommandContext
from ..core.database import LinkCache
from ..core.http_client import RetryableHTTPClient
from ..processors.link_checker import LinkChecker, LinkUsage

logger = logging.getLogger(__name__)


def run(
    config_path: Optional[str],
    paths: Optional[Sequence[str]] = None,
    *,
    rps: Optional[float] = None,
    refresh: bool = False,
) -> List[LinkUsage]:
    """Check every external URL once and return the usages with results attached.

    Args:
        config_path: Path to the main configuration file
        paths: Post files or directories (default: configured posts dir)
        rps: Requests per second, overriding ``links.rps``
        refresh: Ignore cached results and fetch everything again
    """
    logger.info("Starting link check")
    ctx = CommandContext(config_path)
    links_cfg = ctx.section('links')

    posts = ctx.load_posts(paths)
    cache = LinkCache(links_cfg['cache_path'], ttl_days=links_cfg['ttl_days'])
    cache.purge_expired()

    with RetryableHTTPClient(
        rps=rps or float(links_cfg['rps']),
        max_retries=int(links_cfg['max_retries']),
        timeout=float(links_cfg['timeout']),
    ) as client:
        usages = LinkChecker(client, cache).check_posts(posts, refresh=refresh)

    broken = sum(1 for usage in usages if usage.result and not usage.result.ok)
    logger.info("Link check finished: %d URL(s), %d broken", len(usages), broken)
    return usages
