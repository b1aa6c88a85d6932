"""External link checking with a persistent result cache."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import requests

from ..core.database import LinkCache
from ..core.http_client import RetryableHTTPClient
from ..core.models import Post

logger = logging.getLogger(__name__)

# Servers that refuse HEAD answer with one of these; retry as GET.
_HEAD_UNSUPPORTED = (405, 501)


@dataclass
class LinkResult:
    url: str
    status_code: Optional[int]
    ok: bool
    error: Optional[str] = None
    cached: bool = False


@dataclass
class LinkUsage:
    """A URL and every (post, line) that references it."""

    url: str
    locations: List[tuple] = field(default_factory=list)
    result: Optional[LinkResult] = None


def normalize_url(url: str) -> Optional[str]:
    """Return a fetchable http(s) URL, or None for links that are not checked."""
    if url.startswith("//"):
        url = "https:" + url
    if not url.startswith(("http://", "https://")):
        return None
    return url.split("#", 1)[0]


def collect_urls(posts: Sequence[Post]) -> Dict[str, LinkUsage]:
    """Group external links and remote images of *posts* by URL, in first-seen order."""
    usages: Dict[str, LinkUsage] = {}
    for post in posts:
        targets = [(link.url, link.line) for link in post.links]
        targets += [(image.path, image.line) for image in post.images]
        for raw, line in targets:
            url = normalize_url(raw)
            if url is None:
                continue
            usages.setdefault(url, LinkUsage(url)).locations.append((post.path, line))
    return usages


class LinkChecker:
    """Checks URLs over HTTP, consulting and updating a LinkCache."""

    def __init__(self, client: RetryableHTTPClient, cache: Optional[LinkCache] = None):
        self.client = client
        self.cache = cache

    def _fetch(self, url: str) -> LinkResult:
        try:
            response = self.client.head_with_retry(url)
            if response.status_code in _HEAD_UNSUPPORTED:
                logger.debug("HEAD not supported by %s (%s); retrying with GET", url, response.status_code)
                response = self.client.get_with_retry(url)
                response.close()
        except requests.RequestException as exc:
            logger.debug("Request to %s failed: %s", url, exc)
            return LinkResult(url, None, False, error=f"{type(exc).__name__}: {exc}")

        status = response.status_code
        ok = status < 400
        return LinkResult(url, status, ok, error=None if ok else f"HTTP {status}")

    def check(self, url: str, refresh: bool = False) -> LinkResult:
        """Check one URL, using the cache unless *refresh* is set."""
        if self.cache is not None and not refresh:
            cached = self.cache.get(url)
            if cached is not None:
                return LinkResult(url, cached['status_code'], cached['ok'], cached['error'], cached=True)

        result = self._fetch(url)
        if self.cache is not None:
            self.cache.put(url, result.status_code, result.ok, result.error)
        return result

    def check_posts(self, posts: Sequence[Post], refresh: bool = False) -> List[LinkUsage]:
        """Check every external URL referenced by *posts* once."""
        usages = collect_urls(posts)
        logger.info("Checking %d unique external URL(s)", len(usages))
        for usage in usages.values():
            usage.result = self.check(usage.url, refresh=refresh)
            if not usage.result.ok:
                logger.warning("Broken link %s: %s", usage.url, usage.result.error)
        return list(usages.values())


__all__ = ["LinkResult", "LinkUsage", "normalize_url", "collect_urls", "LinkChecker"]
