"""Shared HTTP client with retry logic and rate limiting."""

import time
from typing import Dict, Optional

import requests

RETRYABLE_STATUS = (429, 500, 502, 503, 504)

DEFAULT_HEADERS = {
    "User-Agent": "blogsmith-linkcheck/0.1 (+https://pypi.org/project/blogsmith/)",
}


class RetryableHTTPClient:
    """HTTP client with exponential backoff retry logic and rate limiting.

    Retries throttling and server errors (429, 500, 502, 503, 504) with
    exponential backoff, respects Retry-After headers, and enforces a
    requests-per-second limit across all calls made through the instance.

    Args:
        rps: Maximum requests per second (default: 1.0)
        max_retries: Maximum number of attempts (default: 3)
        timeout: Request timeout in seconds (default: 15)
    """

    def __init__(self, rps: float = 1.0, max_retries: int = 3, timeout: float = 15):
        self.session = requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)
        self.rps = rps
        self.max_retries = max(1, max_retries)
        self.timeout = timeout
        self.min_interval = 1.0 / max(rps, 0.01)
        self.last_request_time = 0.0

    def _rate_limit(self):
        """Enforce rate limiting between requests."""
        now = time.time()
        elapsed = now - self.last_request_time
        if elapsed < self.min_interval:
            time.sleep(self.min_interval - elapsed)
        self.last_request_time = time.time()

    def request_with_retry(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """Send a request, retrying throttling/server errors and network failures.

        Unlike ``raise_for_status`` callers, the final response is returned
        whatever its status so the caller can record it. Only network errors
        that persist through every attempt are raised.

        Raises:
            requests.RequestException: On network errors after retries exhausted
        """
        timeout = timeout or self.timeout
        response = None

        for attempt in range(self.max_retries):
            try:
                self._rate_limit()
                response = self.session.request(
                    method, url, headers=headers, timeout=timeout, allow_redirects=True
                )
            except requests.RequestException:
                if attempt < self.max_retries - 1:
                    time.sleep(min(8.0, 2.0 ** attempt))
                    continue
                raise

            if response.status_code in RETRYABLE_STATUS and attempt < self.max_retries - 1:
                time.sleep(self._calculate_backoff_time(response, attempt))
                continue
            return response

        return response

    def get_with_retry(self, url: str, **kwargs) -> requests.Response:
        return self.request_with_retry("GET", url, **kwargs)

    def head_with_retry(self, url: str, **kwargs) -> requests.Response:
        return self.request_with_retry("HEAD", url, **kwargs)

    def _calculate_backoff_time(self, response: requests.Response, attempt: int) -> float:
        """Calculate backoff time, respecting Retry-After header if present."""
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            try:
                wait = float(retry_after)
                return min(max(wait, 1.0), 60.0)
            except (ValueError, TypeError):
                pass
        # Exponential backoff: 1s, 2s, 4s, max 8s
        return min(8.0, 2.0 ** attempt)

    def close(self):
        """Close the underlying session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
