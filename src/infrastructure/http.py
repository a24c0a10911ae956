"""
HTTP Helpers - Bounded Retry for Outbound Calls
================================================

Both external services (Groq, Twilio) are plain HTTPS POSTs made with
requests. Transient failures (timeouts, connection errors, 429, 5xx) are
retried with exponential backoff plus jitter; anything else is returned to
the caller on the first attempt.
"""

import time
import random
import logging

import requests

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


def backoff_delay(attempt: int, base: float = 0.5, cap: float = 8.0) -> float:
    """Full-jitter exponential backoff for the given zero-based attempt."""
    return random.uniform(0, min(cap, base * (2 ** attempt)))


def post_with_retry(
    url: str,
    max_retries: int = 2,
    sleep=time.sleep,
    **kwargs,
) -> requests.Response:
    """
    POST with bounded retry.

    Args:
        url: Target URL.
        max_retries: Extra attempts after the first one.
        sleep: Injected for tests.
        **kwargs: Passed through to requests.post (timeout, json, data, auth...).

    Returns:
        The last response received (caller checks the status).

    Raises:
        requests.RequestException: When every attempt failed at transport level.
    """
    attempt = 0
    while True:
        try:
            response = requests.post(url, **kwargs)
        except (requests.Timeout, requests.ConnectionError) as e:
            if attempt >= max_retries:
                raise
            logger.warning(f"POST {url} failed ({e}), retry {attempt + 1}/{max_retries}")
        else:
            if response.status_code not in RETRYABLE_STATUS or attempt >= max_retries:
                return response
            logger.warning(
                f"POST {url} returned {response.status_code}, retry {attempt + 1}/{max_retries}"
            )

        sleep(backoff_delay(attempt))
        attempt += 1
