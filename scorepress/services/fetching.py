"""
ScorePress Backend — Upstream Fetching
========================================

What:  Single-attempt download of remote images and PDFs, plus the
       failure-reporting hook both PDF services use for skipped items.
Why:   The generator and the combiner share the same fetch semantics:
       one attempt, bounded by the client's timeout, any failure turned
       into UpstreamFetchError.
How:   `fetch_bytes` wraps httpx; callers catch UpstreamFetchError per item
       and pass a FetchFailure to their reporter.

Failure reporting:
    A reporter is any callable taking a FetchFailure. The default,
    `log_fetch_failure`, writes a warning. Tests pass `failures.append`
    to assert on exactly which items were skipped.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from scorepress.exceptions import UpstreamFetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchFailure:
    """One skipped item: its position in the request, its URL, and why."""
    index: int
    url: Optional[str]
    reason: str


FailureReporter = Callable[[FetchFailure], None]


def log_fetch_failure(failure: FetchFailure) -> None:
    """Default reporter: log and carry on."""
    logger.warning(
        "Skipping item %d (%s): %s",
        failure.index,
        failure.url or "<no url>",
        failure.reason,
    )


async def fetch_bytes(client: httpx.AsyncClient, url: Optional[str]) -> bytes:
    """
    Download `url` and return the response body.

    No retries. The client's timeout bounds the whole exchange.

    Raises:
        UpstreamFetchError: missing URL, transport error, timeout, or non-2xx status
    """
    if not url:
        raise UpstreamFetchError(url="", reason="no URL given")

    try:
        response = await client.get(url)
    except httpx.TimeoutException:
        raise UpstreamFetchError(url=url, reason="timed out")
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise UpstreamFetchError(url=url, reason=f"{type(e).__name__}: {e}")

    if not response.is_success:
        raise UpstreamFetchError(
            url=url,
            reason=f"HTTP {response.status_code}",
            status_code=response.status_code,
        )

    logger.debug("Fetched %s (%d bytes)", url, len(response.content))
    return response.content
