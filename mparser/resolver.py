"""Concurrent page title resolution for extracted links."""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError

import httpx

from .models.message import FALLBACK_TITLE, Link
from .url_utils import NormalizationError, sanitize_url

log = logging.getLogger(__name__)

# Case-sensitive: <TITLE> is not recognized.
_TITLE_RE = re.compile(r"<title\b[^>]*>(.*?)</title>", re.DOTALL)
DEFAULT_FETCH_TIMEOUT_SECONDS = 5.0
DEFAULT_MAX_WORKERS = 16
DEFAULT_MAX_PAGE_BYTES = 512 * 1024
_TITLE_END = b"</title>"


class FetchError(Exception):
    """A title fetch failed at the transport level."""

    def __init__(self, url: str, cause: Exception):
        super().__init__(f"{type(cause).__name__}: {cause}")
        self.url = url
        self.cause = cause


def find_title(body: str | None) -> str | None:
    """Return the inner text of the first <title> element, verbatim."""
    if not body:
        return None
    match = _TITLE_RE.search(body)
    if not match:
        return None
    return match.group(1)


def _decode(body: bytes, charset: str | None) -> str:
    try:
        return body.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


def fetch_title(
    client: httpx.Client,
    url: str,
    *,
    timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
    max_bytes: int = DEFAULT_MAX_PAGE_BYTES,
) -> str | None:
    """
    GET url and return its page title, or None when the page has none.

    ``timeout`` bounds the whole exchange, body included: a server that keeps
    trickling bytes is cut off once it runs out. Reading stops early at the
    first ``</title>`` or after ``max_bytes`` of body.
    """
    expires_at = time.monotonic() + timeout
    body = bytearray()
    try:
        with client.stream("GET", url, timeout=timeout) as response:
            for chunk in response.iter_bytes():
                body.extend(chunk)
                if _TITLE_END in body[-(len(chunk) + len(_TITLE_END)) :]:
                    break
                if len(body) >= max_bytes:
                    del body[max_bytes:]
                    break
                if time.monotonic() >= expires_at:
                    raise httpx.ReadTimeout(f"response not complete within {timeout:.2f}s")
            charset = response.charset_encoding
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise FetchError(url, e) from e
    return find_title(_decode(bytes(body), charset))


def resolve_link(
    client: httpx.Client,
    link: str,
    *,
    timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
    max_bytes: int = DEFAULT_MAX_PAGE_BYTES,
    fallback_title: str = FALLBACK_TITLE,
    logger: logging.Logger | None = None,
) -> Link:
    """Resolve a single link, falling back to ``fallback_title`` on any failure."""
    logger = logger or log
    try:
        request_url = sanitize_url(link)
    except NormalizationError as e:
        logger.warning("Unable to sanitize %s. Error: %s", link, e)
        return Link(url=link, title=fallback_title)

    try:
        title = fetch_title(client, request_url, timeout=timeout, max_bytes=max_bytes)
    except FetchError as e:
        logger.warning("Request to %s failed. Error: %s", link, e)
        return Link(url=link, title=fallback_title)

    return Link(url=link, title=title if title is not None else fallback_title)


def resolve_links(
    client: httpx.Client,
    links: Sequence[str],
    *,
    timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
    max_workers: int = DEFAULT_MAX_WORKERS,
    deadline: float | None = None,
    max_bytes: int = DEFAULT_MAX_PAGE_BYTES,
    fallback_title: str = FALLBACK_TITLE,
    logger: logging.Logger | None = None,
) -> list[Link]:
    """
    Resolve titles for links concurrently.

    The result has one entry per input link and result[i] always describes
    links[i], whatever order the fetches finish in. At most ``max_workers``
    fetches run at once.

    When ``deadline`` (seconds) is given the whole call returns once it
    elapses: fetches still queued are cancelled, fetches still running are
    abandoned, and their links keep the fallback title.
    """
    if not links:
        return []
    logger = logger or log

    started = time.monotonic()
    slots: list[Link | None] = [None] * len(links)

    def _resolve(link: str) -> Link:
        request_timeout = timeout
        if deadline is not None:
            remaining = deadline - (time.monotonic() - started)
            if remaining <= 0:
                return Link(url=link, title=fallback_title)
            request_timeout = min(timeout, remaining)
        return resolve_link(
            client,
            link,
            timeout=request_timeout,
            max_bytes=max_bytes,
            fallback_title=fallback_title,
            logger=logger,
        )

    workers = max(1, min(max_workers, len(links)))
    pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="mparser-title")
    try:
        futures = {pool.submit(_resolve, link): index for index, link in enumerate(links)}
        try:
            for future in as_completed(futures, timeout=deadline):
                index = futures[future]
                try:
                    slots[index] = future.result()
                except Exception:
                    logger.exception("Title resolution for %s crashed", links[index])
        except FuturesTimeoutError:
            pending = sum(1 for slot in slots if slot is None)
            logger.warning("Title resolution deadline of %.2fs exceeded; %d link(s) left untitled", deadline, pending)
    finally:
        pool.shutdown(wait=False, cancel_futures=True)

    return [slot if slot is not None else Link(url=links[i], title=fallback_title) for i, slot in enumerate(slots)]
