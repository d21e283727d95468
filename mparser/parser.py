"""Message parsing: extraction, title resolution and aggregation."""

from __future__ import annotations

import logging
from collections.abc import Iterable

import httpx

from .config import get_parser_config
from .models.config import ParserConfig
from .models.message import FALLBACK_TITLE, Link, MessageInfo
from .patterns import extract
from .resolver import DEFAULT_FETCH_TIMEOUT_SECONDS, DEFAULT_MAX_PAGE_BYTES, DEFAULT_MAX_WORKERS, resolve_links

log = logging.getLogger(__name__)


def aggregate(mentions: Iterable[str], emoticons: Iterable[str], links: Iterable[Link]) -> MessageInfo:
    """Combine extraction results into a MessageInfo."""
    return MessageInfo(mentions=list(mentions), emoticons=list(emoticons), links=list(links))


def create_http_client(config: ParserConfig | None = None) -> httpx.Client:
    """Create the HTTP client shared by all title fetches."""
    cfg = config or ParserConfig()
    return httpx.Client(
        timeout=cfg.fetch_timeout_seconds,
        follow_redirects=cfg.follow_redirects,
        headers={"User-Agent": cfg.user_agent},
    )


class Parser:
    """Parses chat messages into mentions, emoticons and titled links.

    The HTTP client is supplied by the caller and only ever read from, so one
    client (and its connection pool) can serve many concurrent parse calls.
    """

    def __init__(
        self,
        client: httpx.Client,
        logger: logging.Logger | None = None,
        *,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        max_workers: int = DEFAULT_MAX_WORKERS,
        deadline: float | None = None,
        max_page_bytes: int = DEFAULT_MAX_PAGE_BYTES,
        fallback_title: str = FALLBACK_TITLE,
    ):
        self.client = client
        self.log = logger or log
        self.fetch_timeout = fetch_timeout
        self.max_workers = max_workers
        self.deadline = deadline
        self.max_page_bytes = max_page_bytes
        self.fallback_title = fallback_title

    @classmethod
    def from_config(
        cls,
        client: httpx.Client,
        config: ParserConfig,
        logger: logging.Logger | None = None,
    ) -> Parser:
        return cls(
            client,
            logger,
            fetch_timeout=config.fetch_timeout_seconds,
            max_workers=config.max_concurrency_fetch,
            deadline=config.resolve_deadline_seconds,
            max_page_bytes=config.max_page_bytes,
            fallback_title=config.fallback_title,
        )

    def parse(self, text: str | None, *, deadline: float | None = None) -> MessageInfo:
        """Parse text; ``deadline`` overrides the parser's overall title budget."""
        mentions, emoticons, raw_links = extract(text)
        links = resolve_links(
            self.client,
            raw_links,
            timeout=self.fetch_timeout,
            max_workers=self.max_workers,
            deadline=deadline if deadline is not None else self.deadline,
            max_bytes=self.max_page_bytes,
            fallback_title=self.fallback_title,
            logger=self.log,
        )
        return aggregate(mentions, emoticons, links)


def parse_message(text: str | None, config: ParserConfig | None = None) -> MessageInfo:
    """Parse a single message with a short-lived client."""
    cfg = config or get_parser_config()
    with create_http_client(cfg) as client:
        return Parser.from_config(client, cfg).parse(text)
