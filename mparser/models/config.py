"""Pydantic models for mparser configuration."""

from __future__ import annotations

from pydantic import BaseModel

from .. import __version__


class ParserConfig(BaseModel):
    """Link title resolution configuration."""

    fetch_timeout_seconds: float = 5.0
    max_concurrency_fetch: int = 16
    resolve_deadline_seconds: float | None = None
    max_page_bytes: int = 512 * 1024
    fallback_title: str = "Website"
    user_agent: str = f"mparser/{__version__}"
    follow_redirects: bool = True


class ServerConfig(BaseModel):
    """HTTP listener configuration."""

    host: str = "localhost"
    port: int = 9080
    ssl_on: bool = False
    ssl_cert_path: str | None = None
    ssl_key_path: str | None = None
    max_body_bytes: int = 1024 * 1024


class MparserConfig(BaseModel):
    """Top-level mparser configuration."""

    parser: ParserConfig = ParserConfig()
    server: ServerConfig = ServerConfig()
