"""Pydantic models for the mparser application."""

from __future__ import annotations

from .config import MparserConfig, ParserConfig, ServerConfig
from .message import FALLBACK_TITLE, Link, MessageInfo

__all__ = [
    "FALLBACK_TITLE",
    "Link",
    "MessageInfo",
    "MparserConfig",
    "ParserConfig",
    "ServerConfig",
]
