"""Pydantic models for parsed message info."""

from __future__ import annotations

from pydantic import BaseModel, Field

FALLBACK_TITLE = "Website"


class Link(BaseModel):
    """A link found in a message together with its page title."""

    url: str
    title: str = FALLBACK_TITLE


class MessageInfo(BaseModel):
    """Mentions, emoticons and links extracted from a single message."""

    mentions: list[str] = Field(default_factory=list)
    emoticons: list[str] = Field(default_factory=list)
    links: list[Link] = Field(default_factory=list)

    def to_json(self, indent: int | None = None) -> str:
        """Serialize to JSON, keeping non-ASCII text as-is."""
        return self.model_dump_json(indent=indent)
