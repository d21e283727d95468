"""Lexical extraction of mentions, emoticons and links from message text."""

from __future__ import annotations

import re
from collections.abc import Iterable

_MENTION_RE = re.compile(r"@(\w+)", re.ASCII)
_EMOTICON_RE = re.compile(r"\((\w{1,15})\)", re.ASCII)
_HOST_LABEL = r"[^/:.?#\s\[\]]+"
_LINK_RE = re.compile(
    r"https?://"
    rf"(?:\[[0-9A-Fa-f:.]+\]|{_HOST_LABEL}(?:\.{_HOST_LABEL})*)"
    r"(?::[0-9]+)?"
    r"(?:/[^?#\s]*)?"
    r"(?:\?[^#\s]*)?"
    r"(?:#\S*)?"
)


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def extract_mentions(text: str | None) -> list[str]:
    """Extract unique @handles (without the @).

    Every ``@`` restarts a match, so ``@one@two`` yields both handles.
    """
    if not text:
        return []
    return _unique(match.group(1) for match in _MENTION_RE.finditer(text))


def extract_emoticons(text: str | None) -> list[str]:
    """Extract unique ``(name)`` emoticons of 1-15 word characters."""
    if not text:
        return []
    return _unique(match.group(1) for match in _EMOTICON_RE.finditer(text))


def extract_links(text: str | None) -> list[str]:
    """Extract http(s) links in order of appearance, duplicates included."""
    if not text:
        return []
    return [match.group(0) for match in _LINK_RE.finditer(text)]


def extract(text: str | None) -> tuple[list[str], list[str], list[str]]:
    """Return ``(mentions, emoticons, links)`` found in text."""
    return extract_mentions(text), extract_emoticons(text), extract_links(text)
