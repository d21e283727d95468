"""Make extracted links safe to request."""

from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit

import idna


class NormalizationError(ValueError):
    """A link could not be turned into a requestable URL."""

    def __init__(self, link: str, reason: str):
        super().__init__(f"cannot normalize {link!r}: {reason}")
        self.link = link
        self.reason = reason


def _encode_host(host: str) -> str:
    if not host or host.startswith("[") or host.isascii():
        return host
    return idna.encode(host, uts46=True).decode("ascii")


def _encode_netloc(netloc: str) -> str:
    userinfo, at, hostport = netloc.rpartition("@")
    if hostport.startswith("["):
        host, bracket, port = hostport.partition("]")
        host += bracket
    else:
        host, _, port = hostport.partition(":")
    if port and not port.isdigit():
        raise ValueError(f"invalid port {port!r}")
    encoded = _encode_host(host)
    return f"{userinfo}{at}{encoded}{':' + port if port else ''}"


def sanitize_url(link: str) -> str:
    """
    Return link with its host rewritten to IDNA (punycode) form.

    Links that are already ASCII are returned untouched; that is by far the
    common case, so no parsing happens for them. Only the host is re-encoded:
    scheme, port, path, query and fragment are kept as written.

    Raises NormalizationError if the link cannot be parsed or the host is not
    a valid internationalized domain name.
    """
    if link.isascii():
        return link

    try:
        parts = urlsplit(link)
    except ValueError as e:
        raise NormalizationError(link, str(e)) from e
    if not parts.scheme or not parts.netloc:
        raise NormalizationError(link, "missing scheme or host")

    try:
        netloc = _encode_netloc(parts.netloc)
    except (idna.IDNAError, ValueError) as e:
        raise NormalizationError(link, str(e)) from e

    return urlunsplit(parts._replace(netloc=netloc))
