"""Domain decomposition of page addresses."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

_HOST_SCHEMES = ("http", "https")


def domain_of(uri: str | None) -> str | None:
    """Return the domain a page address is matched on.

    For ``http``/``https`` addresses that is the lower-cased host; any other
    scheme acts as its own pseudo-domain (``about:blank`` -> ``about``).
    Returns None for empty or unparseable input.
    """
    if not uri:
        return None
    try:
        parts = urlsplit(uri)
    except ValueError:
        return None
    scheme = parts.scheme.lower()
    if not scheme:
        return None
    if scheme in _HOST_SCHEMES:
        try:
            return parts.hostname or None
        except ValueError:
            return None
    return scheme


def domain_suffixes(domain: str | None) -> list[str]:
    """Return *domain* followed by each of its right-hand suffixes.

    >>> domain_suffixes("a.b.example.com")
    ['a.b.example.com', 'b.example.com', 'example.com', 'com']
    """
    suffixes: list[str] = []
    while domain:
        suffixes.append(domain)
        _, dot, rest = domain.partition(".")
        domain = rest if dot else None
    return suffixes


@dataclass(frozen=True)
class PageAddress:
    """A page address plus its precomputed domain suffixes."""

    uri: str
    domains: tuple[str, ...] = ()

    @classmethod
    def from_uri(cls, uri: str | None) -> PageAddress:
        uri = uri or ""
        return cls(uri=uri, domains=tuple(domain_suffixes(domain_of(uri))))
