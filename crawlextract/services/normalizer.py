"""Link normalisation utilities: local/external classification, path resolution, percent-encoding.

Every local link handed to the store goes through :func:`normalize_local_link`
so two workers that discover the same target from different pages propose
the exact same string.  The canonical form is an absolute path (``/a/b.html``)
with no fragment, no query, no ``/../`` segments, and every byte outside the
safe set percent-encoded.
"""

import string
from enum import Enum
from typing import Tuple
from urllib.parse import unquote, urlparse

# Schemes / prefixes that mark a link as pointing at another site.
_EXTERNAL_PREFIXES = ("http", "www.")

# Links no longer than this are never treated as external.
_PREFIX_LENGTH = 4

# Characters that break downstream regex re-consumption of stored links
_FORBIDDEN_CHARS = ("(", ")")

_SAFE_CHARS = frozenset(string.ascii_letters + string.digits + "*-./:_")


def _build_encode_table() -> Tuple[str, ...]:
    table = []
    for byte in range(256):
        char = chr(byte)
        if char in _SAFE_CHARS:
            table.append(char)
        elif char == " ":
            table.append("+")
        else:
            table.append("%%%02X" % byte)
    return tuple(table)


# byte value -> replacement text
_ENCODE_TABLE = _build_encode_table()


class LinkKind(str, Enum):
    LOCAL = "local"
    EXTERNAL = "external"
    INVALID = "invalid"


class RejectedLink(ValueError):
    """Raised when a link contains characters that may never reach the store."""


def classify(link: str) -> LinkKind:
    """Return whether *link* is local to the crawled host, external, or invalid."""
    if not link:
        return LinkKind.INVALID
    if (
        not link.startswith("/")
        and len(link) > _PREFIX_LENGTH
        and link[:_PREFIX_LENGTH].lower() in _EXTERNAL_PREFIXES
    ):
        return LinkKind.EXTERNAL
    return LinkKind.LOCAL


def sanitize(link: str) -> str:
    """Return *link* with its fragment and query dropped.

    Raises:
        RejectedLink: if *link* contains ``(`` or ``)``.
    """
    if any(char in link for char in _FORBIDDEN_CHARS):
        raise RejectedLink(f"Link contains a forbidden character: {link!r}")
    link = link.split("#", 1)[0]
    return link.split("?", 1)[0]


def current_directory(page_url: str) -> str:
    """Return the directory part of *page_url*'s path, ending in ``/``.

    ``http://host/a/b.html?next=/x`` → ``/a/``.  The scheme, host, query and
    fragment are dropped and the path is percent-decoded, so that resolved
    relative links share the raw absolute-path form of links that were
    written host-absolute in the markup and are encoded exactly once.
    """
    path = unquote(urlparse(page_url).path) or "/"
    if not path.startswith("/"):
        path = "/" + path
    return path[: path.rfind("/") + 1]


def resolve(current_dir: str, link: str) -> str:
    """Resolve a path-relative *link* against *current_dir*."""
    if link.startswith("/"):
        return link
    return current_dir + link


def collapse_dot_segments(path: str) -> str:
    """Remove every ``/../`` segment from *path* along with the segment it ascends from.

    A trailing ``/..`` counts as ``/../``.  Ascending past the root is
    clamped: ``/../a`` becomes ``/a``.
    """
    if path.endswith("/.."):
        path += "/"
    token = path.find("/../")
    while token >= 0:
        parent = path.rfind("/", 0, token)
        if parent < 0:
            path = path[token + 3 :]
        else:
            path = path[:parent] + path[token + 3 :]
        token = path.find("/../")
    return path


def percent_encode(text: str) -> str:
    """Percent-encode *text* byte by byte (UTF-8) using the safe-character table."""
    return "".join(_ENCODE_TABLE[byte] for byte in text.encode("utf-8"))


def normalize_local_link(page_url: str, link: str) -> str:
    """Return the canonical stored form of a local *link* found on *page_url*.

    Raises:
        RejectedLink: if the link contains ``(`` or ``)``.
    """
    absolute = sanitize(resolve(current_directory(page_url), link))
    if ".." in absolute:
        absolute = collapse_dot_segments(absolute)
    return percent_encode(absolute)
