"""Response classification from the raw HTTP response header.

Given the header block of one fetched page, :func:`classify_response`
reports what the fetch loop needs to decide its next step:

``status_code``
    The numeric code from the status line, or ``None`` when the header has
    no recognisable ``HTTP/1.x`` status line.

``is_html``
    Whether the response declares a ``text/html`` content type.  Only HTML
    pages are handed to the field and link extractors.

``redirect``
    For 3xx responses, the path of a ``Location`` header pointing back at
    the crawled host over plain ``http://``.  Redirects to other hosts or
    schemes are deliberately not followed: the crawler is host-scoped.
"""

import re
from typing import NamedTuple, Optional

_HTML_PATTERN = re.compile(r"text/html", re.IGNORECASE)

_STATUS_PATTERN = re.compile(r"HTTP/1\S+ (\d+)", re.IGNORECASE)


class ResponseInfo(NamedTuple):
    status_code: Optional[int]
    is_html: bool
    redirect: Optional[str]


def is_html(header: str) -> bool:
    """Return True when *header* mentions ``text/html`` anywhere (case-insensitive)."""
    return _HTML_PATTERN.search(header) is not None


def status_code(header: str) -> Optional[int]:
    """Return the status code from *header*'s status line, or None if absent."""
    match = _STATUS_PATTERN.search(header)
    if match is None:
        return None
    return int(match.group(1))


def is_redirect(code: Optional[int]) -> bool:
    return code is not None and 300 <= code < 400


def redirect_target(header: str, host: str) -> Optional[str]:
    """Return the path of a same-host ``Location: http://<host>...`` header line.

    *host* is matched literally.  Returns None when no such line exists.
    """
    pattern = re.compile(
        r"Location: http://" + re.escape(host) + r"([^\r\n]+)", re.IGNORECASE
    )
    match = pattern.search(header)
    if match is None:
        return None
    return match.group(1)


def classify_response(header: str, host: str) -> ResponseInfo:
    """Classify a raw response *header* fetched from *host*.

    The redirect target is only looked up for 3xx responses.
    """
    code = status_code(header)
    redirect = redirect_target(header, host) if is_redirect(code) else None
    return ResponseInfo(status_code=code, is_html=is_html(header), redirect=redirect)
