"""Title, description and keyword-tag extraction from raw page markup.

All three extractors work on the undecoded markup with plain string search
or a single regular expression; no DOM is built.  Out of scope: nested
``<title>`` tags, mixed-case markers such as ``<Title>``, self-closing or
nested ``<h1>`` headings, headings whose text contains other tags before
any text.
"""

import re
from typing import Optional, Tuple

_TITLE_OPEN = ("<title>", "<TITLE>")
_TITLE_CLOSE = ("</title>", "</TITLE>")

# Man-page style section header that starts a description block
DESCRIPTION_MARKER = "DESCRIPTION\n"
# Continuation lines of the block are indented by exactly this prefix
DESCRIPTION_INDENT = " " * 7

_QUOTES = str.maketrans({"'": " ", '"': " "})

# Captures the heading text up to the first tag, CR or LF
_H1_PATTERN = re.compile(r"<h1[^>]*>([^<\r\n]*)[^<]*</h1>", re.IGNORECASE)

TAG_SEPARATOR = " | "

# Largest value a stored text column accepts
MAX_FIELD_LENGTH = 65535


def _find_first(text: str, markers: Tuple[str, ...]) -> int:
    for marker in markers:
        position = text.find(marker)
        if position >= 0:
            return position
    return -1


def title(body: str) -> str:
    """Return the text between the first ``<title>`` and ``</title>`` markers.

    Lowercase markers are tried before uppercase ones.  Returns an empty
    string when either marker is missing or the close marker comes first.
    """
    start = _find_first(body, _TITLE_OPEN)
    end = _find_first(body, _TITLE_CLOSE)
    if start < 0 or end < 0:
        return ""
    start += len(_TITLE_OPEN[0])
    if end < start:
        return ""
    return body[start:end]


def description(body: str) -> Optional[str]:
    """Return the indented block following a ``DESCRIPTION`` section header.

    The block is the run of newline-terminated lines after the marker that
    start with seven spaces; blank lines inside it are skipped and the first
    other line ends it.  This targets pages that embed manual-page style
    sections (``NAME``, ``SYNOPSIS``, ``DESCRIPTION``...), not ``<meta>``
    descriptions.  Quote characters are replaced by spaces.
    """
    marker = body.find(DESCRIPTION_MARKER)
    if marker < 0:
        return None

    position = marker + len(DESCRIPTION_MARKER)
    parts = []
    while True:
        line_end = body.find("\n", position)
        if line_end < 0:
            break
        if line_end == position:
            position += 1
            continue
        line = body[position:line_end]
        if not line.startswith(DESCRIPTION_INDENT):
            break
        parts.append(line[len(DESCRIPTION_INDENT) :])
        position = line_end + 1

    text = "".join(parts).translate(_QUOTES)
    return text or None


def tags(body: str) -> Optional[str]:
    """Return the text of every ``<h1>`` heading in *body*, joined by ``" | "``.

    Empty headings are skipped.  Returns None when no heading has text.
    """
    found = [match.group(1) for match in _H1_PATTERN.finditer(body) if match.group(1)]
    if not found:
        return None
    return TAG_SEPARATOR.join(found)


def clip(text: str, limit: Optional[int] = None) -> Tuple[str, bool]:
    """Return *text* cut to *limit* characters (default :data:`MAX_FIELD_LENGTH`)
    and whether it had to be cut."""
    if limit is None:
        limit = MAX_FIELD_LENGTH
    if len(text) <= limit:
        return text, False
    return text[:limit], True
