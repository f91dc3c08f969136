"""Link extraction: every ``href="..."`` and ``src="..."`` value in a page body.

Links are visited in two passes, hrefs first and then srcs, each pass in
order of appearance in the body.  Local links are normalised to their
canonical stored form; external links are only percent-encoded.
"""

import logging
import re
from typing import Iterator, List, NamedTuple

from crawlextract.services.normalizer import (
    LinkKind,
    RejectedLink,
    classify,
    normalize_local_link,
    percent_encode,
)
from crawlextract.services.sink import PersistenceSink, StoreError, StoreFailure

logger = logging.getLogger(__name__)

HREF_PATTERN = re.compile(r"href=\"([^'\"<>]+)\"", re.IGNORECASE)
SRC_PATTERN = re.compile(r"src=\"([^'\"<>]+)\"", re.IGNORECASE)

_LINK_PATTERNS = (HREF_PATTERN, SRC_PATTERN)


class ExtractedLink(NamedTuple):
    kind: LinkKind
    url: str


def _links_for_pattern(pattern: re.Pattern, page_url: str, body: str) -> Iterator[ExtractedLink]:
    for match in pattern.finditer(body):
        link = match.group(1).lstrip(" \r")
        kind = classify(link)
        if kind is LinkKind.LOCAL:
            try:
                yield ExtractedLink(kind, normalize_local_link(page_url, link))
            except RejectedLink:
                logger.debug("Links: dropping %r found on %s", link, page_url)
        elif kind is LinkKind.EXTERNAL:
            yield ExtractedLink(kind, percent_encode(link))


def iter_links(page_url: str, body: str) -> Iterator[ExtractedLink]:
    """Yield every storable link in *body*, resolved relative to *page_url*."""
    for pattern in _LINK_PATTERNS:
        yield from _links_for_pattern(pattern, page_url, body)


def extract_links(
    sink: PersistenceSink,
    source_page_id: int,
    page_url: str,
    body: str,
) -> List[ExtractedLink]:
    """Forward every link in *body* to *sink* and return them in forwarding order.

    A store error on one link does not stop the remaining links from being
    forwarded.

    Raises:
        StoreFailure: after all links were attempted, if any insert failed.
    """
    links: List[ExtractedLink] = []
    errors: List[StoreError] = []
    for link in iter_links(page_url, body):
        links.append(link)
        try:
            if link.kind is LinkKind.LOCAL:
                sink.insert_unique_local_link(source_page_id, link.url)
            else:
                sink.insert_external_link(link.url)
        except StoreError as exc:
            logger.warning("Links: failed to store %s from page %s – %s", link.url, source_page_id, exc)
            errors.append(exc)

    if errors:
        raise StoreFailure(errors, links)
    return links
