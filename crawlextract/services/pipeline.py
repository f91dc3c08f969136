"""Per-page extraction: one fetched response in, stored fields and links out."""

import logging
from typing import List, NamedTuple, Optional, Sequence
from urllib.parse import urlparse

from crawlextract.services import fields
from crawlextract.services.detector import ResponseInfo, classify_response
from crawlextract.services.links import ExtractedLink, extract_links
from crawlextract.services.sink import PersistenceSink, StoreError, StoreFailure

logger = logging.getLogger(__name__)


class PageExtraction(NamedTuple):
    response: ResponseInfo
    title: str = ""
    description: Optional[str] = None
    tags: Optional[str] = None
    links: Sequence[ExtractedLink] = ()
    truncated: Sequence[str] = ()


def extract_page(
    sink: PersistenceSink,
    page_id: int,
    page_url: str,
    header: str,
    body: str,
) -> PageExtraction:
    """Classify one response and, for HTML pages, extract and store its fields and links.

    Each field is handled independently: a missing title or a failed store
    write never prevents the description, tags or links from being
    processed.

    Raises:
        StoreFailure: once everything has been attempted, if any sink
            operation failed.  ``exc.result`` holds the :class:`PageExtraction`.
    """
    response = classify_response(header, urlparse(page_url).netloc)
    if not response.is_html:
        logger.debug("Pipeline: %s is not HTML, skipping extraction", page_url)
        return PageExtraction(response=response)

    errors: List[StoreError] = []
    truncated: List[str] = []

    def _clipped(name: str, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value, was_clipped = fields.clip(value)
        if was_clipped:
            logger.warning("Pipeline: %s of %s truncated to %d characters", name, page_url, len(value))
            truncated.append(name)
        return value

    def _store(operation, *args) -> None:
        try:
            operation(*args)
        except StoreError as exc:
            logger.warning("Pipeline: store write failed for page %s – %s", page_id, exc)
            errors.append(exc)

    title = _clipped("title", fields.title(body))
    _store(sink.set_title, page_id, title)

    description = _clipped("description", fields.description(body))
    if description is not None:
        _store(sink.set_description, page_id, description)

    tags = _clipped("tags", fields.tags(body))
    if tags is not None:
        _store(sink.set_tags, page_id, tags)

    try:
        links = extract_links(sink, page_id, page_url, body)
    except StoreFailure as exc:
        links = exc.result
        errors.extend(exc.errors)

    result = PageExtraction(
        response=response,
        title=title,
        description=description,
        tags=tags,
        links=links,
        truncated=truncated,
    )
    logger.info(
        "Pipeline: extracted %s",
        page_url,
        extra={"page_id": page_id, "links": len(links), "truncated": truncated},
    )
    if errors:
        raise StoreFailure(errors, result)
    return result
