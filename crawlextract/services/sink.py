"""Persistence sink: where extracted pages, links and tags end up.

The extraction services only talk to the :class:`PersistenceSink` protocol.
Escaping text for the storage format is the sink's job and happens here,
at the boundary, never inside the extractors.

:class:`InMemorySink` is the reference store used by the API and the tests.
Local links are unique by target string: when two workers discover the same
link concurrently, the first insert wins and the second is a no-op.
"""

import logging
import threading
from typing import Dict, List, NamedTuple, Optional, Protocol

from crawlextract.services.charset import to_index_charset

logger = logging.getLogger(__name__)

# Characters escaped the way the MySQL client library escapes string literals
_ESCAPES = str.maketrans(
    {
        "\0": "\\0",
        "\n": "\\n",
        "\r": "\\r",
        "\\": "\\\\",
        "'": "\\'",
        '"': '\\"',
        "\x1a": "\\Z",
    }
)


class StoreError(RuntimeError):
    """A store operation failed.  The extractors do not look any further into it."""


class StoreFailure(RuntimeError):
    """One or more store operations failed while a page was being processed.

    Raised only after every field and link of the page has been attempted.
    ``errors`` holds the individual :class:`StoreError` instances in the
    order they occurred; ``result`` holds what was extracted, when known.
    """

    def __init__(self, errors: List[StoreError], result: object = None) -> None:
        super().__init__(f"{len(errors)} store operation(s) failed: {errors[0]}")
        self.errors = errors
        self.result = result


class PersistenceSink(Protocol):
    def insert_unique_local_link(self, source_page_id: int, url: str) -> None: ...

    def insert_external_link(self, url: str) -> None: ...

    def set_title(self, page_id: int, title: str) -> None: ...

    def set_description(self, page_id: int, text: str) -> None: ...

    def set_tags(self, page_id: int, tag_text: str) -> None: ...


def escape_string(text: str) -> str:
    """Escape *text* for use inside a quoted SQL string literal."""
    return text.translate(_ESCAPES)


class StoredPage(NamedTuple):
    id: int
    url: str
    status_code: Optional[int]
    title: str
    description: Optional[str]
    tags: Optional[bytes]


class InMemorySink:
    """Thread-safe in-memory store implementing :class:`PersistenceSink`."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pages: Dict[int, dict] = {}
        # target url -> id of the page it was first found on
        self._local_links: Dict[str, int] = {}
        self._external_links: Dict[str, None] = {}

    def add_page(self, url: str, status_code: Optional[int] = None) -> int:
        """Register a fetched page and return its new id."""
        with self._lock:
            page_id = len(self._pages) + 1
            self._pages[page_id] = {
                "url": url,
                "status_code": status_code,
                "title": "",
                "description": None,
                "tags": None,
            }
        logger.debug("Sink: added page %d for %s", page_id, url)
        return page_id

    def page(self, page_id: int) -> StoredPage:
        with self._lock:
            record = self._get(page_id)
            return StoredPage(id=page_id, **record)

    def set_status_code(self, page_id: int, status_code: Optional[int]) -> None:
        with self._lock:
            self._get(page_id)["status_code"] = status_code

    def insert_unique_local_link(self, source_page_id: int, url: str) -> None:
        with self._lock:
            self._get(source_page_id)
            if url in self._local_links:
                return
            self._local_links[url] = source_page_id

    def insert_external_link(self, url: str) -> None:
        with self._lock:
            self._external_links.setdefault(url, None)

    def set_title(self, page_id: int, title: str) -> None:
        with self._lock:
            self._get(page_id)["title"] = escape_string(title)

    def set_description(self, page_id: int, text: str) -> None:
        with self._lock:
            self._get(page_id)["description"] = escape_string(text)

    def set_tags(self, page_id: int, tag_text: str) -> None:
        encoded = to_index_charset(escape_string(tag_text))
        with self._lock:
            self._get(page_id)["tags"] = encoded

    @property
    def local_links(self) -> Dict[str, int]:
        """Snapshot of stored local links, mapped to the page each was first found on."""
        with self._lock:
            return dict(self._local_links)

    @property
    def external_links(self) -> List[str]:
        with self._lock:
            return list(self._external_links)

    def _get(self, page_id: int) -> dict:
        try:
            return self._pages[page_id]
        except KeyError:
            raise StoreError(f"Unknown page id {page_id}") from None
