"""Tests for crawlextract.services.pipeline.extract_page."""

from unittest.mock import patch

import pytest

from crawlextract.services.detector import ResponseInfo
from crawlextract.services.normalizer import LinkKind
from crawlextract.services.pipeline import PageExtraction, extract_page
from crawlextract.services.sink import InMemorySink, StoreError, StoreFailure

_URL = "http://example.com/docs/index.html"

_HTML_HEADER = "HTTP/1.1 200 OK\r\nContent-Type: text/html\r\n\r\n"

_BODY = """<html>
<head><title>Crawler Docs</title></head>
<body>
<h1>Crawling</h1>
<pre>
DESCRIPTION
       Walks one host and indexes its pages.
</pre>
<h1 class="sub">Indexing</h1>
<a href="guide.html">Guide</a>
<a href="../about.html#team">About</a>
<a href="http://other.org/ref">Ref</a>
<a href="javascript:show(1)">Show</a>
<img src="/img/logo.png">
</body>
</html>
"""


class _TitleFailingSink(InMemorySink):
    def set_title(self, page_id: int, title: str) -> None:
        raise StoreError("title column locked")


@pytest.fixture
def sink():
    return InMemorySink()


class TestExtractPage:
    def test_full_html_page(self, sink):
        page_id = sink.add_page(_URL, 200)
        result = extract_page(sink, page_id, _URL, _HTML_HEADER, _BODY)

        assert result.response.status_code == 200
        assert result.response.is_html is True
        assert result.title == "Crawler Docs"
        assert result.description == "Walks one host and indexes its pages."
        assert result.tags == "Crawling | Indexing"
        assert [(link.kind, link.url) for link in result.links] == [
            (LinkKind.LOCAL, "/docs/guide.html"),
            (LinkKind.LOCAL, "/about.html"),
            (LinkKind.EXTERNAL, "http://other.org/ref"),
            (LinkKind.LOCAL, "/img/logo.png"),
        ]
        assert result.truncated == []

    def test_results_forwarded_to_sink(self, sink):
        page_id = sink.add_page(_URL, 200)
        extract_page(sink, page_id, _URL, _HTML_HEADER, _BODY)

        page = sink.page(page_id)
        assert page.title == "Crawler Docs"
        assert page.description == "Walks one host and indexes its pages."
        assert page.tags == b"Crawling | Indexing"
        assert set(sink.local_links) == {"/docs/guide.html", "/about.html", "/img/logo.png"}
        assert sink.external_links == ["http://other.org/ref"]

    def test_non_html_response_skips_extraction(self, sink):
        page_id = sink.add_page(_URL)
        header = "HTTP/1.1 200 OK\r\nContent-Type: application/pdf\r\n\r\n"
        result = extract_page(sink, page_id, _URL, header, _BODY)

        assert result.response.is_html is False
        assert result.title == ""
        assert result.links == ()
        assert sink.local_links == {}

    def test_redirect_reported(self, sink):
        page_id = sink.add_page(_URL)
        header = (
            "HTTP/1.1 302 Found\r\n"
            "Location: http://example.com/docs/v2/\r\n"
            "Content-Type: text/html\r\n\r\n"
        )
        result = extract_page(sink, page_id, _URL, header, "<title>Moved</title>")
        assert result.response.redirect == "/docs/v2/"
        assert result.title == "Moved"

    def test_missing_fields_do_not_stop_links(self, sink):
        page_id = sink.add_page(_URL)
        result = extract_page(sink, page_id, _URL, _HTML_HEADER, '<a href="/only.html">')

        assert result.title == ""
        assert result.description is None
        assert result.tags is None
        assert [link.url for link in result.links] == ["/only.html"]
        assert sink.page(page_id).description is None

    def test_store_failure_raised_after_all_fields(self):
        sink = _TitleFailingSink()
        page_id = sink.add_page(_URL)

        with pytest.raises(StoreFailure) as excinfo:
            extract_page(sink, page_id, _URL, _HTML_HEADER, _BODY)

        # Everything after the failed title write still went through
        assert sink.page(page_id).tags == b"Crawling | Indexing"
        assert "/docs/guide.html" in sink.local_links
        assert len(excinfo.value.errors) == 1
        assert excinfo.value.result.title == "Crawler Docs"

    def test_long_fields_truncated_and_reported(self, sink):
        page_id = sink.add_page(_URL)
        with patch("crawlextract.services.fields.MAX_FIELD_LENGTH", 5):
            result = extract_page(sink, page_id, _URL, _HTML_HEADER, _BODY)

        assert result.title == "Crawl"
        assert result.truncated == ["title", "description", "tags"]


class TestPageExtraction:
    def test_defaults_are_immutable_and_unshared(self):
        info = ResponseInfo(200, True, None)
        first = PageExtraction(info)
        second = PageExtraction(info)

        assert first.links == () and first.truncated == ()
        with pytest.raises(AttributeError):
            first.links.append("x")
        assert second.links == ()
