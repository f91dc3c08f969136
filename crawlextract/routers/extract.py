"""Extraction endpoint: runs one fetched response through the extraction pipeline."""

import logging

from fastapi import APIRouter, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from crawlextract.models.extract_request import ExtractRequest
from crawlextract.models.extract_response import ExtractResponse
from crawlextract.models.link import LinkModel
from crawlextract.models.page import PageModel
from crawlextract.services.charset import INDEX_CHARSET
from crawlextract.services.pipeline import PageExtraction, extract_page
from crawlextract.services.sink import InMemorySink, StoreError, StoreFailure

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()


def get_sink(request: Request) -> InMemorySink:
    return request.app.state.sink


@router.post(
    "/extract",
    response_model=ExtractResponse,
    summary="Extract fields and links from a fetched page",
    description=(
        "Classifies the raw response header, and for HTML pages extracts the "
        "title, the DESCRIPTION block, `<h1>` keyword tags and every "
        "`href`/`src` link.  Results are written to the page store and "
        "returned.  For 3xx responses the same-host redirect path is "
        "returned in `redirect`."
    ),
)
@limiter.limit("30/minute")
async def extract(request: Request, body: ExtractRequest) -> ExtractResponse:
    """Register *url* as a page and run its response through :func:`extract_page`."""
    url = str(body.url)
    logger.info("Extract request received", extra={"url": url})

    sink = get_sink(request)
    page_id = sink.add_page(url)
    try:
        result = extract_page(sink, page_id, url, body.header, body.body)
    except StoreFailure as exc:
        logger.error("Store failure while extracting %s: %s", url, exc)
        raise HTTPException(status_code=502, detail=str(exc))
    sink.set_status_code(page_id, result.response.status_code)

    return _build_response(page_id, url, result)


@router.get("/pages/{page_id}", response_model=PageModel, summary="Fetch a stored page")
async def get_page(request: Request, page_id: int) -> PageModel:
    try:
        page = get_sink(request).page(page_id)
    except StoreError:
        raise HTTPException(status_code=404, detail=f"Page {page_id} not found.")

    return PageModel(
        id=page.id,
        url=page.url,
        status_code=page.status_code,
        title=page.title,
        description=page.description,
        tags=page.tags.decode(INDEX_CHARSET) if page.tags is not None else None,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _build_response(page_id: int, url: str, result: PageExtraction) -> ExtractResponse:
    return ExtractResponse(
        page_id=page_id,
        url=url,
        status_code=result.response.status_code,
        is_html=result.response.is_html,
        redirect=result.response.redirect,
        title=result.title,
        description=result.description,
        tags=result.tags,
        links=[LinkModel(kind=link.kind.value, url=link.url) for link in result.links],
        truncated=list(result.truncated),
    )
