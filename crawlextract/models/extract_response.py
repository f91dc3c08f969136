from typing import List, Optional

from pydantic import BaseModel

from crawlextract.models.link import LinkModel


class ExtractResponse(BaseModel):
    page_id: int
    url: str
    status_code: Optional[int]
    is_html: bool
    redirect: Optional[str] = None
    """Same-host path to fetch next, for 3xx responses with a usable ``Location``."""
    title: str = ""
    description: Optional[str] = None
    tags: Optional[str] = None
    links: List[LinkModel] = []
    truncated: List[str] = []
