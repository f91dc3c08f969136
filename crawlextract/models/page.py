from typing import Optional

from pydantic import BaseModel


class PageModel(BaseModel):
    """A page as held by the store (title and description store-escaped)."""

    id: int
    url: str
    status_code: Optional[int] = None
    title: str
    description: Optional[str] = None
    tags: Optional[str] = None
    """Keyword tags, decoded from the index charset for display."""
