from typing import Literal

from pydantic import BaseModel


class LinkModel(BaseModel):
    kind: Literal["local", "external"]
    url: str
