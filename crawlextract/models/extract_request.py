from pydantic import BaseModel, Field, HttpUrl


class ExtractRequest(BaseModel):
    url: HttpUrl = Field(description="URL the response was fetched from.")
    header: str = Field(
        description="Raw response header block, status line included (CRLF or LF line endings).",
    )
    body: str = Field(default="", description="Response body, already decoded to text.")
