import logging
import logging.config

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from crawlextract.logging_config import LOGGING_CONFIG
from crawlextract.routers.extract import limiter, router as extract_router
from crawlextract.services.sink import InMemorySink

logging.config.dictConfig(LOGGING_CONFIG)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="crawlextract – Page Extraction API",
    description=(
        "Classifies fetched crawler responses and extracts titles, descriptions, "
        "keyword tags and normalised links for the search index."
    ),
    version="1.0.0",
)

# Rate-limiting state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Shared page store; the only state shared between requests
app.state.sink = InMemorySink()


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred."})


app.include_router(extract_router)


@app.get("/", summary="Health check")
async def root() -> dict:
    return {"message": "Hello from crawlextract"}
