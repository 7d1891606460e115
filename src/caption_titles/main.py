from caption_titles.core.errors import register_exception_handlers
from caption_titles.core.logging import setup_logging

# Configure logging (JSON structured)
logger = setup_logging()

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from caption_titles import __version__
from caption_titles.api.endpoints import conversion
from caption_titles.core.config import settings
from caption_titles.schemas import HealthResponse

app = FastAPI(
    title="Caption Titles API",
    description="Convert SRT and ITT captions into FCPXML title timelines",
    version=__version__,
    docs_url="/docs" if settings.is_dev else None,
    redoc_url="/redoc" if settings.is_dev else None,
    openapi_url="/openapi.json" if settings.is_dev else None,
)

# Register Global Exception Handlers
register_exception_handlers(app)


def _env_list(key: str, default: list[str]) -> list[str]:
    if "PYTEST_CURRENT_TEST" in os.environ:
        return default
    value = os.getenv(key)
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


default_origins = (
    [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ]
    if settings.is_dev
    else []
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_env_list("CT_ALLOWED_ORIGINS", default_origins),
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
    expose_headers=["Content-Disposition", "X-Caption-Status"],
)

# FCPXML compresses well; skip tiny JSON bodies
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.include_router(conversion.router, tags=["conversion"])


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok")
