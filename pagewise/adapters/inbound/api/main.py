"""FastAPI application for the pagewise API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .... import __version__
from ....config import settings
from ....config.logging import setup_logging
from ....core.domain.exceptions import InvalidRequestError, PagewiseError
from ...common.exception_handler import (
    format_client_error,
    get_http_status_code,
    log_exception,
)
from .routers import chat, documents, graph, health

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level, json_format=settings.log_json)
    logger.info("pagewise API starting up (vector backend: %s)", settings.vector_backend)
    logger.info("Debug mode: %s", "ENABLED" if settings.debug else "DISABLED")
    yield
    logger.info("pagewise API shutting down...")


app = FastAPI(
    title="pagewise API",
    description=(
        "Chat with your saved web pages. Answers are grounded in retrieved "
        "passages and attributed to their sources."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(chat.router)
app.include_router(documents.router)
app.include_router(graph.router)


# =============================================================================
# Global Exception Handlers
# =============================================================================


@app.exception_handler(PagewiseError)
async def pagewise_error_handler(request: Request, exc: PagewiseError) -> JSONResponse:
    """Structured JSON response for every PagewiseError."""
    status_code = get_http_status_code(exc)
    log_exception(
        exc,
        level=logging.WARNING if status_code < 500 else logging.ERROR,
        extra_context={"path": str(request.url.path), "method": request.method},
    )
    return JSONResponse(
        status_code=status_code,
        content=format_client_error(exc, include_trace=settings.debug),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema failures are reported like any other ValidationError (400)."""
    problems = [_describe_problem(error) for error in exc.errors()]
    error = InvalidRequestError(
        "Invalid request: " + "; ".join(problems),
        context={"problems": problems},
    )
    return await pagewise_error_handler(request, error)


def _describe_problem(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query"))
    message = error.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unhandled exceptions become a generic 500 without internal details."""
    log_exception(exc, extra_context={"path": str(request.url.path), "method": request.method})
    return JSONResponse(
        status_code=500,
        content=format_client_error(exc, include_trace=settings.debug),
    )


__all__ = ["app"]
