"""FastAPI application for libraryapi.

Exposes:
- /api/books  (CRUD + search + loan history)
- /api/loans  (lend, return, search)

Errors leave the app as ``{"errors": [...]}``: 400 for request validation and
business rule violations, empty-body 404 for unknown resources.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from .config import LibraryApiConfig
from .errors import BusinessError
from .logging_config import get_logger

logger = get_logger(__name__)

from api import books_router, loans_router


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its response status at DEBUG, the first one at INFO."""

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        request_logger = logging.getLogger("libraryapi.request")
        client_ip = request.client.host if request.client else "unknown"
        message = 'ip="%s" url="%s %s" status=%d' % (
            client_ip,
            request.method,
            str(request.url),
            response.status_code,
        )
        if not getattr(request.app.state, "logged_first_request", False):
            request_logger.info(message)
            request.app.state.logged_first_request = True
        else:
            request_logger.debug(message)
        return response


@asynccontextmanager
async def _lifespan(app: FastAPI):
    logger.info("Started server process [" + str(os.getpid()) + "]")
    api_url = getattr(app.state, "api_url", None)
    if api_url:
        logger.info("REST API available at: " + api_url)
    if getattr(app.state, "scheduler_enabled", False):
        logger.info("Late-loan notifications enabled")
    yield


def _errors(messages: List[str], status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"errors": messages})


def _validation_message(error: dict) -> str:
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc)
    return f"{field}: {error['msg']}" if field else error["msg"]


app = FastAPI(title="Library API", lifespan=_lifespan)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(books_router, prefix="/api/books")
app.include_router(loans_router, prefix="/api/loans")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _errors([_validation_message(e) for e in exc.errors()], 400)


@app.exception_handler(BusinessError)
async def business_exception_handler(request: Request, exc: BusinessError):
    logger.info(f"Business rule violated on {request.method} {request.url.path}: {exc.message}")
    return _errors([exc.message], 400)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return Response(status_code=404)
    return _errors([str(exc.detail)], exc.status_code)


def run_server(
    config: LibraryApiConfig,
    host: Optional[str],
    port: Optional[int],
    scheduler_enabled: bool = False,
) -> None:
    """Run the FastAPI app with Uvicorn."""
    import uvicorn

    effective_host = host or config.server_host
    effective_port = port or config.server_port

    display_host = "localhost" if effective_host == "0.0.0.0" else effective_host
    app.state.api_url = f"http://{display_host}:{effective_port}/api"
    app.state.scheduler_enabled = scheduler_enabled

    uvicorn.run(
        app,
        host=effective_host,
        port=effective_port,
        log_level="info",
        log_config=None,
    )
