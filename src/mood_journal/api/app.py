"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from mood_journal.api.auth import router as auth_router
from mood_journal.api.entries import router as entries_router
from mood_journal.api.media import router as media_router
from mood_journal.app_logging import configure_logging
from mood_journal.config import parse_comma_list
from mood_journal.containers import AppContainer
from mood_journal.domain.errors import MoodJournalError, RateLimited


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        state_container.media_storage.ensure_directory()
        state_container.settings.temp_dir.mkdir(parents=True, exist_ok=True)
        yield

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_comma_list(container.settings.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        ProxyHeadersMiddleware,
        trusted_hosts=parse_comma_list(container.settings.forwarded_allow_ips),
    )

    app.include_router(auth_router)
    app.include_router(entries_router)
    app.include_router(media_router)

    @app.exception_handler(MoodJournalError)
    async def handle_domain_error(
        request: Request, exc: MoodJournalError
    ) -> JSONResponse:
        headers = None
        if isinstance(exc, RateLimited):
            headers = {"Retry-After": str(exc.retry_after_seconds)}
        return JSONResponse(
            status_code=int(exc.status_code),
            content={"message": exc.message},
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"message": "Invalid request"})

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error", extra={"path": request.url.path}, exc_info=exc
        )
        return JSONResponse(status_code=500, content={"message": "Server error"})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
