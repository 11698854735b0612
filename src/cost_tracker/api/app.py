"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cost_tracker.api.dishes import router as dishes_router
from cost_tracker.api.foods import router as foods_router
from cost_tracker.api.ingredients import router as ingredients_router
from cost_tracker.api.reports import router as reports_router
from cost_tracker.app_logging import configure_logging
from cost_tracker.containers import AppContainer
from cost_tracker.domain.errors import (
    CommitInProgressError,
    DuplicateComponentError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(ingredients_router)
    app.include_router(dishes_router)
    app.include_router(foods_router)
    app.include_router(reports_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.exception_handler(ValidationError)
    async def validation_error(_: Request, exc: ValidationError) -> JSONResponse:
        body = _failure(exc.message)
        if exc.field:
            body["field"] = exc.field
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = _error_field(first.get("loc", ()))
        message = str(first.get("msg", "Invalid request"))
        body = _failure(f"Invalid {field}: {message}" if field else message)
        if field:
            body["field"] = field
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)

    @app.exception_handler(DuplicateComponentError)
    async def duplicate_component(
        _: Request, exc: DuplicateComponentError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content=_failure(str(exc))
        )

    @app.exception_handler(NotFoundError)
    async def not_found(_: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content=_failure(str(exc))
        )

    @app.exception_handler(CommitInProgressError)
    async def commit_in_progress(
        _: Request, exc: CommitInProgressError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content=_failure(str(exc))
        )

    @app.exception_handler(PersistenceError)
    async def persistence_error(
        request: Request, exc: PersistenceError
    ) -> JSONResponse:
        logger.exception(
            "Store request failed", extra={"path": request.url.path}, exc_info=exc
        )
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY, content=_failure(str(exc))
        )

    return app


def _failure(message: str) -> dict[str, object]:
    return {"success": False, "data": None, "message": message}


def _error_field(loc: tuple[object, ...] | list[object]) -> str | None:
    parts = list(loc)
    if parts and parts[0] in ("path", "query", "body"):
        parts = parts[1:]
    return ".".join(str(part) for part in parts) or None
