from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from alsader.app import App
from alsader.config import Config
from alsader.errors import UserError
from alsader.web.error_handlers import general_exception_handler, user_error_handler
from alsader.web.openapi import set_custom_openapi
from alsader.web.routers import (
    admin_router,
    auth_router,
    documents_router,
    metadata_router,
    profile_router,
    references_router,
    reservations_router,
    stats_router,
    users_router,
)

API_PREFIX = "/api/v1"
REQUEST_ID_HEADER = "X-Request-ID"


async def bind_request_id(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Tag every log line of a request with its id, taken from the client or generated."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
    with structlog.contextvars.bound_contextvars(request_id=request_id):
        response = await call_next(request)
    response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        app.state.app = app_instance
        app.state.config = config
        async with app_instance.lifespan():
            yield

    app = FastAPI(title="Al-Sader API", lifespan=lifespan)

    app.middleware("http")(bind_request_id)

    # The React dashboard is served from another origin during development
    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=[REQUEST_ID_HEADER],
        )

    @app.get("/health")
    async def health_check() -> JSONResponse:
        if await app_instance.is_database_reachable():
            return JSONResponse({"status": "healthy"})
        return JSONResponse({"status": "unhealthy", "database": "unreachable"}, status_code=503)

    for router in (
        auth_router,
        profile_router,
        users_router,
        references_router,
        reservations_router,
        documents_router,
        stats_router,
        admin_router,
        metadata_router,
    ):
        app.include_router(router, prefix=API_PREFIX)

    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
