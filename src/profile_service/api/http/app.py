"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.responses import JSONResponse, Response

from src.profile_service.api.http.app_data import ApplicationDependencies
from src.profile_service.api.http.metrics import MetricsSink
from src.profile_service.api.http.routers.health import router as health_router
from src.profile_service.api.http.routers.users import router as users_router
from src.profile_service.api.utils.app_startup import configure_logging
from src.profile_service.core.errors import (
    ProfileNotFoundError,
    ProfileValidationError,
    StoreError,
)
from src.profile_service.core.services import (
    DbManageService,
    DbSessionService,
    ProfileService,
)
from src.profile_service.core.storage import ProfileCache
from src.profile_service.entities.user_profile import UserProfileRepository
from src.profile_service.runtime.context import get_config

__all__ = ["app", "build_dependencies", "create_app"]


def build_dependencies(
    database_service: DbSessionService | None = None,
) -> ApplicationDependencies:
    """Wire the single service instance shared by every request."""
    database_service = database_service or DbSessionService()
    DbManageService(database_service).create_all()

    repository = UserProfileRepository(database_service)
    profile_service = ProfileService(repository, ProfileCache())
    return ApplicationDependencies(
        database_service=database_service,
        profile_service=profile_service,
        metrics=MetricsSink(),
    )


def _error_body(request: Request, detail, kind: str | None = None) -> dict:
    body = {"detail": detail, "request_id": getattr(request.state, "request_id", None)}
    if kind is not None:
        body["kind"] = kind
    return body


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def decode_error(request: Request, exc: RequestValidationError):
        # Malformed JSON, wrong field types and malformed path ids
        return JSONResponse(
            status_code=400,
            content=_error_body(request, jsonable_encoder(exc.errors())),
        )

    @app.exception_handler(ProfileValidationError)
    async def validation_error(request: Request, exc: ProfileValidationError):
        return JSONResponse(
            status_code=400, content=_error_body(request, str(exc), exc.kind.value)
        )

    @app.exception_handler(ProfileNotFoundError)
    async def not_found(request: Request, exc: ProfileNotFoundError):
        return JSONResponse(status_code=404, content=_error_body(request, str(exc)))

    @app.exception_handler(StoreError)
    async def store_error(request: Request, exc: StoreError):
        logger.bind(error_kind=exc.kind.value).opt(exception=exc).error(
            "Store error: {}", exc
        )
        return JSONResponse(
            status_code=500, content=_error_body(request, "Database error", exc.kind.value)
        )


def _register_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        base_ctx = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }

        start = time.perf_counter()
        with logger.contextualize(**base_ctx):
            try:
                logger.info("request.start")
                response = await call_next(request)
            except Exception as exc:
                response = JSONResponse(
                    status_code=500,
                    content={"detail": "Internal Server Error", "request_id": request_id},
                )
                logger.bind(error_type=type(exc).__name__).exception("request.error")

            duration_s = time.perf_counter() - start
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_s * 1000, 1),
            ).info("request.end")

            deps: ApplicationDependencies | None = getattr(
                request.app.state, "app_dependencies", None
            )
            if deps is not None and get_config().metrics.enabled:
                route = request.scope.get("route")
                template = getattr(route, "path", None) or "<unmatched>"
                deps.metrics.observe_request(
                    template, request.method, response.status_code, duration_s
                )
                deps.metrics.set_cache_size(len(deps.profile_service.cache))

            response.headers.setdefault("X-Request-ID", request_id)
            return response


def create_app(dependencies: ApplicationDependencies | None = None) -> FastAPI:
    """Build the application.

    When ``dependencies`` is given it is used as-is; otherwise the database
    engine, cache and service are built during startup from the current
    configuration.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "app_dependencies", None) is None:
            app.state.app_dependencies = build_dependencies()
        logger.info(
            "Starting up application in {} environment", get_config().app.environment
        )
        try:
            yield
        finally:
            logger.info("Shutting down application")
            app.state.app_dependencies.database_service.dispose()

    production = get_config().app.environment == "production"
    app = FastAPI(
        title="User Profile Service",
        lifespan=lifespan,
        docs_url=None if production else "/docs",
        redoc_url=None if production else "/redoc",
    )
    app.state.app_dependencies = dependencies

    _register_exception_handlers(app)
    _register_middleware(app)

    app.include_router(users_router)
    app.include_router(health_router)

    metrics_path = get_config().metrics.path

    @app.get(metrics_path, include_in_schema=False)
    def metrics(request: Request) -> Response:
        deps: ApplicationDependencies = request.app.state.app_dependencies
        deps.metrics.set_db_connections(deps.database_service.active_connections())
        deps.metrics.set_cache_size(len(deps.profile_service.cache))
        payload, content_type = deps.metrics.render()
        return Response(content=payload, media_type=content_type)

    return app


configure_logging()

app = create_app()


if __name__ == "__main__":
    import uvicorn

    config = get_config()
    uvicorn.run(app, host=config.app.host, port=config.app.port, access_log=False)
