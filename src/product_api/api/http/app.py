"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from src.product_api.api.http.app_data import ApplicationDependencies
from src.product_api.api.http.routers import execution, health
from src.product_api.api.http.routers.service import product
from src.product_api.api.utils.app_startup import configure_logging
from src.product_api.core.services import (
    DbSessionService,
    DelayedExecution,
    ExecutionModeManager,
    ImmediateExecution,
)
from src.product_api.runtime.config.config_data import ConfigData
from src.product_api.runtime.context import get_config

__all__ = ["app", "create_app", "build_dependencies"]


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, environment: str = "development"):
        super().__init__(app)
        self._environment = environment

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        # HSTS only in prod
        if self._environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


def _client_ip(request: Request) -> str:
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": _client_ip(request),
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()

    # Everything that logs within this block inherits base_ctx
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Constraint violations on path or body are client errors, reported as 400."""
    request_id = getattr(request.state, "request_id", None)
    logger.bind(error_count=len(exc.errors())).warning("request.validation_error")
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors()), "request_id": request_id},
    )


async def store_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Store failures surface as 503, never as not-found."""
    request_id = getattr(request.state, "request_id", None)
    logger.opt(exception=exc).bind(error_type=type(exc).__name__).error(
        "request.store_error"
    )
    return JSONResponse(
        status_code=503,
        content={"detail": "Product store unavailable", "request_id": request_id},
    )


def build_dependencies(config: ConfigData) -> ApplicationDependencies:
    """Create the application-wide services described by ``config``."""
    execution_config = config.execution
    return ApplicationDependencies(
        database_service=DbSessionService(config),
        execution_mode=ExecutionModeManager(enabled=execution_config.enabled_by_default),
        delayed_execution=DelayedExecution(
            operation_delay=execution_config.operation_delay,
            item_delay=execution_config.item_delay,
        ),
        immediate_execution=ImmediateExecution(),
    )


def create_app(config: ConfigData | None = None) -> FastAPI:
    """Build the FastAPI application for ``config`` (the active config by default)."""
    config = config or get_config()
    configure_logging(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await startup(app, config)
        try:
            yield
        finally:
            await shutdown(app)

    is_production = config.app.environment == "production"
    app = FastAPI(
        title="Product API",
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )

    app.add_middleware(SecurityHeadersMiddleware, environment=config.app.environment)

    if is_production and "*" in config.app.cors.origins:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors.origins,
        allow_credentials=config.app.cors.allow_credentials,
        allow_methods=config.app.cors.allow_methods,
        allow_headers=config.app.cors.allow_headers,
    )

    app.middleware("http")(log_requests)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, store_exception_handler)

    app.include_router(health.router)
    app.include_router(product.router, prefix=config.app.api_prefix)
    app.include_router(execution.router, prefix=config.app.api_prefix)

    return app


async def startup(app: FastAPI, config: ConfigData) -> None:
    logger.info("Starting up application in {} environment", config.app.environment)

    deps = build_dependencies(config)
    deps.database_service.create_all()
    app.state.app_dependencies = deps

    logger.info(
        "Execution mode initialised",
        enabled=deps.execution_mode.is_enabled,
        operation_delay_ms=config.execution.operation_delay_ms,
        item_delay_ms=config.execution.item_delay_ms,
    )


async def shutdown(app: FastAPI) -> None:
    logger.info("Shutting down application")
    app_dependencies: ApplicationDependencies = app.state.app_dependencies
    app_dependencies.database_service.dispose()


app = create_app()


if __name__ == "__main__":
    import uvicorn

    main_config = get_config()
    uvicorn.run(
        app,
        host=main_config.app.host,
        port=main_config.app.port,
        access_log=False,  # We handle access logging in middleware
    )
