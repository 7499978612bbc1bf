"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from src.taskflow.api.http.app_data import ApplicationDependencies
from src.taskflow.api.http.routers.auth import router as auth_router
from src.taskflow.api.http.routers.health import router as health_router
from src.taskflow.api.http.routers.me import router as me_router
from src.taskflow.api.http.routers.notify import router as notify_router
from src.taskflow.api.http.routers.telegram import router as telegram_router
from src.taskflow.api.http.routers.users import router as users_router
from src.taskflow.api.utils.app_startup import configure_logging
from src.taskflow.core.errors import IdentityError
from src.taskflow.core.services import DbSessionService
from src.taskflow.core.services.database.db_manage import DbManageService
from src.taskflow.runtime.config.config_data import ConfigData
from src.taskflow.runtime.context import bound_config, get_config


# --- Configuration binding ---
class ConfigContextMiddleware:
    """Run every ASGI call (lifespan included) with the app's configuration."""

    def __init__(self, app: ASGIApp, config: ConfigData):
        self.app = app
        self.config = config

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        with bound_config(self.config):
            await self.app(scope, receive, send)


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        # HSTS only in prod
        if get_config().app.environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


# --- Request logging middleware ---
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    # query strings are not logged; ids and tokens may travel there
    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)
        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={"error": "internal_error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )

        duration_ms = (time.perf_counter() - start) * 1000
        logger.bind(
            status_code=response.status_code,
            duration_ms=round(duration_ms, 1),
        ).info("request.end")
        response.headers.setdefault("X-Request-ID", request_id)
        return response


# --- Error rendering ---
async def identity_error_handler(request: Request, exc: IdentityError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("{}: {}", exc.code, exc.message)
    else:
        logger.info("{}: {}", exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("bad_payload: {} validation error(s)", len(exc.errors()))
    return JSONResponse(status_code=400, content={"error": "bad_payload"})


# --- Lifecycle hooks ---
def check_secrets(config: ConfigData) -> None:
    """Log missing secrets; refuse to start without them in production."""
    missing = config.missing_secrets()
    if not missing:
        return
    logger.warning("Missing configuration: {}", ", ".join(missing))
    if config.app.environment == "production":
        raise RuntimeError(f"Required secrets not configured: {', '.join(missing)}")


def startup(app: FastAPI) -> None:
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)
    check_secrets(config)

    deps: ApplicationDependencies | None = getattr(app.state, "app_dependencies", None)
    if deps is None:
        deps = ApplicationDependencies.build(DbSessionService())
        app.state.app_dependencies = deps

    if config.database.create_tables_on_startup:
        DbManageService(deps.database_service.engine).create_all()


def shutdown(app: FastAPI) -> None:
    logger.info("Shutting down application")
    deps: ApplicationDependencies | None = getattr(app.state, "app_dependencies", None)
    if deps is not None:
        deps.database_service.engine.dispose()


@asynccontextmanager
async def lifespan(app: FastAPI):
    startup(app)
    try:
        yield
    finally:
        shutdown(app)


def create_app(
    config: ConfigData | None = None,
    dependencies: ApplicationDependencies | None = None,
) -> FastAPI:
    """Build the API application.

    Args:
        config: Configuration bound to every request (default: current config)
        dependencies: Pre-wired services; built at startup when omitted
    """
    config = config or get_config()

    with bound_config(config):
        configure_logging()

    if config.app.environment == "production" and "*" in config.app.cors.origins:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )

    is_production = config.app.environment == "production"
    app = FastAPI(
        title="taskflow-identity",
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )
    if dependencies is not None:
        app.state.app_dependencies = dependencies

    app.add_exception_handler(IdentityError, identity_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Added last-to-first: the config binding must wrap everything else
    app.middleware("http")(log_requests)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors.origins,
        allow_credentials=config.app.cors.allow_credentials,
        allow_methods=config.app.cors.allow_methods,
        allow_headers=config.app.cors.allow_headers,
    )
    app.add_middleware(ConfigContextMiddleware, config=config)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(me_router)
    app.include_router(users_router)
    app.include_router(notify_router)
    app.include_router(telegram_router)

    return app


def main() -> None:
    import uvicorn

    config = get_config()
    uvicorn.run(
        "src.taskflow.api.http.app:create_app",
        factory=True,
        host=config.app.host,
        port=config.app.port,
        access_log=False,  # request logging is done by our middleware
    )


if __name__ == "__main__":
    main()
