"""
Account Service FastAPI Application

Main entry point for the account API: registration with email
verification, login, and profile CRUD.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Common library imports
from common.database import MongoDB
from common.utils import (
    GatewayTimeoutException,
    InternalServerException,
    error_response,
    success_response,
)

# App-specific imports
from accounts.config import Settings, get_settings
from accounts.dependencies import AccountServices, init_services
from accounts.routers import users_router

logger = logging.getLogger("api")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# =============================================================================
# Exception Handlers
# =============================================================================
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render APIException (and plain HTTPException) as {"error": message}."""
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("message", "Error")
        code = detail.get("code")
    else:
        message = str(detail)
        code = None

    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code} {code}: {message}")
    else:
        logger.debug(f"{request.method} {request.url.path} -> {exc.status_code} {code}: {message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(message),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and parameters are a 400 with the first problem spelled out."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        msg = str(first.get("msg", "Invalid value"))
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        message = f"Invalid {field}: {msg}" if field else msg
    else:
        message = "Invalid request"

    logger.info(f"Rejected request to {request.url.path}: {message}")
    return JSONResponse(status_code=400, content=error_response(message))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unexpected (store, hashing, token signing) becomes a 500."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return await http_exception_handler(request, InternalServerException())


# =============================================================================
# Application Factory
# =============================================================================
def create_app(
    settings: Optional[Settings] = None,
    services: Optional[AccountServices] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings (loaded from the environment if omitted)
        services: Pre-built services; when given, the lifespan does not
            connect to MongoDB
    """
    settings = settings or get_settings()
    settings.validate_required()
    configure_logging(settings.LOG_LEVEL)

    mongo = MongoDB()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan context manager.

        Connects to MongoDB, ensures indexes and builds the services.
        """
        logger.info("Starting Account Service API...")

        if app.state.services is None:
            await mongo.connect(
                uri=settings.MONGODB_URI,
                database_name=settings.MONGODB_DATABASE,
            )
            app.state.services = init_services(mongo.db, settings)
            await app.state.services.store.ensure_indexes()

        logger.info("Account Service API started successfully!")

        yield

        logger.info("Shutting down Account Service API...")
        await mongo.disconnect()
        logger.info("Account Service API shut down complete.")

    app = FastAPI(
        title="Account Service API",
        description="User registration, email verification, login and profile management",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development() else None,
        redoc_url="/redoc" if settings.is_development() else None,
    )
    app.state.settings = settings
    app.state.services = services
    app.state.mongo = mongo

    # =========================================================================
    # Middleware
    # =========================================================================
    @app.middleware("http")
    async def request_deadline(request: Request, call_next):
        """Bound each request by REQUEST_TIMEOUT_SECONDS and log its outcome."""
        started = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                call_next(request),
                timeout=settings.REQUEST_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.error(
                f"{request.method} {request.url.path} exceeded "
                f"{settings.REQUEST_TIMEOUT_SECONDS}s deadline"
            )
            response = await http_exception_handler(request, GatewayTimeoutException())

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms")
        return response

    # Outermost middleware: 504 responses carry CORS headers too
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Exception Handlers
    # =========================================================================
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # =========================================================================
    # Routers
    # =========================================================================
    app.include_router(users_router)

    @app.get("/health", tags=["Health"])
    async def health():
        """Report API and database status."""
        return success_response({
            "status": "ok",
            "database": mongo.is_connected,
        })

    return app


# =============================================================================
# Run with Uvicorn
# =============================================================================
if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "api:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development(),
    )
