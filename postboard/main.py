"""
Postboard Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (uvicorn postboard.main:app, or the `postboard` console script).
When:  Once at server startup.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────┐ ┌────────┐ ┌─────────┐ ┌──────────────────┐   │
    │  │ CORS │→│ Req ID │→│ Logging │→│ Auth (identity)  │   │
    │  └──────┘ └────────┘ └─────────┘ └──────────────────┘   │
    │                                                          │
    │  Routes:                                                 │
    │  ┌──────────────────┐ ┌──────────┐ ┌──────────────────┐ │
    │  │ PUT /post/post-  │ │ /feed/*  │ │ /graphql         │ │
    │  │     image        │ │          │ │                  │ │
    │  └──────────────────┘ └──────────┘ └──────────────────┘ │
    │  ┌──────────────────┐ ┌──────────┐                      │
    │  │ GET /images/*    │ │ /health  │                      │
    │  └──────────────────┘ └──────────┘                      │
    │                                                          │
    │  Exception Handlers:                                     │
    │  ┌────────────────────────────────────────────────────┐ │
    │  │ PostboardError→status_code │ Request→422 │ *→500   │ │
    │  └────────────────────────────────────────────────────┘ │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, public/images directory
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from postboard import __version__
from postboard.config import settings
from postboard.database import dispose_engine
from postboard.exceptions import PostboardError, ValidationError
from postboard.graphql.router import INTERNAL_ERROR_MESSAGE, create_graphql_router
from postboard.middleware.auth import AuthMiddleware
from postboard.middleware.logging import RequestLoggingMiddleware
from postboard.middleware.request_id import RequestIDMiddleware, request_id_var
from postboard.routes import feed, health, images
from postboard.services.file_service import IMAGES_DIRNAME

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every operation
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Postboard Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # The server stays up so /health can report; token issuance will fail
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    images_dir = Path(settings.public_root) / IMAGES_DIRNAME
    images_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Public images directory: %s", images_dir.resolve())

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("GraphQL endpoint: http://%s:%d/graphql", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Postboard Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to REST error bodies: {"message", "data"?, "request_id"}.

    Handler hierarchy:
        PostboardError          → its status_code (422, 401, 403, 404, 409, 500)
        RequestValidationError  → 422 (missing/ill-typed form or query fields)
        Exception (fallback)    → 500 with a generic message

    5xx details are logged server-side only. GraphQL errors never reach these
    handlers; the GraphQL router formats them.
    """

    @app.exception_handler(PostboardError)
    async def handle_postboard_error(request: Request, exc: PostboardError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context
            )
            message = "An internal error occurred. Please try again later."
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
            message = exc.message

        content = {"message": message, "request_id": rid}
        if isinstance(exc, ValidationError) and exc.data:
            content["data"] = exc.data
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        data = [
            {"message": f"{'.'.join(str(part) for part in err['loc'][1:])}: {err['msg']}"}
            for err in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %s", rid, data)
        return JSONResponse(
            status_code=422,
            content={"message": "Invalid input.", "data": data, "request_id": rid},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"message": INTERNAL_ERROR_MESSAGE, "request_id": rid},
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Postboard API",
        description=(
            "Blogging backend: user accounts and posts with images, "
            "served over GraphQL (/graphql) and REST (/feed, /post/post-image)."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition; AuthMiddleware runs
    # innermost so the access log can report the caller it resolved.
    app.add_middleware(AuthMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["OPTIONS", "GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(images.router)
    app.include_router(feed.router)
    app.include_router(health.router)
    app.include_router(create_graphql_router(), prefix="/graphql", tags=["GraphQL"])

    # Uploaded images; the directory is created by FileService and lifespan
    app.mount(
        f"/{IMAGES_DIRNAME}",
        StaticFiles(directory=Path(settings.public_root) / IMAGES_DIRNAME, check_dir=False),
        name=IMAGES_DIRNAME,
    )

    return app


app = create_app()


def run() -> None:
    """Console-script entry point."""
    uvicorn.run("postboard.main:app", host=settings.host, port=settings.port)
