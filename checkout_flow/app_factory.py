"""
Application factory for the checkout flow API.

Builds the FastAPI application that hosts checkout sessions. Routes are
mounted under /api/v1 and, for pages that predate the versioned prefix,
at the root as well.
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import CORS_ORIGINS
from .middleware import RequestIDMiddleware
from .routes import checkout_router
from .services.session import SESSION_CACHE, clear_sessions

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Pending step-viewed timers must not fire after shutdown
    clear_sessions()


def create_app(cors_origins: Optional[List[str]] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        cors_origins: Allowed CORS origins. Defaults to CORS_ORIGINS from config.

    Returns:
        Configured FastAPI application
    """
    origins = cors_origins if cors_origins is not None else CORS_ORIGINS
    logger.info("Creating checkout flow application (CORS origins: %s)", origins)

    app = FastAPI(
        title="Checkout Flow API",
        description="Step orchestration for multi-step checkout pages",
        version="0.1.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Checkout", "description": "Checkout session and step navigation endpoints"},
            {"name": "Health", "description": "Service health"},
        ],
    )

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(checkout_router)
    app.include_router(api_v1)

    # Also mount at root for backward compatibility
    app.include_router(checkout_router)

    @app.get("/health", tags=["Health"])
    def health_check():
        return {
            "status": "healthy",
            "sessions": len(SESSION_CACHE),
        }

    return app
