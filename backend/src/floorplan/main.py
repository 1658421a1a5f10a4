"""Main module for the Floorplan API service."""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from floorplan.api.v1.api import api_router
from floorplan.core.auth import decode_token
from floorplan.core.config import Settings, get_settings
from floorplan.core.dependencies import get_app_settings
from floorplan.services.room_store import RoomStore
from floorplan.services.session_service import SessionRegistry

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# Authentication middleware
class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware to check authentication for protected routes."""

    async def dispatch(self, request: Request, call_next):
        """Check authentication for protected routes.

        Args:
            request: The FastAPI request object.
            call_next: The next middleware or endpoint handler.

        Returns:
            Response: The response from the next middleware or endpoint.
        """
        settings: Settings = request.app.state.settings

        # Public paths that don't require authentication
        public_paths = [
            "/ping",
            "/docs",
            "/redoc",
            f"{settings.api_v1_str}/auth/login",
            f"{settings.api_v1_str}/openapi.json",
        ]

        if any(request.url.path.startswith(path) for path in public_paths):
            return await call_next(request)

        # CORS preflight
        if request.method == "OPTIONS":
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return Response(
                content='{"detail":"Not authenticated"}',
                status_code=403,
                media_type="application/json"
            )

        token = auth_header.replace("Bearer ", "")
        payload = decode_token(token, settings)
        if payload is None:
            return Response(
                content='{"detail":"Invalid or expired token"}',
                status_code=403,
                media_type="application/json"
            )

        return await call_next(request)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize services once at application startup."""
    logger.info("Initializing application services...")

    app.state.room_store = RoomStore(app.state.settings.rooms_db_uri)
    app.state.room_store.init_db()
    app.state.sessions = SessionRegistry()

    logger.info("All application services initialized successfully")
    yield

    logger.info(f"Discarding {len(app.state.sessions)} editing sessions")
    app.state.sessions = SessionRegistry()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around ``settings`` (loaded from the environment by default)."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.project_name,
        openapi_url=f"{settings.api_v1_str}/openapi.json",
        redirect_slashes=False,  # Disable automatic redirects for trailing slashes
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(AuthMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.backend_cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Requested-With"],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    app.include_router(api_router, prefix=settings.api_v1_str)

    @app.get("/ping")
    async def pong(settings: Settings = Depends(get_app_settings)) -> Dict[str, Any]:
        """Ping the API to check if it's running."""
        return {
            "ping": "pong!",
            "environment": settings.environment,
            "testing": settings.testing,
        }

    return app


app = create_app()
