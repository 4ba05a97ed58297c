from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from starlette.middleware.sessions import SessionMiddleware

from web3signer.app import App
from web3signer.config import Config
from web3signer.errors import SessionPersistError, UserError
from web3signer.utils import now
from web3signer.web.error_handlers import (
    general_exception_handler,
    request_validation_error_handler,
    session_persist_error_handler,
    user_error_handler,
)
from web3signer.web.openapi import SESSION_COOKIE_NAME, set_custom_openapi
from web3signer.web.routers import auth_router, messages_router, signature_router


class HealthResponse(BaseModel):
    """Liveness probe response."""

    status: str = "OK"
    timestamp: str


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        # Store app instance and config in app state
        app.state.app = app_instance
        app.state.config = config
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="Web3Signer API",
        lifespan=lifespan,
        openapi_tags=[],  # Tags will be added by custom OpenAPI function
    )

    # The cookie only carries the server-side session id; state lives in the sessions collection
    app.add_middleware(
        SessionMiddleware,
        secret_key=config.session_secret_key,
        session_cookie=SESSION_COOKIE_NAME,
        max_age=int(timedelta(days=config.session_ttl_days).total_seconds()),
        same_site="lax",
        https_only=config.session_https_only,
    )

    # Add CORS middleware for frontend development
    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/health", tags=["health"])
    async def health_check() -> HealthResponse:
        return HealthResponse(timestamp=now().isoformat())

    app.include_router(auth_router)
    app.include_router(signature_router)
    app.include_router(messages_router)

    # Register error handlers
    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(SessionPersistError, session_persist_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
