from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

SESSION_COOKIE_NAME = "session"


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="Web3Signer API",
            version="0.1.0",
            summary="Wallet signature login with TOTP second factor",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "SessionCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": SESSION_COOKIE_NAME,
                "description": "Signed session cookie issued by the server",
            },
        }

        # Apply security globally (will be overridden for public endpoints)
        openapi_schema["security"] = [{"SessionCookie": []}]

        # Endpoints that work without an authenticated session
        public_endpoints = {
            ("POST", "/auth"),
            ("POST", "/auth/logout"),
            ("POST", "/auth/mfa"),
            ("GET", "/health"),
        }

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in public_endpoints:
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ApiResponse(BaseModel):
    """Envelope shared by every successful response."""

    success: bool = Field(True, description="Always true for successful responses")
    status: int = Field(200, description="HTTP status code")


class MessageResponse(ApiResponse):
    """Success response carrying only a human-readable message."""

    message: str = Field(..., description="Human-readable result")


class ErrorResponse(BaseModel):
    """Standard error response format."""

    success: bool = Field(False, description="Always false for errors")
    status: int = Field(..., description="HTTP status code")
    error: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"success": False, "status": 401, "error": "Invalid signature", "type": "authentication_error"},
                {"success": False, "status": 400, "error": "Invalid login message", "type": "validation_error"},
                {"success": False, "status": 404, "error": "User not found", "type": "not_found"},
            ]
        }
    }
