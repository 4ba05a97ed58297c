import logging
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from web3signer.errors import AuthenticationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def create_json_error_response(
    status_code: int, message: str, error_type: str | None = None, details: Any = None
) -> JSONResponse:
    """Create the error envelope, with optional type for machine parsing."""
    content: dict[str, Any] = {"success": False, "status": status_code, "error": message}
    if error_type:
        content["type"] = error_type
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    if isinstance(exc, AuthenticationError):
        status_code = 401
        error_type = "authentication_error"
    elif isinstance(exc, NotFoundError):
        status_code = 404
        error_type = "not_found"
    elif isinstance(exc, ValidationError):
        status_code = 400
        error_type = "validation_error"
    else:
        # Default for any other UserError subclass
        status_code = 400
        error_type = "bad_request"

    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)


async def request_validation_error_handler(_: Request, exc: Exception) -> Response:
    """Handle malformed request bodies (400)."""
    details = jsonable_encoder(exc.errors()) if isinstance(exc, RequestValidationError) else None
    return create_json_error_response(
        status_code=400, message="Validation error", error_type="validation_error", details=details
    )


async def session_persist_error_handler(_: Request, exc: Exception) -> Response:
    """Handle session store write failures (500)."""
    return create_json_error_response(status_code=500, message=str(exc), error_type="session_error")


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("Unexpected error: %s", exc)
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
