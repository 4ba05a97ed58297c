from fastapi import APIRouter, Request
from pydantic import BaseModel, ConfigDict, Field

from web3signer.core.modules.message.models import MessageView
from web3signer.core.modules.user.models import UserView
from web3signer.web.deps import AppDep, SessionIdDep
from web3signer.web.openapi import ApiResponse, ErrorResponse, MessageResponse

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    """Wallet login request."""

    message: str = Field(..., description='Signed message, must be exactly "login"')
    signature: str = Field(..., description="Hex-encoded 65-byte personal_sign signature")
    address: str = Field(..., description="Wallet address claimed by the caller")


class LoginResponse(ApiResponse):
    """Login outcome. With mfa=true only mfa_bonus_phrase is returned."""

    mfa: bool = Field(..., description="Whether a TOTP code is required to finish the login")
    mfa_bonus_phrase: str | None = Field(None, description="Phrase to send back with the TOTP code")
    user: UserView | None = Field(None, description="Authenticated user (mfa=false only)")
    messages: list[MessageView] | None = Field(None, description="Most recent messages (mfa=false only)")


class CurrentUserResponse(ApiResponse):
    """Authenticated user with recent messages."""

    user: UserView
    messages: list[MessageView]


class MfaInitializeRequest(BaseModel):
    """MFA enrollment request."""

    message: str = Field(..., description='Signed message, must be exactly "enableMFA"')
    signature: str = Field(..., description="Signature of the message by the session wallet")


class MfaInitializeResponse(ApiResponse):
    """Authenticator app enrollment data."""

    qr_code: str = Field(..., alias="qrCode", description="PNG data URL of the otpauth provisioning URI")
    secret: str = Field(..., description="Base32 TOTP secret")

    model_config = ConfigDict(populate_by_name=True)


class MfaCodeRequest(BaseModel):
    """TOTP code from the authenticator app."""

    mfa_code: str = Field(..., description="Six-digit TOTP code")


class MfaLoginRequest(MfaCodeRequest):
    """Second login step."""

    mfa_bonus_phrase: str | None = Field(None, description="Phrase returned by the login step")


@router.post(
    "/auth",
    summary="Log in with a wallet signature",
    description='Verify a signature of the literal message "login". Users with MFA enabled must finish with POST /auth/mfa.',
    operation_id="login",
    response_model_exclude_none=True,
    responses={
        200: {"description": "Authenticated, or MFA step required"},
        400: {"model": ErrorResponse, "description": "Invalid login message"},
        401: {"model": ErrorResponse, "description": "Invalid signature"},
    },
)
async def login(login_data: LoginRequest, app: AppDep, session_id: SessionIdDep) -> LoginResponse:
    result = await app.login(session_id, login_data.message, login_data.signature, login_data.address)
    return LoginResponse(
        mfa=result.mfa, mfa_bonus_phrase=result.mfa_bonus_phrase, user=result.user, messages=result.messages
    )


@router.get(
    "/auth",
    summary="Get current user",
    description="Get the authenticated user, their MFA flag and their most recent messages.",
    operation_id="getCurrentUser",
    responses={
        200: {"description": "Current user"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def get_current_user(app: AppDep, session_id: SessionIdDep) -> CurrentUserResponse:
    result = await app.get_current_user(session_id)
    return CurrentUserResponse(user=result.user, messages=result.messages)


@router.post(
    "/auth/logout",
    summary="End session",
    description="Destroy the current session. Succeeds without a session too.",
    operation_id="logout",
    responses={200: {"description": "Successfully logged out"}},
)
async def logout(app: AppDep, session_id: SessionIdDep, request: Request) -> MessageResponse:
    await app.logout(session_id)
    request.session.clear()
    return MessageResponse(message="Logged out successfully")


@router.post(
    "/auth/mfa/initialize",
    summary="Start MFA enrollment",
    description='Sign "enableMFA" to receive the TOTP secret and a QR code for an authenticator app.',
    operation_id="initializeMfa",
    responses={
        200: {"description": "Enrollment data"},
        400: {"model": ErrorResponse, "description": "Invalid MFA enablement message"},
        401: {"model": ErrorResponse, "description": "Not authenticated or invalid signature"},
    },
)
async def initialize_mfa(request_data: MfaInitializeRequest, app: AppDep, session_id: SessionIdDep) -> MfaInitializeResponse:
    setup = await app.initialize_mfa(session_id, request_data.message, request_data.signature)
    return MfaInitializeResponse(qr_code=setup.qr_code, secret=setup.secret)


@router.post(
    "/auth/mfa/verify",
    summary="Complete MFA enrollment",
    description="Enable MFA once the authenticator app produces a valid code.",
    operation_id="verifyMfa",
    responses={
        200: {"description": "MFA enabled"},
        400: {"model": ErrorResponse, "description": "MFA setup not initiated"},
        401: {"model": ErrorResponse, "description": "Not authenticated or invalid MFA code"},
    },
)
async def verify_mfa(request_data: MfaCodeRequest, app: AppDep, session_id: SessionIdDep) -> MessageResponse:
    await app.complete_mfa_enrollment(session_id, request_data.mfa_code)
    return MessageResponse(message="MFA enabled successfully")


@router.post(
    "/auth/mfa",
    summary="Complete MFA login",
    description="Finish a pending login with the bonus phrase and a TOTP code.",
    operation_id="completeMfaLogin",
    responses={
        200: {"description": "Authenticated"},
        401: {"model": ErrorResponse, "description": "No pending login, wrong phrase or code, or window expired"},
    },
)
async def complete_mfa_login(request_data: MfaLoginRequest, app: AppDep, session_id: SessionIdDep) -> CurrentUserResponse:
    result = await app.complete_mfa_login(session_id, request_data.mfa_code, request_data.mfa_bonus_phrase)
    return CurrentUserResponse(user=result.user, messages=result.messages)
