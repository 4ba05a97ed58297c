from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from web3signer.core.modules.signature.models import SignatureCheck
from web3signer.web.deps import AppDep, SessionIdDep
from web3signer.web.openapi import ApiResponse, ErrorResponse

router = APIRouter(tags=["signatures"])


class SignatureRequest(BaseModel):
    """Signed message to verify."""

    message: str = Field(..., description="Message as it was signed")
    signature: str = Field(..., description="Hex-encoded 65-byte personal_sign signature")


class SignatureResult(BaseModel):
    """Recovered signer of one message."""

    is_valid: bool = Field(..., alias="isValid")
    signer: str = Field(..., description="Recovered address, lower-cased")
    original_message: str = Field(..., alias="originalMessage")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_check(cls, check: SignatureCheck) -> "SignatureResult":
        return cls(is_valid=check.valid, signer=check.signer, original_message=check.message)


class SignatureResponse(ApiResponse, SignatureResult):
    """Single signature verification result."""


class SignatureBatchResponse(ApiResponse):
    """Batch signature verification results."""

    results: list[SignatureResult]
    total_verified: int = Field(..., alias="totalVerified")

    model_config = ConfigDict(populate_by_name=True)


@router.post(
    "/verify-signature",
    summary="Verify a signed message",
    description="Recover the signer of a personal_sign signature and record it in the message history.",
    operation_id="verifySignature",
    responses={
        200: {"description": "Recovered signer"},
        400: {"model": ErrorResponse, "description": "Signature could not be recovered"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def verify_signature(request_data: SignatureRequest, app: AppDep, session_id: SessionIdDep) -> SignatureResponse:
    check = await app.verify_signature(session_id, request_data.message, request_data.signature)
    return SignatureResponse(is_valid=check.valid, signer=check.signer, original_message=check.message)


@router.post(
    "/verify-signature-multi",
    summary="Verify a batch of signed messages",
    description="Verify every signature in the batch; nothing is recorded unless all of them verify.",
    operation_id="verifySignatures",
    responses={
        200: {"description": "Recovered signers"},
        400: {"model": ErrorResponse, "description": "Empty batch or a signature failed to verify"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def verify_signatures(
    items: list[SignatureRequest], app: AppDep, session_id: SessionIdDep
) -> SignatureBatchResponse:
    checks = await app.verify_signatures(session_id, [(item.message, item.signature) for item in items])
    return SignatureBatchResponse(results=[SignatureResult.from_check(c) for c in checks], total_verified=len(checks))
