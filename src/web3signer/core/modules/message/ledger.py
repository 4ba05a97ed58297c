import structlog

from web3signer.core.modules.auth.flow import AuthFlow
from web3signer.core.modules.auth.ports import MessageRepository
from web3signer.core.modules.message.models import MessageOrderField, MessageRecord, SortOrder
from web3signer.core.modules.signature.models import SignatureCheck
from web3signer.core.modules.signature.verifier import SignatureVerifier
from web3signer.core.pagination import PaginationResult, page_to_offset
from web3signer.errors import NotFoundError, RecoveryFailedError, SignatureVerificationError, ValidationError

logger = structlog.get_logger(__name__)

MAX_PAGE_SIZE = 100


class SignatureLedger:
    """Verifies signed messages for authenticated users and keeps their history."""

    def __init__(self, *, auth: AuthFlow, messages: MessageRepository, verifier: SignatureVerifier) -> None:
        self._auth = auth
        self._messages = messages
        self._verifier = verifier

    async def verify_signature(self, session_id: str, message: str, signature: str) -> SignatureCheck:
        """Recover the signer of one message and record the attempt."""
        state = await self._auth.require_authenticated(session_id)
        try:
            check = self._verifier.check(message, signature)
        except RecoveryFailedError as e:
            raise SignatureVerificationError from e

        await self._messages.record(state.user_id, [check])
        return check

    async def verify_signatures(self, session_id: str, items: list[tuple[str, str]]) -> list[SignatureCheck]:
        """Verify a batch of (message, signature) pairs.

        Nothing is recorded unless a signer can be recovered for every item.
        """
        state = await self._auth.require_authenticated(session_id)
        if not items:
            raise ValidationError("No signatures provided")

        checks: list[SignatureCheck] = []
        for message, signature in items:
            try:
                check = self._verifier.check(message, signature)
            except RecoveryFailedError as e:
                raise SignatureVerificationError(f'Failed to verify signature for message: "{message}"') from e
            checks.append(check)

        await self._messages.record(state.user_id, checks)
        logger.debug("signature_batch_verified", user_id=state.user_id, count=len(checks))
        return checks

    async def list_messages(
        self,
        session_id: str,
        page: int = 1,
        limit: int = 10,
        order_by: MessageOrderField = MessageOrderField.CREATED_AT,
        order: SortOrder = SortOrder.DESC,
    ) -> PaginationResult[MessageRecord]:
        state = await self._auth.require_authenticated(session_id)
        if page < 1:
            raise ValidationError("Page must be at least 1")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")

        return await self._messages.list_messages(
            state.user_id, limit, page_to_offset(page, limit), order_by, descending=order == SortOrder.DESC
        )

    async def get_message(self, session_id: str, message_id: int) -> MessageRecord:
        state = await self._auth.require_authenticated(session_id)
        record = await self._messages.get_message(state.user_id, message_id)
        if record is None:
            raise NotFoundError("Message not found")
        return record

    async def delete_message(self, session_id: str, message_id: int) -> None:
        state = await self._auth.require_authenticated(session_id)
        if not await self._messages.delete_message(state.user_id, message_id):
            raise NotFoundError("Message not found")
