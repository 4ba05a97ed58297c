from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from web3signer.config import Config
from web3signer.core.core import Core
from web3signer.core.modules.auth.models import LoginResult, MfaSetup, SessionUser
from web3signer.core.modules.message.models import MessageOrderField, MessageView, SortOrder
from web3signer.core.modules.signature.models import SignatureCheck
from web3signer.core.pagination import PaginationResult


class App:
    """Facade for all application operations, delegates to the flows held by Core."""

    def __init__(self, config: Config, core: Core | None = None) -> None:
        self._core = core if core is not None else Core(config)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    # === Authentication ===
    async def login(self, session_id: str, message: str, signature: str, address: str) -> LoginResult:
        """Authenticate with a wallet signature of "login"; may require a second factor."""
        return await self._core.auth.login(session_id, message, signature, address)

    async def get_current_user(self, session_id: str) -> SessionUser:
        """Get the authenticated user with recent messages."""
        return await self._core.auth.get_current_user(session_id)

    async def logout(self, session_id: str) -> None:
        """Destroy the session (idempotent)."""
        await self._core.auth.logout(session_id)

    async def complete_mfa_login(self, session_id: str, mfa_code: str, mfa_bonus_phrase: str | None) -> SessionUser:
        """Finish a pending login with a TOTP code."""
        return await self._core.auth.complete_mfa_login(session_id, mfa_code, mfa_bonus_phrase)

    # === MFA enrollment ===
    async def initialize_mfa(self, session_id: str, message: str, signature: str) -> MfaSetup:
        """Start MFA enrollment (authenticated only)."""
        return await self._core.auth.initialize_mfa(session_id, message, signature)

    async def complete_mfa_enrollment(self, session_id: str, mfa_code: str) -> None:
        """Enable MFA once the authenticator app produces a valid code (authenticated only)."""
        await self._core.auth.complete_mfa_enrollment(session_id, mfa_code)

    # === Signatures and message history ===
    async def verify_signature(self, session_id: str, message: str, signature: str) -> SignatureCheck:
        """Verify and record one signed message (authenticated only)."""
        return await self._core.ledger.verify_signature(session_id, message, signature)

    async def verify_signatures(self, session_id: str, items: list[tuple[str, str]]) -> list[SignatureCheck]:
        """Verify and record a batch of signed messages (authenticated only)."""
        return await self._core.ledger.verify_signatures(session_id, items)

    async def get_messages(
        self, session_id: str, page: int, limit: int, order_by: MessageOrderField, order: SortOrder
    ) -> PaginationResult[MessageView]:
        """Get a page of the user's recorded messages."""
        result = await self._core.ledger.list_messages(session_id, page, limit, order_by, order)
        return PaginationResult(
            items=[MessageView.from_domain(record) for record in result.items],
            total=result.total,
            limit=result.limit,
            offset=result.offset,
        )

    async def get_message(self, session_id: str, message_id: int) -> MessageView:
        """Get one of the user's recorded messages."""
        return MessageView.from_domain(await self._core.ledger.get_message(session_id, message_id))

    async def delete_message(self, session_id: str, message_id: int) -> None:
        """Delete one of the user's recorded messages."""
        await self._core.ledger.delete_message(session_id, message_id)
