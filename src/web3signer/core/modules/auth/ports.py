"""Storage interfaces the auth flow depends on.

The MongoDB services implement these; tests substitute in-memory versions.
"""

from datetime import datetime
from typing import Protocol

from web3signer.core.modules.auth.models import AuthRecord
from web3signer.core.modules.message.models import MessageOrderField, MessageRecord
from web3signer.core.modules.session.models import SessionState
from web3signer.core.modules.signature.models import SignatureCheck
from web3signer.core.modules.user.models import User
from web3signer.core.pagination import PaginationResult


class UserRepository(Protocol):
    async def get_user(self, user_id: int) -> User | None: ...

    async def find_or_create(self, address: str) -> User:
        """Must tolerate concurrent creation of the same address."""
        ...


class AuthRecordRepository(Protocol):
    async def get(self, user_id: int) -> AuthRecord | None: ...

    async def ensure(self, user_id: int) -> AuthRecord: ...

    async def set_mfa_timeout(self, user_id: int, timeout_at: datetime | None) -> None: ...

    async def mark_awaiting_enrollment(self, user_id: int) -> None: ...

    async def complete_enrollment(self, user_id: int) -> None: ...


class SessionRepository(Protocol):
    async def load(self, session_id: str) -> SessionState: ...

    async def save(self, session_id: str, state: SessionState) -> None:
        """Raise SessionPersistError when the write does not go through."""
        ...

    async def destroy(self, session_id: str) -> None: ...


class MessageRepository(Protocol):
    async def record(self, user_id: int, checks: list[SignatureCheck]) -> list[MessageRecord]: ...

    async def recent(self, user_id: int, limit: int) -> list[MessageRecord]: ...

    async def list_messages(
        self, user_id: int, limit: int, offset: int, order_by: MessageOrderField, descending: bool
    ) -> PaginationResult[MessageRecord]: ...

    async def get_message(self, user_id: int, message_id: int) -> MessageRecord | None: ...

    async def delete_message(self, user_id: int, message_id: int) -> bool: ...
