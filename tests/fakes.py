"""In-memory stand-ins for the MongoDB services, Mongo collection stubs, a test wallet and clock."""

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import Mock

from coincurve import PrivateKey

from web3signer.core.modules.auth.models import AuthRecord
from web3signer.core.modules.message.models import MessageOrderField, MessageRecord
from web3signer.core.modules.session.models import AnonymousState, SessionState
from web3signer.core.modules.signature.models import SignatureCheck
from web3signer.core.modules.signature.verifier import hash_personal_message, public_key_to_address
from web3signer.core.modules.user.models import User
from web3signer.core.pagination import PaginationResult
from web3signer.errors import SessionPersistError

TEST_SALT = "test-server-salt"


class Wallet:
    """secp256k1 key that signs like a browser wallet's personal_sign."""

    def __init__(self, secret: int) -> None:
        self.private_key = PrivateKey(secret.to_bytes(32, "big"))
        self.address = public_key_to_address(self.private_key.public_key)

    def sign(self, message: str) -> str:
        raw = self.private_key.sign_recoverable(hash_personal_message(message), hasher=None)
        return "0x" + (raw[:64] + bytes([raw[64] + 27])).hex()


class FakeClock:
    def __init__(self, start: datetime = datetime(2026, 1, 1, 0, 0, 15, tzinfo=UTC)) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


class InMemoryUsers:
    def __init__(self) -> None:
        self.users: dict[int, User] = {}
        self._next_id = 1

    async def get_user(self, user_id: int) -> User | None:
        return self.users.get(user_id)

    async def find_or_create(self, address: str) -> User:
        existing = self._by_address(address)
        if existing is not None:
            return existing
        # Yield so concurrent logins interleave between lookup and insert
        await asyncio.sleep(0)
        existing = self._by_address(address)
        if existing is not None:
            return existing
        user = User(_id=self._next_id, address=address)
        self._next_id += 1
        self.users[user.id] = user
        return user

    def _by_address(self, address: str) -> User | None:
        return next((u for u in self.users.values() if u.address == address), None)


class InMemoryAuthRecords:
    def __init__(self) -> None:
        self.records: dict[int, AuthRecord] = {}

    async def get(self, user_id: int) -> AuthRecord | None:
        record = self.records.get(user_id)
        return record.model_copy() if record else None

    async def ensure(self, user_id: int) -> AuthRecord:
        if user_id not in self.records:
            self.records[user_id] = AuthRecord(user_id=user_id)
        return self.records[user_id].model_copy()

    async def set_mfa_timeout(self, user_id: int, timeout_at: datetime | None) -> None:
        self.records[user_id].mfa_timeout_at = timeout_at

    async def mark_awaiting_enrollment(self, user_id: int) -> None:
        self.records[user_id].awaiting_mfa_enrollment = True

    async def complete_enrollment(self, user_id: int) -> None:
        record = self.records[user_id]
        record.mfa_enabled = True
        record.awaiting_mfa_enrollment = False


class InMemorySessions:
    def __init__(self) -> None:
        self.states: dict[str, SessionState] = {}
        self.fail_writes = False

    async def load(self, session_id: str) -> SessionState:
        return self.states.get(session_id, AnonymousState())

    async def save(self, session_id: str, state: SessionState) -> None:
        if self.fail_writes:
            raise SessionPersistError
        self.states[session_id] = state

    async def destroy(self, session_id: str) -> None:
        self.states.pop(session_id, None)


class InMemoryMessages:
    def __init__(self, clock: FakeClock) -> None:
        self.records: list[MessageRecord] = []
        self._clock = clock
        self._next_id = 1

    async def record(self, user_id: int, checks: list[SignatureCheck]) -> list[MessageRecord]:
        created = []
        for check in checks:
            timestamp = self._clock()
            created.append(
                MessageRecord(
                    _id=self._next_id,
                    user_id=user_id,
                    message=check.message,
                    signature=check.signature,
                    signer=check.signer,
                    valid=check.valid,
                    created_at=timestamp,
                    updated_at=timestamp,
                )
            )
            self._next_id += 1
        self.records.extend(created)
        return created

    async def recent(self, user_id: int, limit: int) -> list[MessageRecord]:
        own = [r for r in self.records if r.user_id == user_id]
        return sorted(own, key=lambda r: (r.created_at, r.id), reverse=True)[:limit]

    async def list_messages(
        self, user_id: int, limit: int, offset: int, order_by: MessageOrderField, descending: bool
    ) -> PaginationResult[MessageRecord]:
        own = [r for r in self.records if r.user_id == user_id]
        ordered = sorted(own, key=lambda r: (getattr(r, order_by.attribute), r.id), reverse=descending)
        return PaginationResult(items=ordered[offset : offset + limit], total=len(own), limit=limit, offset=offset)

    async def get_message(self, user_id: int, message_id: int) -> MessageRecord | None:
        return next((r for r in self.records if r.user_id == user_id and r.id == message_id), None)

    async def delete_message(self, user_id: int, message_id: int) -> bool:
        record = await self.get_message(user_id, message_id)
        if record is None:
            return False
        self.records.remove(record)
        return True


def mongo_stub() -> tuple[Mock, Mock]:
    """Database stub whose get_collection returns one collection stub; assign AsyncMocks per test."""
    collection = Mock()
    database = Mock()
    database.get_collection.return_value = collection
    return database, collection
