"""Tests for SessionService against a stubbed collection."""

from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fakes import mongo_stub
from pymongo.errors import PyMongoError

from web3signer.core.modules.session.models import AnonymousState, AuthenticatedState, PendingMfaState
from web3signer.core.modules.session.service import SessionService
from web3signer.errors import SessionPersistError
from web3signer.utils import now

ADDRESS = "0x7e5f4552091a69125d5dfcb7b8c2659029395bdf"


def session_doc(state: dict, expires_in: timedelta) -> dict:
    return {"_id": "sid", "state": state, "expires_at": now() + expires_in, "updated_at": now()}


class TestSessionService:
    @pytest.fixture(autouse=True)
    def setup(self):
        """Set up the service with a stub collection and a 7-day TTL."""
        database, self.collection = mongo_stub()
        self.service = SessionService(database)
        self.service.set_core(SimpleNamespace(config=SimpleNamespace(session_ttl_days=7)))  # type: ignore[arg-type]

    async def test_load_missing(self):
        """Test that an unknown session id is anonymous."""
        self.collection.find_one = AsyncMock(return_value=None)
        assert await self.service.load("sid") == AnonymousState()

    async def test_load_authenticated(self):
        """Test that a live session returns its stored state."""
        state = {"kind": "authenticated", "user_id": 1, "address": ADDRESS}
        self.collection.find_one = AsyncMock(return_value=session_doc(state, timedelta(hours=1)))

        assert await self.service.load("sid") == AuthenticatedState(user_id=1, address=ADDRESS)

    async def test_load_pending(self):
        """Test that a pending state keeps its own deadline."""
        deadline = now() + timedelta(minutes=5)
        state = {"kind": "pending_mfa", "pending_user_id": 1, "mfa_bonus_phrase": "ab" * 16, "expires_at": deadline}
        self.collection.find_one = AsyncMock(return_value=session_doc(state, timedelta(hours=1)))

        loaded = await self.service.load("sid")

        assert isinstance(loaded, PendingMfaState)
        assert loaded.expires_at == deadline

    async def test_load_expired(self):
        """Test that a session past expires_at is anonymous before the TTL monitor removes it."""
        state = {"kind": "authenticated", "user_id": 1, "address": ADDRESS}
        self.collection.find_one = AsyncMock(return_value=session_doc(state, -timedelta(seconds=1)))

        assert await self.service.load("sid") == AnonymousState()

    async def test_save_upserts(self):
        """Test that save replaces the document and extends its expiry."""
        self.collection.replace_one = AsyncMock()

        await self.service.save("sid", AuthenticatedState(user_id=1, address=ADDRESS))

        query, doc = self.collection.replace_one.await_args.args
        assert query == {"_id": "sid"}
        assert doc["_id"] == "sid"
        assert doc["state"]["kind"] == "authenticated"
        assert doc["expires_at"] > now() + timedelta(days=6)
        assert self.collection.replace_one.await_args.kwargs["upsert"] is True

    async def test_save_failure(self):
        """Test that a driver error surfaces as SessionPersistError."""
        self.collection.replace_one = AsyncMock(side_effect=PyMongoError("connection closed"))

        with pytest.raises(SessionPersistError):
            await self.service.save("sid", AnonymousState())

    async def test_destroy_missing_is_ok(self):
        """Test that destroying an absent session does not raise."""
        self.collection.delete_one = AsyncMock(return_value=SimpleNamespace(deleted_count=0))

        await self.service.destroy("sid")

        self.collection.delete_one.assert_awaited_once_with({"_id": "sid"})
