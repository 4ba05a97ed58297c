"""Tests for signature verification endpoints' core and message history."""

import pytest

from web3signer.core.modules.message.models import MessageOrderField, SortOrder
from web3signer.errors import NotFoundError, SignatureVerificationError, UnauthenticatedError, ValidationError


@pytest.fixture
async def user_id(flow, wallet, session_id):
    result = await flow.login(session_id, "login", wallet.sign("login"), wallet.address)
    return result.user.id


class TestVerifySignature:
    """Tests for single signature verification."""

    async def test_requires_authentication(self, ledger, wallet, session_id):
        """Test that verification needs an authenticated session."""
        with pytest.raises(UnauthenticatedError):
            await ledger.verify_signature(session_id, "hello", wallet.sign("hello"))

    async def test_records_check(self, ledger, messages, other_wallet, session_id, user_id):
        """Test that the recovered signer is returned and recorded for the session user."""
        check = await ledger.verify_signature(session_id, "hello", other_wallet.sign("hello"))

        assert check.signer == other_wallet.address
        assert check.valid is True
        assert len(messages.records) == 1
        assert messages.records[0].user_id == user_id
        assert messages.records[0].signer == other_wallet.address

    async def test_malformed_signature(self, ledger, messages, session_id, user_id):
        """Test that an unrecoverable signature is reported and not recorded."""
        with pytest.raises(SignatureVerificationError, match="Failed to verify signature"):
            await ledger.verify_signature(session_id, "hello", "0x1234")
        assert messages.records == []

    async def test_shows_up_in_recent_messages(self, flow, ledger, wallet, session_id, user_id):
        """Test that recorded messages are returned with the profile."""
        await ledger.verify_signature(session_id, "hello", wallet.sign("hello"))

        result = await flow.get_current_user(session_id)
        assert [m.message for m in result.messages] == ["hello"]


class TestVerifySignatures:
    """Tests for batch verification."""

    async def test_empty_batch(self, ledger, session_id, user_id):
        """Test that an empty batch is rejected."""
        with pytest.raises(ValidationError, match="No signatures provided"):
            await ledger.verify_signatures(session_id, [])

    async def test_all_recorded(self, ledger, messages, wallet, other_wallet, session_id, user_id):
        """Test that every item of a good batch is verified and recorded."""
        checks = await ledger.verify_signatures(
            session_id, [("one", wallet.sign("one")), ("two", other_wallet.sign("two"))]
        )

        assert [c.signer for c in checks] == [wallet.address, other_wallet.address]
        assert [r.message for r in messages.records] == ["one", "two"]

    async def test_one_bad_item_records_nothing(self, ledger, messages, wallet, session_id, user_id):
        """Test that a single unrecoverable item fails the whole batch."""
        with pytest.raises(SignatureVerificationError, match='for message: "two"'):
            await ledger.verify_signatures(session_id, [("one", wallet.sign("one")), ("two", "0xbad")])
        assert messages.records == []


class TestMessageHistory:
    """Tests for paging, reading and deleting recorded messages."""

    @pytest.fixture
    async def recorded(self, ledger, clock, wallet, session_id, user_id):
        for i in range(25):
            clock.advance(seconds=1)
            await ledger.verify_signature(session_id, f"m{i}", wallet.sign(f"m{i}"))

    async def test_first_page(self, ledger, session_id, recorded):
        """Test that the default page holds the ten newest messages."""
        result = await ledger.list_messages(session_id)

        assert [m.message for m in result.items] == [f"m{i}" for i in range(24, 14, -1)]
        assert result.total == 25
        assert result.total_pages == 3
        assert result.has_more is True

    async def test_last_page(self, ledger, session_id, recorded):
        """Test that the last page holds the remainder."""
        result = await ledger.list_messages(session_id, page=3, limit=10)

        assert len(result.items) == 5
        assert result.page == 3
        assert result.has_more is False

    async def test_ascending_order(self, ledger, session_id, recorded):
        """Test that ascending order starts with the oldest message."""
        result = await ledger.list_messages(session_id, limit=3, order_by=MessageOrderField.UPDATED_AT, order=SortOrder.ASC)
        assert [m.message for m in result.items] == ["m0", "m1", "m2"]

    @pytest.mark.parametrize(("page", "limit"), [(0, 10), (1, 0), (1, 101)])
    async def test_invalid_paging(self, ledger, session_id, user_id, page, limit):
        """Test that out-of-range page or limit is rejected."""
        with pytest.raises(ValidationError):
            await ledger.list_messages(session_id, page=page, limit=limit)

    async def test_get_and_delete(self, ledger, messages, session_id, recorded):
        """Test that a message can be read and then deleted."""
        message_id = messages.records[0].id

        record = await ledger.get_message(session_id, message_id)
        assert record.message == "m0"

        await ledger.delete_message(session_id, message_id)
        with pytest.raises(NotFoundError, match="Message not found"):
            await ledger.get_message(session_id, message_id)
        with pytest.raises(NotFoundError):
            await ledger.delete_message(session_id, message_id)

    async def test_other_users_messages_hidden(self, flow, ledger, messages, other_wallet, recorded):
        """Test that messages are scoped to their owner."""
        await flow.login("other-session", "login", other_wallet.sign("login"), other_wallet.address)
        message_id = messages.records[0].id

        with pytest.raises(NotFoundError):
            await ledger.get_message("other-session", message_id)
        with pytest.raises(NotFoundError):
            await ledger.delete_message("other-session", message_id)
        assert (await ledger.list_messages("other-session")).total == 0
