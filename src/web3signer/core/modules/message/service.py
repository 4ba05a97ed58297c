from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from web3signer.core.core import Service
from web3signer.core.modules.counter.models import CounterType
from web3signer.core.modules.message.models import MessageOrderField, MessageRecord
from web3signer.core.modules.signature.models import SignatureCheck
from web3signer.core.pagination import PaginationResult

logger = structlog.get_logger(__name__)


class MessageService(Service):
    """Append-only log of signature verifications per user."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("messages")

    async def on_start(self) -> None:
        """Create indexes for per-user listing."""
        await self._collection.create_index([("user_id", 1), ("created_at", -1)])

    async def record(self, user_id: int, checks: list[SignatureCheck]) -> list[MessageRecord]:
        """Store verification results for a user in one write."""
        if not checks:
            return []
        first_id = await self.core.services.counter.reserve_sequence(CounterType.MESSAGE, len(checks))
        records = [
            MessageRecord(
                id=first_id + index,
                user_id=user_id,
                message=check.message,
                signature=check.signature,
                signer=check.signer,
                valid=check.valid,
            )
            for index, check in enumerate(checks)
        ]
        await self._collection.insert_many([record.to_mongo() for record in records])
        logger.debug("messages_recorded", user_id=user_id, count=len(records))
        return records

    async def recent(self, user_id: int, limit: int) -> list[MessageRecord]:
        """Most recent messages of a user, newest first."""
        cursor = self._collection.find({"user_id": user_id}).sort([("created_at", -1), ("_id", -1)]).limit(limit)
        return await MessageRecord.list_cursor(cursor)

    async def list_messages(
        self, user_id: int, limit: int, offset: int, order_by: MessageOrderField, descending: bool
    ) -> PaginationResult[MessageRecord]:
        """Get paginated messages of a user."""
        query = {"user_id": user_id}
        direction = -1 if descending else 1

        total = await self._collection.count_documents(query)
        cursor = (
            self._collection.find(query).sort([(order_by.attribute, direction), ("_id", direction)]).skip(offset).limit(limit)
        )
        items = await MessageRecord.list_cursor(cursor)

        return PaginationResult(items=items, total=total, limit=limit, offset=offset)

    async def get_message(self, user_id: int, message_id: int) -> MessageRecord | None:
        doc = await self._collection.find_one({"_id": message_id, "user_id": user_id})
        return None if doc is None else MessageRecord.model_validate(doc)

    async def delete_message(self, user_id: int, message_id: int) -> bool:
        result = await self._collection.delete_one({"_id": message_id, "user_id": user_id})
        return result.deleted_count == 1
