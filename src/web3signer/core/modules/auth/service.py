from datetime import datetime
from typing import Any

from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from web3signer.core.core import Service
from web3signer.core.modules.auth.models import AuthRecord
from web3signer.utils import now


class AuthRecordService(Service):
    """Persists per-user MFA flags in the `auth` collection."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("auth")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._collection.create_index([("user_id", 1)], unique=True)

    async def get(self, user_id: int) -> AuthRecord | None:
        doc = await self._collection.find_one({"user_id": user_id})
        return None if doc is None else AuthRecord.model_validate(doc)

    async def ensure(self, user_id: int) -> AuthRecord:
        """Return the record for a user, creating a default one if missing."""
        defaults = AuthRecord(user_id=user_id).to_mongo()
        del defaults["user_id"]  # Taken from the filter on insert
        try:
            doc = await self._collection.find_one_and_update(
                {"user_id": user_id},
                {"$setOnInsert": defaults},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            doc = await self._collection.find_one({"user_id": user_id})
        return AuthRecord.model_validate(doc)

    async def set_mfa_timeout(self, user_id: int, timeout_at: datetime | None) -> None:
        await self._update(user_id, {"mfa_timeout_at": timeout_at})

    async def mark_awaiting_enrollment(self, user_id: int) -> None:
        await self._update(user_id, {"awaiting_mfa_enrollment": True})

    async def complete_enrollment(self, user_id: int) -> None:
        """Enable MFA and leave the awaiting state in one write."""
        await self._update(user_id, {"mfa_enabled": True, "awaiting_mfa_enrollment": False})

    async def _update(self, user_id: int, fields: dict[str, Any]) -> None:
        await self._collection.update_one({"user_id": user_id}, {"$set": {**fields, "updated_at": now()}})
