from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from web3signer.core.core import Service
from web3signer.core.modules.counter.models import CounterType
from web3signer.core.modules.user.models import User

logger = structlog.get_logger(__name__)


class UserService(Service):
    """Stores wallet users keyed by their normalized address."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("users")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._collection.create_index([("address", 1)], unique=True)

    async def get_user(self, user_id: int) -> User | None:
        doc = await self._collection.find_one({"_id": user_id})
        return None if doc is None else User.model_validate(doc)

    async def get_user_by_address(self, address: str) -> User | None:
        doc = await self._collection.find_one({"address": address})
        return None if doc is None else User.model_validate(doc)

    async def find_or_create(self, address: str) -> User:
        """Return the user for a normalized address, creating it on first sight.

        Two concurrent calls for the same new address both reach insert_one;
        the loser hits the unique index and re-fetches the winner's document.
        """
        user = await self.get_user_by_address(address)
        if user is not None:
            return user

        user_id = await self.core.services.counter.get_next_sequence(CounterType.USER)
        user = User(id=user_id, address=address)
        try:
            await self._collection.insert_one(user.to_mongo())
        except DuplicateKeyError:
            existing = await self.get_user_by_address(address)
            if existing is None:
                raise
            logger.debug("user_create_race_lost", address=address, user_id=existing.id)
            return existing

        logger.info("user_created", user_id=user.id, address=address)
        return user
