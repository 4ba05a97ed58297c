from datetime import timedelta
from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from web3signer.core.core import Service
from web3signer.core.modules.session.models import AnonymousState, Session, SessionState
from web3signer.errors import SessionPersistError
from web3signer.utils import now

logger = structlog.get_logger(__name__)


class SessionService(Service):
    """Service for storing session state in MongoDB."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("sessions")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        # TTL index: documents are removed once expires_at has passed
        await self._collection.create_index([("expires_at", 1)], expireAfterSeconds=0)

    @property
    def ttl(self) -> timedelta:
        return timedelta(days=self.core.config.session_ttl_days)

    async def load(self, session_id: str) -> SessionState:
        doc = await self._collection.find_one({"_id": session_id})
        if doc is None:
            return AnonymousState()
        session = Session.model_validate(doc)
        if session.expires_at <= now():
            return AnonymousState()
        return session.state

    async def save(self, session_id: str, state: SessionState) -> None:
        """Replace the session state. Raises SessionPersistError if the write fails."""
        session = Session(id=session_id, state=state, expires_at=now() + self.ttl)
        try:
            await self._collection.replace_one({"_id": session_id}, session.to_mongo(), upsert=True)
        except PyMongoError as e:
            logger.exception("session_save_failed", state=state.kind)
            raise SessionPersistError from e

    async def destroy(self, session_id: str) -> None:
        """Remove a session. Removing a missing session is not an error."""
        await self._collection.delete_one({"_id": session_id})
