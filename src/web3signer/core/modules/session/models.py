"""Session state stored server-side, keyed by an opaque session id.

A session holds exactly one state variant, so pending-MFA and authenticated
fields can never be present together.
"""

import secrets
from datetime import datetime
from typing import Annotated, Literal, NewType

from pydantic import BaseModel, Field

from web3signer.core.db import MongoModel
from web3signer.utils import now

SessionId = NewType("SessionId", str)


def generate_session_id() -> SessionId:
    return SessionId(secrets.token_urlsafe(32))


class AnonymousState(BaseModel):
    kind: Literal["anonymous"] = "anonymous"


class PendingMfaState(BaseModel):
    """Login signature accepted, second factor still outstanding."""

    kind: Literal["pending_mfa"] = "pending_mfa"
    pending_user_id: int
    mfa_bonus_phrase: str
    expires_at: datetime  # Deadline of this login attempt, independent of other sessions


class AuthenticatedState(BaseModel):
    kind: Literal["authenticated"] = "authenticated"
    user_id: int
    address: str


SessionState = Annotated[AnonymousState | PendingMfaState | AuthenticatedState, Field(discriminator="kind")]


class Session(MongoModel):
    """Server-side session document.

    Indexed on expires_at (TTL). Expired documents are treated as anonymous
    even before MongoDB's TTL monitor removes them.
    """

    id: str = Field(alias="_id", serialization_alias="id")
    state: SessionState = Field(default_factory=AnonymousState)
    expires_at: datetime
    updated_at: datetime = Field(default_factory=now)
