"""Account-level MFA state and the results returned by the auth flow."""

from datetime import datetime

from pydantic import BaseModel, Field

from web3signer.core.db import MongoModel
from web3signer.core.modules.message.models import MessageView
from web3signer.core.modules.user.models import UserView
from web3signer.utils import now


class AuthRecord(MongoModel):
    """MFA state of one user. Indexed on user_id - unique.

    awaiting_mfa_enrollment is set by MFA initialization and cleared, together
    with setting mfa_enabled, when enrollment completes. mfa_timeout_at is only
    set while a login waits for its second factor.
    """

    user_id: int
    mfa_enabled: bool = False
    awaiting_mfa_enrollment: bool = False
    mfa_timeout_at: datetime | None = None
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)

    def is_mfa_window_expired(self, at: datetime) -> bool:
        return self.mfa_timeout_at is not None and at > self.mfa_timeout_at


class LoginResult(BaseModel):
    """Outcome of a login signature.

    With mfa=True only the bonus phrase is set; the caller is not authenticated yet.
    """

    mfa: bool
    mfa_bonus_phrase: str | None = None
    user: UserView | None = None
    messages: list[MessageView] | None = None


class SessionUser(BaseModel):
    """Authenticated user with their most recent messages."""

    user: UserView
    messages: list[MessageView]


class MfaSetup(BaseModel):
    """Data needed by an authenticator app to enroll."""

    qr_code: str  # data:image/png;base64,... encoding of the provisioning URI
    secret: str
