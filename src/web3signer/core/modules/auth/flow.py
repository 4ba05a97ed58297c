"""Wallet login with an optional TOTP second factor.

Session states move Anonymous -> PendingMfa -> Authenticated, and back to
Anonymous on logout or when the pending window runs out. Independently each
account moves NotEnrolled -> AwaitingEnrollment -> Enrolled and never back.

Expiry is checked lazily when a request touches the pending state; nothing
runs in the background.
"""

import hmac
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

import structlog

from web3signer.config import Config
from web3signer.core.modules.auth.models import AuthRecord, LoginResult, MfaSetup, SessionUser
from web3signer.core.modules.auth.ports import AuthRecordRepository, MessageRepository, SessionRepository, UserRepository
from web3signer.core.modules.message.models import MessageView
from web3signer.core.modules.mfa.secret import derive_secret
from web3signer.core.modules.mfa.totp import provisioning_uri, render_qr_data_url, self_check, verify_code
from web3signer.core.modules.session.models import AnonymousState, AuthenticatedState, PendingMfaState
from web3signer.core.modules.signature.verifier import SignatureVerifier
from web3signer.core.modules.user.models import User, UserView
from web3signer.errors import (
    EnrollmentNotStartedError,
    InvalidBonusPhraseError,
    InvalidEnrollmentMessageError,
    InvalidLoginMessageError,
    InvalidMfaCodeError,
    InvalidSignatureError,
    MfaWindowExpiredError,
    NoPendingMfaError,
    UnauthenticatedError,
    UserNotFoundError,
)
from web3signer.utils import normalize_address, now

logger = structlog.get_logger(__name__)

LOGIN_MESSAGE = "login"
ENABLE_MFA_MESSAGE = "enableMFA"
BONUS_PHRASE_BYTES = 16


def generate_bonus_phrase() -> str:
    return secrets.token_hex(BONUS_PHRASE_BYTES)


@dataclass(frozen=True)
class AuthSettings:
    mfa_server_salt: str
    mfa_issuer: str = "CAT Web3Signer"
    pending_window: timedelta = timedelta(minutes=5)
    totp_window: int = 2
    recent_messages_limit: int = 10

    @classmethod
    def from_config(cls, config: Config) -> "AuthSettings":
        return cls(
            mfa_server_salt=config.mfa_server_salt,
            mfa_issuer=config.mfa_issuer,
            pending_window=timedelta(minutes=config.mfa_window_minutes),
            totp_window=config.mfa_totp_window,
            recent_messages_limit=config.recent_messages_limit,
        )


class AuthFlow:
    """Login, logout and MFA enrollment over injected storage."""

    def __init__(
        self,
        *,
        users: UserRepository,
        auth_records: AuthRecordRepository,
        sessions: SessionRepository,
        messages: MessageRepository,
        verifier: SignatureVerifier,
        settings: AuthSettings,
        clock: Callable[[], datetime] = now,
    ) -> None:
        self._users = users
        self._auth_records = auth_records
        self._sessions = sessions
        self._messages = messages
        self._verifier = verifier
        self._settings = settings
        self._clock = clock

    async def login(self, session_id: str, message: str, signature: str, address: str) -> LoginResult:
        """Accept a signature of "login" and either authenticate or start the MFA step.

        The literal message is checked first, then the signature, and only then
        is the account looked up, so a bad signature gives the same answer for
        known and unknown addresses.
        """
        if message != LOGIN_MESSAGE:
            raise InvalidLoginMessageError
        if not self._verifier.verify(message, signature, address):
            logger.info("login_rejected", reason="invalid_signature")
            raise InvalidSignatureError

        user = await self._users.find_or_create(normalize_address(address))
        record = await self._auth_records.ensure(user.id)

        if record.mfa_enabled:
            bonus_phrase = generate_bonus_phrase()
            expires_at = self._clock() + self._settings.pending_window
            await self._auth_records.set_mfa_timeout(user.id, expires_at)
            await self._sessions.save(
                session_id,
                PendingMfaState(pending_user_id=user.id, mfa_bonus_phrase=bonus_phrase, expires_at=expires_at),
            )
            logger.info("mfa_login_started", user_id=user.id)
            return LoginResult(mfa=True, mfa_bonus_phrase=bonus_phrase)

        await self._sessions.save(session_id, AuthenticatedState(user_id=user.id, address=user.address))
        logger.info("login_succeeded", user_id=user.id, mfa=False)
        return LoginResult(mfa=False, user=UserView.from_domain(user), messages=await self._recent_messages(user.id))

    async def require_authenticated(self, session_id: str) -> AuthenticatedState:
        state = await self._sessions.load(session_id)
        if not isinstance(state, AuthenticatedState):
            raise UnauthenticatedError
        return state

    async def get_current_user(self, session_id: str) -> SessionUser:
        state = await self.require_authenticated(session_id)
        user = await self._get_user(state.user_id)
        record = await self._auth_records.get(user.id)
        return await self._session_user(user, record)

    async def logout(self, session_id: str) -> None:
        await self._sessions.destroy(session_id)
        logger.debug("logout")

    async def initialize_mfa(self, session_id: str, message: str, signature: str) -> MfaSetup:
        """Start MFA enrollment after the user signs "enableMFA"."""
        state = await self.require_authenticated(session_id)
        if message != ENABLE_MFA_MESSAGE:
            raise InvalidEnrollmentMessageError

        user = await self._get_user(state.user_id)
        if not self._verifier.verify(message, signature, user.address):
            raise InvalidSignatureError

        secret = derive_secret(user.address, self._settings.mfa_server_salt)
        qr_code = render_qr_data_url(provisioning_uri(secret, user.address, self._settings.mfa_issuer))

        # Diagnostic only: a failure means derivation and TOTP disagree, but enrollment still proceeds
        if not self_check(secret, self._clock()):
            logger.error("mfa_self_check_failed", user_id=user.id)

        await self._auth_records.ensure(user.id)
        await self._auth_records.mark_awaiting_enrollment(user.id)
        logger.info("mfa_enrollment_started", user_id=user.id)
        return MfaSetup(qr_code=qr_code, secret=secret)

    async def complete_mfa_enrollment(self, session_id: str, mfa_code: str) -> None:
        """Confirm enrollment with a code from the authenticator app.

        Repeating the call with a valid code once MFA is enabled succeeds
        again without changing anything.
        """
        state = await self.require_authenticated(session_id)
        record = await self._auth_records.get(state.user_id)
        if record is None:
            raise UserNotFoundError
        if not (record.awaiting_mfa_enrollment or record.mfa_enabled):
            raise EnrollmentNotStartedError

        if not self._verify_code(state.address, mfa_code):
            logger.info("mfa_enrollment_rejected", user_id=state.user_id)
            raise InvalidMfaCodeError

        if record.awaiting_mfa_enrollment:
            await self._auth_records.complete_enrollment(state.user_id)
            logger.info("mfa_enabled", user_id=state.user_id)

    async def complete_mfa_login(self, session_id: str, mfa_code: str, mfa_bonus_phrase: str | None) -> SessionUser:
        """Finish a pending login with the bonus phrase and a TOTP code.

        A wrong phrase or code keeps the pending state so the user can retry
        until the window closes. An expired window drops it. A repeated call
        with a still-valid code after the login went through succeeds again.
        """
        state = await self._sessions.load(session_id)
        if isinstance(state, AuthenticatedState) and self._verify_code(state.address, mfa_code):
            user = await self._get_user(state.user_id)
            return await self._session_user(user, await self._auth_records.get(user.id))
        if not isinstance(state, PendingMfaState):
            raise NoPendingMfaError
        if mfa_bonus_phrase is None or not hmac.compare_digest(
            mfa_bonus_phrase.encode("utf-8"), state.mfa_bonus_phrase.encode("utf-8")
        ):
            raise InvalidBonusPhraseError

        user = await self._get_user(state.pending_user_id)
        record = await self._auth_records.get(user.id)
        if record is None:
            raise UserNotFoundError

        at = self._clock()
        # Either deadline ends the attempt: this session's own or the account-wide one
        if at > state.expires_at or record.is_mfa_window_expired(at):
            await self._sessions.save(session_id, AnonymousState())
            logger.info("mfa_window_expired", user_id=user.id)
            raise MfaWindowExpiredError

        if not self._verify_code(user.address, mfa_code):
            logger.info("mfa_login_rejected", user_id=user.id)
            raise InvalidMfaCodeError

        await self._sessions.save(session_id, AuthenticatedState(user_id=user.id, address=user.address))
        await self._auth_records.set_mfa_timeout(user.id, None)
        logger.info("login_succeeded", user_id=user.id, mfa=True)
        return await self._session_user(user, record)

    def _verify_code(self, address: str, code: str) -> bool:
        secret = derive_secret(address, self._settings.mfa_server_salt)
        return verify_code(secret, code, self._clock(), self._settings.totp_window)

    async def _get_user(self, user_id: int) -> User:
        user = await self._users.get_user(user_id)
        if user is None:
            raise UserNotFoundError
        return user

    async def _recent_messages(self, user_id: int) -> list[MessageView]:
        records = await self._messages.recent(user_id, self._settings.recent_messages_limit)
        return [MessageView.from_domain(record) for record in records]

    async def _session_user(self, user: User, record: AuthRecord | None) -> SessionUser:
        mfa_enabled = record is not None and record.mfa_enabled
        return SessionUser(user=UserView.from_domain(user, mfa=mfa_enabled), messages=await self._recent_messages(user.id))
