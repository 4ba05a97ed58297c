from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Document not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class ValidationError(UserError):
    """Raised when user input fails validation."""


# === Auth flow errors ===
class InvalidLoginMessageError(ValidationError):
    def __init__(self) -> None:
        super().__init__("Invalid login message")


class InvalidEnrollmentMessageError(ValidationError):
    def __init__(self) -> None:
        super().__init__("Invalid MFA enablement message")


class EnrollmentNotStartedError(ValidationError):
    """Raised when MFA verification is attempted before initialization."""

    def __init__(self) -> None:
        super().__init__("MFA setup not initiated")


class InvalidSignatureError(AuthenticationError):
    """Raised when a signature does not recover to the claimed address.

    Malformed signatures raise this too, so callers cannot tell the two apart.
    """

    def __init__(self) -> None:
        super().__init__("Invalid signature")


class UnauthenticatedError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__("Authentication required")


class InvalidMfaCodeError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__("Invalid MFA code")


class NoPendingMfaError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__("No pending MFA authentication")


class InvalidBonusPhraseError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__("Invalid bonus phrase")


class MfaWindowExpiredError(AuthenticationError):
    """Raised when the pending MFA window has elapsed; the caller must log in again."""

    def __init__(self) -> None:
        super().__init__("MFA window expired. Please login again.")


class UserNotFoundError(NotFoundError):
    def __init__(self) -> None:
        super().__init__("User not found")


# === Signature errors ===
class RecoveryFailedError(ValidationError):
    """Raised when no signer address can be recovered from a message and signature."""

    def __init__(self, message: str = "Failed to recover address from signature") -> None:
        super().__init__(message)


class SignatureVerificationError(ValidationError):
    """Raised by the signature endpoints when a submitted signature cannot be verified."""

    def __init__(self, message: str = "Failed to verify signature") -> None:
        super().__init__(message)


class SessionPersistError(Exception):
    """Raised when the session store fails to write.

    Not a UserError: the cause is infrastructure, and the response is a 500.
    """

    def __init__(self, message: str = "Failed to save session") -> None:
        super().__init__(message)
