"""Ethereum personal_sign (EIP-191) signature recovery.

Recovery uses secp256k1 via coincurve and Keccak-256 via pycryptodome:
1. Hash "\\x19Ethereum Signed Message:\\n" + len(message) + message with Keccak-256
2. Recover the public key from the 65-byte r || s || v signature
3. Address = last 20 bytes of Keccak-256 of the uncompressed public key (without the 0x04 prefix)
"""

import re

import structlog
from coincurve import PublicKey
from Crypto.Hash import keccak

from web3signer.core.modules.signature.models import SignatureCheck
from web3signer.errors import RecoveryFailedError
from web3signer.utils import is_address, normalize_address

logger = structlog.get_logger(__name__)

PERSONAL_MESSAGE_PREFIX = b"\x19Ethereum Signed Message:\n"
SIGNATURE_LENGTH = 65
HEX_RE = re.compile(r"[0-9a-fA-F]*")


def keccak256(data: bytes) -> bytes:
    return keccak.new(digest_bits=256, data=data).digest()


def hash_personal_message(message: str) -> bytes:
    """Hash a message the way wallets do for personal_sign."""
    payload = message.encode("utf-8")
    return keccak256(PERSONAL_MESSAGE_PREFIX + str(len(payload)).encode("ascii") + payload)


def public_key_to_address(public_key: PublicKey) -> str:
    """Derive the lower-case 0x-prefixed address of a public key."""
    return "0x" + keccak256(public_key.format(compressed=False)[1:])[-20:].hex()


def parse_signature(signature: str) -> bytes:
    """Parse a hex signature into the r || s || recovery_id form coincurve expects.

    Accepts an optional 0x prefix and v as either 0/1 or 27/28.

    Raises:
        RecoveryFailedError: If the signature is not 65 bytes of hex or v is out of range
    """
    value = signature.strip()
    if value[:2].lower() == "0x":
        value = value[2:]
    # bytes.fromhex would skip embedded whitespace
    if not HEX_RE.fullmatch(value) or len(value) % 2:
        raise RecoveryFailedError("Signature is not valid hex")
    raw = bytes.fromhex(value)

    if len(raw) != SIGNATURE_LENGTH:
        raise RecoveryFailedError(f"Signature must be {SIGNATURE_LENGTH} bytes")

    recovery_id = raw[64]
    if recovery_id >= 27:
        recovery_id -= 27
    if recovery_id not in (0, 1):
        raise RecoveryFailedError("Invalid signature recovery id")

    return raw[:64] + bytes([recovery_id])


class SignatureVerifier:
    """Checks wallet signatures over plain-text messages."""

    def recover(self, message: str, signature: str) -> str:
        """Recover the signer address of a personal_sign signature.

        Raises:
            RecoveryFailedError: If the signature is malformed or no key can be recovered
        """
        recoverable = parse_signature(signature)
        try:
            public_key = PublicKey.from_signature_and_message(recoverable, hash_personal_message(message), hasher=None)
        except Exception as e:  # coincurve raises a bare Exception when recovery fails
            raise RecoveryFailedError from e
        return public_key_to_address(public_key)

    def verify(self, message: str, signature: str, expected_address: str) -> bool:
        """Whether the signature recovers to expected_address (case-insensitive).

        Malformed signatures and addresses return False, exactly like a wrong signer.
        """
        expected = normalize_address(expected_address)
        if not is_address(expected):
            return False
        try:
            recovered = self.recover(message, signature)
        except RecoveryFailedError:
            logger.debug("signature_recovery_failed")
            return False
        return recovered == expected

    def check(self, message: str, signature: str) -> SignatureCheck:
        """Recover the signer of a message.

        Raises:
            RecoveryFailedError: If no signer can be recovered
        """
        signer = self.recover(message, signature)
        return SignatureCheck(
            message=message,
            signature=signature,
            signer=signer,
            valid=True,  # A recovered signer always verifies its own signature
        )
