"""Deterministic per-address TOTP secrets.

Secrets are never stored: each one is derived from the wallet address and a
single server-wide salt. Anyone holding the salt and an address can rebuild
that address's secret, so the salt must stay out of version control.
"""

import hashlib

BASE32_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
SECRET_LENGTH = 32


def derive_secret(address: str, server_salt: str) -> str:
    """Derive the base32 TOTP secret for an address.

    The SHA-512 digest of "{lowercase address}:{salt}" is read as 32 pairs of
    bytes; each pair selects one alphabet character modulo 32.
    """
    if not server_salt:
        raise ValueError("MFA server salt must not be empty")
    digest = hashlib.sha512(f"{address.lower()}:{server_salt}".encode()).digest()
    return "".join(
        BASE32_ALPHABET[int.from_bytes(digest[i * 2 : i * 2 + 2], "big") % len(BASE32_ALPHABET)]
        for i in range(SECRET_LENGTH)
    )
