"""RFC 6238 codes (30-second step, 6 digits, SHA-1) via pyotp, plus QR rendering."""

import base64
import io
from datetime import datetime

import pyotp
import qrcode
from qrcode.image.pil import PilImage

CODE_DIGITS = 6


def provisioning_uri(secret: str, address: str, issuer: str) -> str:
    """otpauth:// URI that authenticator apps import."""
    return pyotp.TOTP(secret).provisioning_uri(name=address, issuer_name=issuer)


def render_qr_data_url(uri: str) -> str:
    """Render a URI as a PNG QR code embedded in a data URL."""
    image = qrcode.make(uri, image_factory=PilImage)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


def generate_code(secret: str, at: datetime) -> str:
    return pyotp.TOTP(secret).at(at)


def verify_code(secret: str, code: str, at: datetime, window: int) -> bool:
    """Check a code against the step containing `at` and `window` steps on each side.

    Anything other than exactly six digits is rejected.
    """
    code = code.strip()
    if len(code) != CODE_DIGITS or not (code.isascii() and code.isdigit()):
        return False
    return pyotp.TOTP(secret).verify(code, for_time=at, valid_window=window)


def self_check(secret: str, at: datetime) -> bool:
    """Generate a code for `secret` and verify it against the same secret."""
    return verify_code(secret, generate_code(secret, at), at, window=0)
