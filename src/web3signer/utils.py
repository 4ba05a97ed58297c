import re
from datetime import UTC, datetime

ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_address(value: str) -> bool:
    return bool(ADDRESS_RE.fullmatch(value))


def normalize_address(address: str) -> str:
    """Lower-case an address and make sure it carries the 0x prefix."""
    address = address.strip()
    if not address.lower().startswith("0x"):
        address = "0x" + address
    return address.lower()


def now() -> datetime:
    return datetime.now(UTC)
