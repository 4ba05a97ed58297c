"""Auto-incrementing counters for sequential numeric ids."""

from enum import StrEnum

from web3signer.core.db import MongoModel


class CounterType(StrEnum):
    """Types of entities that use sequential numbering."""

    USER = "user"
    MESSAGE = "message"


class Counter(MongoModel):
    """Atomic counter for sequential ids.

    Uses MongoDB atomic operations to prevent duplicates.
    Indexed on counter_type - unique.
    """

    counter_type: CounterType
    seq: int = 0  # Current value; next id will be seq + 1
