from datetime import datetime

from pydantic import BaseModel, Field

from web3signer.core.db import MongoModel
from web3signer.utils import now


class User(MongoModel):
    """Wallet identity. Indexed on address - unique."""

    id: int = Field(alias="_id", serialization_alias="id")
    address: str  # Lower-cased wallet address
    role: str = "user"
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)


class UserView(BaseModel):
    """User account information (API representation)."""

    id: int = Field(..., description="User ID")
    address: str = Field(..., description="Wallet address, lower-cased")
    role: str = Field(..., description="User role")
    mfa: bool | None = Field(None, description="Whether MFA is enabled (profile responses only)")

    @classmethod
    def from_domain(cls, user: User, mfa: bool | None = None) -> "UserView":
        """Create view model from domain model."""
        return cls(id=user.id, address=user.address, role=user.role, mfa=mfa)
