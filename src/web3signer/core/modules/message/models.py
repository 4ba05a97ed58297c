from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from web3signer.core.db import MongoModel
from web3signer.utils import now


class MessageOrderField(StrEnum):
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"

    @property
    def attribute(self) -> str:
        """Stored field name to sort on."""
        return "created_at" if self is MessageOrderField.CREATED_AT else "updated_at"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


class MessageRecord(MongoModel):
    """A recorded signature verification. Indexed on user_id."""

    id: int = Field(alias="_id", serialization_alias="id")
    user_id: int
    message: str
    signature: str
    signer: str
    valid: bool
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)


class MessageView(BaseModel):
    """Recorded message (API representation)."""

    id: int
    message: str
    signature: str
    signer: str
    valid: bool
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_domain(cls, record: MessageRecord) -> "MessageView":
        return cls(
            id=record.id,
            message=record.message,
            signature=record.signature,
            signer=record.signer,
            valid=record.valid,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
