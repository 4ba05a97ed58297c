from pydantic import BaseModel


class SignatureCheck(BaseModel):
    """Result of recovering the signer of a message."""

    message: str
    signature: str
    signer: str  # Recovered address, lower-cased with 0x prefix
    valid: bool
