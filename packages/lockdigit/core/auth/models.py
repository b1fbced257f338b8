"""
Pydantic models for credentials, remote identities and verification outcomes.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

HEX_DIGEST_PATTERN = r"^[0-9a-f]{64}$"


class PinState(str, Enum):
    """PIN lifecycle states."""
    NO_PIN = "no_pin"
    CREATING = "creating"
    CREATED = "created"


class PinCheckOutcome(str, Enum):
    """Typed result of a PIN verification; never raised."""
    VERIFIED = "verified"
    MISMATCH = "mismatch"
    NOT_CONFIGURED = "not_configured"


class PinValidationResult(BaseModel):
    """Outcome of the weak-PIN policy."""
    valid: bool
    reason: Optional[str] = None


class CredentialRecord(BaseModel):
    """Locally persisted PIN credential."""
    pin_hash: str = Field(..., pattern=HEX_DIGEST_PATTERN)
    pin_salt: str = Field(..., min_length=1)
    pin_length: int

    @field_validator("pin_length")
    @classmethod
    def validate_pin_length(cls, v):
        if v not in (4, 6):
            raise ValueError("PIN length must be 4 or 6")
        return v


class IdentityCreate(BaseModel):
    """Payload for creating a remote identity during first-time setup."""
    phone: str = Field(..., min_length=1)
    name: str = "User"
    email: Optional[str] = None
    pin_hash: str = Field(..., pattern=HEX_DIGEST_PATTERN)
    pin_salt: str = Field(..., min_length=1)
    pin_length: int = 4
    device_id: str = Field(..., min_length=1)


class IdentityRecord(BaseModel):
    """Remote identity as read back from the identity store."""
    id: str
    phone: str
    name: Optional[str] = None
    email: Optional[str] = None
    pin_hash: Optional[str] = None
    pin_salt: Optional[str] = None
    pin_length: int = 4
    device_id: Optional[str] = None
    created_at: Optional[datetime] = None


class PinCreationResult(BaseModel):
    """What create_pin reports back; hash and salt stay inside the manager."""
    pin_length: int
    identity_id: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
