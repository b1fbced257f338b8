"""
PIN authentication: hashing, policy, lifecycle and remote identity.
"""

from .hashing import generate_salt, hash_pin, pin_matches
from .policy import validate_pin, ensure_valid_pin
from .models import (
    PinState,
    PinCheckOutcome,
    PinValidationResult,
    CredentialRecord,
    IdentityCreate,
    IdentityRecord,
    PinCreationResult
)
from .pin_manager import PinManager
from .remote import RemoteIdentityStore, SupabaseIdentityStore, InMemoryIdentityStore
from .otp import OtpProvider, HttpOtpProvider
from .reauth import ReauthenticationService

__all__ = [
    "generate_salt",
    "hash_pin",
    "pin_matches",
    "validate_pin",
    "ensure_valid_pin",
    "PinState",
    "PinCheckOutcome",
    "PinValidationResult",
    "CredentialRecord",
    "IdentityCreate",
    "IdentityRecord",
    "PinCreationResult",
    "PinManager",
    "RemoteIdentityStore",
    "SupabaseIdentityStore",
    "InMemoryIdentityStore",
    "OtpProvider",
    "HttpOtpProvider",
    "ReauthenticationService"
]
