"""
Error taxonomy for the authentication core.

A wrong PIN is never an exception: verification returns a boolean or a
PinCheckOutcome. The classes below cover policy failures that abort an
operation and infrastructure failures the caller must offer a retry for.
"""

from typing import Optional


class LockDigitError(Exception):
    """Base class for all authentication core errors."""


class WeakPinError(LockDigitError):
    """PIN rejected by the policy validator at creation time."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class PinMismatchError(LockDigitError):
    """Current PIN did not verify where a verified PIN is mandatory."""


class NotConfiguredError(LockDigitError):
    """No credential exists to verify against."""


class DuplicateIdentityError(LockDigitError):
    """Remote store already holds an identity for this phone number."""

    def __init__(self, phone: Optional[str] = None):
        super().__init__("Phone number already registered")
        self.phone = phone


class DeviceMismatchError(LockDigitError):
    """Stored device fingerprint differs from the one bound to the identity."""


class StorageUnavailableError(LockDigitError):
    """Secure local store could not be read or written."""


class RemoteStoreError(LockDigitError):
    """Remote identity store call failed."""


class OtpError(LockDigitError):
    """One-time-code provider failed or was used out of order."""
