"""
Weak-PIN rejection applied when a PIN is created.
"""

import re

from ..config import AuthConfig
from ..exceptions import WeakPinError
from .models import PinValidationResult

ASCENDING = "0123456789"
DESCENDING = "9876543210"

_REPEATED = re.compile(r"^(\d)\1+$")


def validate_pin(pin: str) -> PinValidationResult:
    """Check a candidate PIN; the first failing rule decides the reason."""
    if not pin or not all(c in ASCENDING for c in pin):
        return PinValidationResult(valid=False, reason="PIN must contain only digits")

    if len(pin) not in AuthConfig.PIN_LENGTHS:
        return PinValidationResult(valid=False, reason="PIN must be 4 or 6 digits")

    if pin in ASCENDING or pin in DESCENDING:
        return PinValidationResult(valid=False, reason="PIN cannot be a sequential pattern")

    if _REPEATED.match(pin):
        return PinValidationResult(valid=False, reason="PIN cannot be all the same digit")

    return PinValidationResult(valid=True)


def ensure_valid_pin(pin: str) -> None:
    """Raise WeakPinError when validate_pin rejects the PIN."""
    result = validate_pin(pin)
    if not result.valid:
        raise WeakPinError(result.reason)
