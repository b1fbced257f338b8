"""
Salted SHA-256 hashing for numeric PINs.
The same function serves the app-unlock PIN and per-account payment PINs,
so a hash computed on the device can be compared with one held remotely.
"""

import hashlib
import hmac
import logging
import secrets
from typing import Optional

logger = logging.getLogger(__name__)

SALT_BYTES = 16


def generate_salt() -> str:
    """
    Generate a random salt for PIN hashing.

    Returns:
        32-character lowercase hex string
    """
    return secrets.token_hex(SALT_BYTES)


def hash_pin(pin: str, salt: str) -> str:
    """
    Hash a PIN with a salt using SHA-256 over "salt:pin".

    Args:
        pin: Digit string
        salt: Hex salt from generate_salt()

    Returns:
        64-character lowercase hex digest

    Raises:
        ValueError: If pin or salt is empty
    """
    if not salt:
        raise ValueError("Salt cannot be empty")
    if not pin:
        raise ValueError("PIN cannot be empty")

    data = f"{salt}:{pin}".encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def pin_matches(pin: str, salt: Optional[str], expected_hash: Optional[str]) -> bool:
    """
    Check a PIN against a stored hash/salt pair.

    Returns False without hashing when either half of the pair is missing.
    """
    if not salt or not expected_hash or not pin:
        return False

    result = hmac.compare_digest(hash_pin(pin, salt), expected_hash)
    logger.debug(f"PIN comparison result: {result}")
    return result
