"""
Per-account payment PINs, held by the remote store rather than on the device.
"""

import logging

from ..auth.hashing import generate_salt, hash_pin
from ..auth.policy import ensure_valid_pin

logger = logging.getLogger(__name__)


class AccountPinService:
    """Sets and checks the secondary PIN guarding a single bank account."""

    def __init__(self, remote):
        self.remote = remote

    async def set_account_pin(self, account_id: str, pin: str) -> None:
        """
        Validate, salt and hash a payment PIN and store it on the account.

        Raises:
            WeakPinError: If the PIN fails policy
        """
        ensure_valid_pin(pin)
        salt = generate_salt()
        await self.remote.set_account_pin(account_id, hash_pin(pin, salt), salt)
        logger.info(f"Payment PIN configured for account {account_id}")

    async def verify_account_pin(self, account_id: str, pin: str) -> bool:
        result = await self.remote.verify_account_pin(account_id, pin)
        if not result:
            logger.warning(f"Payment PIN mismatch for account {account_id}")
        return result
