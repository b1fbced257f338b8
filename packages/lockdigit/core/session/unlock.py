"""
App-unlock PIN entry against the session lock.
"""

import logging
from enum import Enum
from typing import Optional

from ..auth.models import PinCheckOutcome
from ..config import AuthConfig
from .context import SessionContext
from .lockout import AttemptLimiter

logger = logging.getLogger(__name__)


class UnlockOutcome(str, Enum):
    UNLOCKED = "unlocked"
    MISMATCH = "mismatch"
    LOCKED_OUT = "locked_out"
    NOT_CONFIGURED = "not_configured"
    BIOMETRIC_UNAVAILABLE = "biometric_unavailable"


class UnlockFlow:
    """Marks the session verified on a correct PIN or biometric assertion."""

    def __init__(self, pin_manager, session: SessionContext, limiter: AttemptLimiter,
                 biometrics=None, biometric_enabled: Optional[bool] = None):
        """
        Args:
            biometric_enabled: Overrides the stored user preference when not None
        """
        self.pin_manager = pin_manager
        self.session = session
        self.limiter = limiter
        self.biometrics = biometrics
        self.biometric_enabled = biometric_enabled

    async def unlock(self, pin: str) -> UnlockOutcome:
        if self.limiter.locked_out:
            return UnlockOutcome.LOCKED_OUT

        outcome = await self.pin_manager.check_pin(pin)
        if outcome == PinCheckOutcome.NOT_CONFIGURED:
            return UnlockOutcome.NOT_CONFIGURED

        if outcome == PinCheckOutcome.VERIFIED:
            self.limiter.record_success()
            self.session.set_pin_verified(True)
            return UnlockOutcome.UNLOCKED

        if self.limiter.record_failure():
            return UnlockOutcome.LOCKED_OUT
        return UnlockOutcome.MISMATCH

    async def biometrics_available(self) -> bool:
        if self.biometrics is None:
            return False
        enabled = self.biometric_enabled
        if enabled is None:
            enabled = await self.pin_manager.credentials.is_biometric_enabled()
        return bool(enabled) and await self.biometrics.is_available()

    async def unlock_with_biometrics(self, prompt: Optional[str] = None) -> UnlockOutcome:
        """
        Unlock with a biometric assertion in place of PIN entry.

        A stored PIN credential is required. A failed assertion is MISMATCH
        but is not counted toward the lockout.
        """
        if self.limiter.locked_out:
            return UnlockOutcome.LOCKED_OUT
        if not await self.pin_manager.has_pin():
            return UnlockOutcome.NOT_CONFIGURED
        if not await self.biometrics_available():
            return UnlockOutcome.BIOMETRIC_UNAVAILABLE

        if await self.biometrics.authenticate(prompt or f"Unlock {AuthConfig.APP_NAME}"):
            self.limiter.record_success()
            self.session.set_pin_verified(True)
            logger.info("Session unlocked by biometrics")
            return UnlockOutcome.UNLOCKED
        return UnlockOutcome.MISMATCH
