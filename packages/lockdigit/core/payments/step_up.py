"""
Per-operation step-up verification for funds-moving and balance-revealing
actions. Every call re-verifies; an unlocked session is not enough.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

from ..auth.models import PinCheckOutcome
from ..auth.pin_manager import PinManager
from ..session.lockout import AttemptLimiter
from .account_pin import AccountPinService
from .biometrics import BiometricAuthenticator, UnavailableBiometrics

logger = logging.getLogger(__name__)

LockoutCallback = Callable[["StepUpResult"], Union[None, Awaitable[None]]]


class SensitiveAction(str, Enum):
    """Actions that always require step-up verification."""
    TRANSFER = "transfer"
    BALANCE_REVEAL = "balance_reveal"
    BILL_PAYMENT = "bill_payment"
    SCAN_TO_PAY = "scan_to_pay"
    CARD_REVEAL = "card_reveal"


class StepUpOutcome(str, Enum):
    APPROVED = "approved"
    DENIED = "denied"
    LOCKED_OUT = "locked_out"
    NOT_CONFIGURED = "not_configured"
    BIOMETRIC_UNAVAILABLE = "biometric_unavailable"


class StepUpMethod(str, Enum):
    PIN = "pin"
    BIOMETRIC = "biometric"
    ACCOUNT_PIN = "account_pin"


@dataclass
class StepUpResult:
    """Outcome of one step-up attempt."""
    action: SensitiveAction
    outcome: StepUpOutcome
    method: StepUpMethod
    remaining_attempts: int

    @property
    def approved(self) -> bool:
        return self.outcome == StepUpOutcome.APPROVED


class StepUpVerifier:
    """
    Single gate for every sensitive action.

    Failed PIN and account-PIN checks share one AttemptLimiter. The failure
    that reaches the limit returns LOCKED_OUT and fires on_lockout once;
    after that every attempt is refused until the limiter is reset by
    re-authentication.
    """

    def __init__(self, pin_manager: PinManager, limiter: AttemptLimiter,
                 biometrics: Optional[BiometricAuthenticator] = None,
                 account_pins: Optional[AccountPinService] = None,
                 biometric_enabled: Optional[bool] = None,
                 on_lockout: Optional[LockoutCallback] = None):
        self.pin_manager = pin_manager
        self.limiter = limiter
        self.biometrics = biometrics or UnavailableBiometrics()
        self.account_pins = account_pins
        self.biometric_enabled = biometric_enabled
        self.on_lockout = on_lockout

    def _result(self, action, outcome, method) -> StepUpResult:
        return StepUpResult(
            action=SensitiveAction(action),
            outcome=outcome,
            method=method,
            remaining_attempts=self.limiter.remaining
        )

    async def _failure(self, action, method) -> StepUpResult:
        if self.limiter.record_failure():
            result = self._result(action, StepUpOutcome.LOCKED_OUT, method)
            logger.warning(f"Step-up lockout on {result.action.value}")
            if self.on_lockout is not None:
                callback_result = self.on_lockout(result)
                if asyncio.iscoroutine(callback_result):
                    await callback_result
            return result
        return self._result(action, StepUpOutcome.DENIED, method)

    async def authorize_with_pin(self, action: SensitiveAction, pin: str) -> StepUpResult:
        """Verify the app PIN immediately before action."""
        if self.limiter.locked_out:
            return self._result(action, StepUpOutcome.LOCKED_OUT, StepUpMethod.PIN)

        outcome = await self.pin_manager.check_pin(pin)
        if outcome == PinCheckOutcome.NOT_CONFIGURED:
            return self._result(action, StepUpOutcome.NOT_CONFIGURED, StepUpMethod.PIN)

        if outcome == PinCheckOutcome.VERIFIED:
            self.limiter.record_success()
            logger.info(f"Step-up approved by PIN for {SensitiveAction(action).value}")
            return self._result(action, StepUpOutcome.APPROVED, StepUpMethod.PIN)

        return await self._failure(action, StepUpMethod.PIN)

    async def biometrics_available(self) -> bool:
        """Biometrics are offered when enabled (explicitly or by the stored preference) and supported."""
        enabled = self.biometric_enabled
        if enabled is None:
            enabled = await self.pin_manager.credentials.is_biometric_enabled()
        return bool(enabled) and await self.biometrics.is_available()

    async def authorize_with_biometrics(self, action: SensitiveAction,
                                        prompt: Optional[str] = None) -> StepUpResult:
        """
        Accept a biometric assertion in place of the PIN.

        The assertion substitutes for PIN entry only; without a stored PIN
        credential the result is NOT_CONFIGURED.

        A failed or cancelled assertion is DENIED without counting toward the
        PIN lockout; the user falls back to PIN entry.
        """
        if self.limiter.locked_out:
            return self._result(action, StepUpOutcome.LOCKED_OUT, StepUpMethod.BIOMETRIC)

        if not await self.pin_manager.has_pin():
            return self._result(action, StepUpOutcome.NOT_CONFIGURED, StepUpMethod.BIOMETRIC)

        if not await self.biometrics_available():
            return self._result(action, StepUpOutcome.BIOMETRIC_UNAVAILABLE, StepUpMethod.BIOMETRIC)

        prompt = prompt or f"Confirm {SensitiveAction(action).value.replace('_', ' ')}"
        if await self.biometrics.authenticate(prompt):
            self.limiter.record_success()
            logger.info(f"Step-up approved by biometrics for {SensitiveAction(action).value}")
            return self._result(action, StepUpOutcome.APPROVED, StepUpMethod.BIOMETRIC)

        return self._result(action, StepUpOutcome.DENIED, StepUpMethod.BIOMETRIC)

    async def authorize_account(self, action: SensitiveAction, account_id: str, pin: str) -> StepUpResult:
        """Verify the secondary PIN of a specific bank account."""
        if self.account_pins is None:
            return self._result(action, StepUpOutcome.NOT_CONFIGURED, StepUpMethod.ACCOUNT_PIN)

        if self.limiter.locked_out:
            return self._result(action, StepUpOutcome.LOCKED_OUT, StepUpMethod.ACCOUNT_PIN)

        if await self.account_pins.verify_account_pin(account_id, pin):
            self.limiter.record_success()
            return self._result(action, StepUpOutcome.APPROVED, StepUpMethod.ACCOUNT_PIN)

        return await self._failure(action, StepUpMethod.ACCOUNT_PIN)
