"""
Remote re-authentication after local PIN lockout.
"""

import logging
from typing import Optional

from ..exceptions import OtpError
from .otp import OtpProvider
from .pin_manager import PinManager
from .policy import ensure_valid_pin

logger = logging.getLogger(__name__)


class ReauthenticationService:
    """
    Drives the OTP escalation that a lockout demands.

    The attempt counter is cleared only when a code is confirmed or when the
    lockout ends in logout.
    """

    def __init__(self, otp: OtpProvider, pin_manager: PinManager, limiter, session):
        self.otp = otp
        self.pin_manager = pin_manager
        self.limiter = limiter
        self.session = session
        self._handle: Optional[str] = None
        self._phone: Optional[str] = None

    async def start(self, phone: str) -> None:
        """Send a verification code to phone."""
        self._handle = await self.otp.send(phone)
        self._phone = phone

    async def complete(self, code: str, new_pin: Optional[str] = None) -> bool:
        """
        Confirm the code and, when new_pin is given, reset the PIN.

        Returns:
            False if the code was rejected; the attempt counter is left as is

        Raises:
            OtpError: If start() was not called first
            WeakPinError: If new_pin fails policy; the code is not consumed
        """
        if not self._handle or not self._phone:
            raise OtpError("No verification in progress. Call start first.")

        if new_pin is not None:
            ensure_valid_pin(new_pin)

        token = await self.otp.confirm(self._handle, code)
        if not token:
            return False

        phone = self._phone
        self._handle = None
        self._phone = None

        self.limiter.reset()
        await self.pin_manager.credentials.store_auth_token(token)
        logger.info("OTP re-authentication succeeded")

        if new_pin is not None:
            result = await self.pin_manager.reset_pin(phone, new_pin)
            self.session.set_authenticated(result.identity_id, phone)
            self.session.set_pin_created()
            self.session.set_pin_verified(True)

        return True

    async def logout_after_lockout(self) -> None:
        """Wipe local credentials and end the session."""
        await self.pin_manager.clear()
        self.session.logout()
        self.limiter.reset()
        self._handle = None
        self._phone = None
        logger.info("Logged out after PIN lockout")
