"""
Composition root wiring the authentication core together.
Hosts build one AuthContainer at startup and pass it to their UI layer.
"""

import logging
from typing import Optional

from .auth.otp import OtpProvider
from .auth.pin_manager import PinManager
from .auth.reauth import ReauthenticationService
from .auth.remote import RemoteIdentityStore
from .device.fingerprint import DeviceFingerprintManager
from .device.providers import PlatformIdProvider
from .payments.account_pin import AccountPinService
from .payments.biometrics import BiometricAuthenticator, default_biometrics
from .payments.step_up import StepUpVerifier
from .session.bootstrap import bootstrap_session
from .session.context import SessionContext
from .session.lockout import AttemptLimiter
from .session.monitor import AutoLockMonitor
from .session.unlock import UnlockFlow
from .storage.credentials import CredentialStore
from .storage.secure_store import SecureStore, EncryptedFileStore

logger = logging.getLogger(__name__)


class AuthContainer:
    """Owns the session context and the single attempt limiter."""

    def __init__(self, store: Optional[SecureStore] = None,
                 remote: Optional[RemoteIdentityStore] = None,
                 otp: Optional[OtpProvider] = None,
                 id_provider: Optional[PlatformIdProvider] = None,
                 biometrics: Optional[BiometricAuthenticator] = None,
                 biometric_enabled: Optional[bool] = None,
                 session_timeout: Optional[float] = None,
                 max_attempts: Optional[int] = None):
        self.credentials = CredentialStore(store if store is not None else EncryptedFileStore.from_config())
        self.remote = remote
        self.session = SessionContext()
        self.limiter = AttemptLimiter(max_attempts)

        self.device = DeviceFingerprintManager(self.credentials, id_provider)
        self.pin_manager = PinManager(self.credentials, remote=remote, device=self.device)
        self.monitor = AutoLockMonitor(self.session, session_timeout)

        biometrics = biometrics or default_biometrics()
        self.unlock_flow = UnlockFlow(
            self.pin_manager, self.session, self.limiter,
            biometrics=biometrics, biometric_enabled=biometric_enabled
        )
        self.account_pins = AccountPinService(remote) if remote is not None else None
        self.step_up = StepUpVerifier(
            self.pin_manager, self.limiter,
            biometrics=biometrics,
            account_pins=self.account_pins,
            biometric_enabled=biometric_enabled
        )
        self.reauth = (
            ReauthenticationService(otp, self.pin_manager, self.limiter, self.session)
            if otp is not None else None
        )
        logger.info("AuthContainer initialized")

    async def start(self) -> bool:
        """Restore session state from the secure store; True if PIN entry is needed."""
        found = await bootstrap_session(self.credentials, self.session)
        if found:
            await self.pin_manager.has_pin()
        return found

    async def set_biometric_enabled(self, enabled: bool) -> None:
        """Persist the user's biometric unlock preference."""
        await self.credentials.set_biometric_enabled(enabled)
        logger.info(f"Biometric unlock {'enabled' if enabled else 'disabled'}")

    async def logout(self) -> None:
        await self.pin_manager.clear()
        self.session.logout()
        self.limiter.reset()
