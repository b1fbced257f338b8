"""
PIN lifecycle: creation, local verification, reconfiguration and
re-authentication against the remote identity copy.

Verification results are returned, never raised. Only policy failures at
creation time and infrastructure failures surface as exceptions.
"""

import logging
from typing import Optional

from ..exceptions import (
    DuplicateIdentityError,
    NotConfiguredError,
    PinMismatchError,
    StorageUnavailableError
)
from ..storage.credentials import CredentialStore
from .hashing import generate_salt, hash_pin, pin_matches
from .models import CredentialRecord, IdentityCreate, PinCheckOutcome, PinCreationResult, PinState
from .policy import ensure_valid_pin

logger = logging.getLogger(__name__)


class PinManager:
    """Owns the local PIN credential of one installation."""

    def __init__(self, credentials: CredentialStore, remote=None, device=None):
        """
        Args:
            credentials: Secure local credential storage
            remote: RemoteIdentityStore, required for identity creation and re-auth
            device: DeviceFingerprintManager, required for identity creation
        """
        self.credentials = credentials
        self.remote = remote
        self.device = device
        self.state = PinState.NO_PIN

    def _require_remote(self):
        if self.remote is None:
            raise NotConfiguredError("No remote identity store configured")
        return self.remote

    def _new_credential(self, pin: str) -> CredentialRecord:
        salt = generate_salt()
        return CredentialRecord(pin_hash=hash_pin(pin, salt), pin_salt=salt, pin_length=len(pin))

    async def _current_credential(self) -> Optional[CredentialRecord]:
        pin_hash, pin_salt = await self.credentials.get_pin_hash()
        pin_length = await self.credentials.get_pin_length()
        if not pin_hash or not pin_salt or not pin_length:
            return None
        return CredentialRecord(pin_hash=pin_hash, pin_salt=pin_salt, pin_length=pin_length)

    async def _restore_credential(self, previous: Optional[CredentialRecord]) -> None:
        """Put back the credential that was stored before a failed replacement."""
        try:
            if previous is None:
                await self.credentials.delete_pin()
            else:
                await self.credentials.store_pin(previous.pin_hash, previous.pin_salt, previous.pin_length)
            logger.info("Local PIN rolled back after remote failure")
        except StorageUnavailableError as e:
            logger.error(f"Local PIN rollback failed: {e}")

    async def _create_identity(self, remote, identity: IdentityCreate) -> str:
        """
        Create the remote identity, resuming one left by an interrupted setup.

        An existing identity for the phone is reused only when it is bound to
        this installation's fingerprint; its credential is replaced.
        """
        try:
            return await remote.create_identity(identity)
        except DuplicateIdentityError:
            existing = await remote.get_identity_by_phone(identity.phone)
            if existing is None or existing.device_id != identity.device_id:
                raise
            await remote.update_pin(existing.id, identity.pin_hash, identity.pin_salt, identity.pin_length)
            logger.info(f"Resumed setup of identity {existing.id} created by this device")
            return existing.id

    async def create_pin(self, pin: str, *, phone: Optional[str] = None,
                         name: Optional[str] = None, email: Optional[str] = None) -> PinCreationResult:
        """
        Create and store a new PIN, creating the remote identity on first-time setup.

        Args:
            pin: Candidate PIN
            phone: Verified phone number; when given a remote identity is created
            name: Display name for the new identity
            email: Optional email for the new identity

        Returns:
            PinCreationResult with the PIN length and new identity id

        Raises:
            WeakPinError: If the PIN fails policy; nothing is written
            DuplicateIdentityError: If the phone is already registered
        """
        previous_state = self.state
        ensure_valid_pin(pin)

        self.state = PinState.CREATING
        try:
            record = self._new_credential(pin)
            pin_hash, pin_salt, pin_length = record.pin_hash, record.pin_salt, record.pin_length

            remote = device_id = None
            if phone:
                remote = self._require_remote()
                if self.device is None:
                    raise NotConfiguredError("Device fingerprint manager required for identity creation")
                device_id = await self.device.get_or_create_fingerprint()

            # The local credential is written before any remote identity exists
            previous = await self._current_credential()
            await self.credentials.store_pin(pin_hash, pin_salt, pin_length)

            identity_id = None
            if phone:
                try:
                    identity_id = await self._create_identity(remote, IdentityCreate(
                        phone=phone,
                        name=name or "User",
                        email=email,
                        pin_hash=pin_hash,
                        pin_salt=pin_salt,
                        pin_length=pin_length,
                        device_id=device_id
                    ))
                except Exception:
                    await self._restore_credential(previous)
                    raise

                await self.credentials.store_user_id(identity_id)
                await self.credentials.store_phone(phone)
            await self.credentials.set_setup_complete()
        except Exception:
            self.state = previous_state
            raise

        self.state = PinState.CREATED
        logger.info(f"PIN created ({pin_length} digits)")
        return PinCreationResult(pin_length=pin_length, identity_id=identity_id)

    async def check_pin(self, pin: str) -> PinCheckOutcome:
        """Typed verification against the local credential."""
        stored_hash, salt = await self.credentials.get_pin_hash()
        if not stored_hash or not salt:
            return PinCheckOutcome.NOT_CONFIGURED

        if pin_matches(pin, salt, stored_hash):
            return PinCheckOutcome.VERIFIED

        logger.warning("Local PIN verification failed")
        return PinCheckOutcome.MISMATCH

    async def verify_pin(self, pin: str) -> bool:
        """Validate a PIN against the stored hash. False when no credential exists."""
        return await self.check_pin(pin) == PinCheckOutcome.VERIFIED

    async def has_pin(self) -> bool:
        stored_hash, salt = await self.credentials.get_pin_hash()
        present = bool(stored_hash and salt)
        if self.state != PinState.CREATING:
            self.state = PinState.CREATED if present else PinState.NO_PIN
        return present

    async def get_pin_length(self) -> Optional[int]:
        return await self.credentials.get_pin_length()

    async def change_pin_length(self, new_pin: str) -> PinCreationResult:
        """
        Replace the credential with a new PIN, possibly of a different length.

        The old hash/salt pair is overwritten in full. When the installation is
        tied to a remote identity the remote copy is replaced too.
        """
        previous_state = self.state
        ensure_valid_pin(new_pin)
        self.state = PinState.CREATING
        try:
            record = self._new_credential(new_pin)
            pin_hash, pin_salt, pin_length = record.pin_hash, record.pin_salt, record.pin_length

            user_id = await self.credentials.get_user_id()
            previous = await self._current_credential()
            await self.credentials.store_pin(pin_hash, pin_salt, pin_length)

            if user_id and self.remote is not None:
                try:
                    await self.remote.update_pin(user_id, pin_hash, pin_salt, pin_length)
                except Exception:
                    await self._restore_credential(previous)
                    raise
        except Exception:
            self.state = previous_state
            raise

        self.state = PinState.CREATED
        logger.info(f"PIN replaced ({pin_length} digits)")
        return PinCreationResult(pin_length=pin_length, identity_id=user_id)

    async def change_pin(self, current_pin: str, new_pin: str) -> PinCreationResult:
        """Replace the PIN after proving knowledge of the current one."""
        outcome = await self.check_pin(current_pin)
        if outcome == PinCheckOutcome.NOT_CONFIGURED:
            raise NotConfiguredError("No PIN configured")
        if outcome != PinCheckOutcome.VERIFIED:
            raise PinMismatchError("Current PIN incorrect")
        return await self.change_pin_length(new_pin)

    async def restore_from_remote(self, phone: str, pin: str) -> PinCheckOutcome:
        """
        Verify a PIN against the remote identity and restore it locally on success.

        Used after a reinstall, when no local credential exists yet.
        """
        remote = self._require_remote()
        identity = await remote.get_identity_by_phone(phone)
        if identity is None or not identity.pin_hash or not identity.pin_salt:
            logger.info("No remote credential found for re-authentication")
            return PinCheckOutcome.NOT_CONFIGURED

        if not pin_matches(pin, identity.pin_salt, identity.pin_hash):
            logger.warning(f"Remote PIN verification failed for identity {identity.id}")
            return PinCheckOutcome.MISMATCH

        await self.credentials.store_pin(identity.pin_hash, identity.pin_salt, identity.pin_length)
        await self.credentials.store_user_id(identity.id)
        await self.credentials.store_phone(phone)
        await self.credentials.set_setup_complete()
        self.state = PinState.CREATED
        logger.info(f"Credential restored from remote identity {identity.id}")
        return PinCheckOutcome.VERIFIED

    async def reset_pin(self, phone: str, new_pin: str) -> PinCreationResult:
        """
        Set a fresh PIN for an existing identity after OTP re-authentication.

        Raises:
            WeakPinError: If the PIN fails policy
            NotConfiguredError: If the phone has no remote identity
        """
        ensure_valid_pin(new_pin)
        remote = self._require_remote()
        identity = await remote.get_identity_by_phone(phone)
        if identity is None:
            raise NotConfiguredError("This number is not registered")

        record = self._new_credential(new_pin)
        pin_hash, pin_salt, pin_length = record.pin_hash, record.pin_salt, record.pin_length
        await remote.update_pin(identity.id, pin_hash, pin_salt, pin_length)

        await self.credentials.store_pin(pin_hash, pin_salt, pin_length)
        await self.credentials.store_user_id(identity.id)
        await self.credentials.store_phone(phone)
        await self.credentials.set_setup_complete()
        self.state = PinState.CREATED
        logger.info(f"PIN reset for identity {identity.id}")
        return PinCreationResult(pin_length=pin_length, identity_id=identity.id)

    async def clear(self) -> None:
        """Remove every local credential."""
        await self.credentials.clear_all()
        self.state = PinState.NO_PIN
