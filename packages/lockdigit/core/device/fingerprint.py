"""
Device fingerprint creation and binding checks.
The raw platform identifier is digested before it is persisted and is never
stored or sent anywhere.
"""

import hashlib
import logging
import secrets
from typing import Optional

from ..config import AuthConfig
from ..exceptions import DeviceMismatchError
from ..storage.credentials import CredentialStore
from .providers import PlatformIdProvider, default_id_provider

logger = logging.getLogger(__name__)

FINGERPRINT_PREFIX = "lockdigit-device:"


def hash_device_id(raw_id: str) -> str:
    """SHA-256 of the prefixed raw identifier, lowercase hex."""
    return hashlib.sha256(f"{FINGERPRINT_PREFIX}{raw_id}".encode("utf-8")).hexdigest()


class DeviceFingerprintManager:
    """Creates the per-installation fingerprint once and checks bindings against it."""

    def __init__(self, credentials: CredentialStore, provider: Optional[PlatformIdProvider] = None,
                 strict: Optional[bool] = None):
        self.credentials = credentials
        self.provider = provider or default_id_provider()
        self.strict = AuthConfig.STRICT_DEVICE_BINDING if strict is None else strict

    async def get_or_create_fingerprint(self) -> str:
        """
        Return the stored fingerprint, creating and persisting it on first call.

        Returns:
            64-character hex fingerprint
        """
        stored_id = await self.credentials.get_device_id()
        if stored_id:
            return stored_id

        raw_id = await self.provider.get_native_id()
        if not raw_id:
            logger.info("No native device identifier available, generating one")
            raw_id = secrets.token_hex(16)

        device_id = hash_device_id(raw_id)
        await self.credentials.store_device_id(device_id)
        logger.info("Device fingerprint created")
        return device_id

    async def verify_binding(self, expected_id: str) -> bool:
        """Exact comparison between the stored fingerprint and expected_id."""
        current_id = await self.credentials.get_device_id()
        if not current_id or not expected_id:
            return False
        return current_id == expected_id

    async def check_remote_binding(self, remote, identity_id: str) -> bool:
        """
        Ask the remote store whether this installation is the bound device.

        A mismatch is logged as a security warning. With strict binding it
        raises DeviceMismatchError instead of returning False.
        """
        device_id = await self.get_or_create_fingerprint()
        bound = await remote.verify_device_binding(identity_id, device_id)
        if not bound:
            logger.warning(f"Device fingerprint mismatch for identity {identity_id}")
            if self.strict:
                raise DeviceMismatchError(f"Identity {identity_id} is bound to another device")
        return bound

    async def rebind_device(self, remote, identity_id: str) -> str:
        """Bind the remote identity to this installation's fingerprint."""
        device_id = await self.get_or_create_fingerprint()
        await remote.update_device_binding(identity_id, device_id)
        logger.info(f"Identity {identity_id} rebound to this device")
        return device_id
