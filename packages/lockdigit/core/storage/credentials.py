"""
Typed accessors for the credential keys kept in the secure store.
"""

import logging
from typing import Optional, Tuple

from ..exceptions import StorageUnavailableError
from .secure_store import SecureStore

logger = logging.getLogger(__name__)


class StoreKeys:
    PIN_HASH = "lockdigit_pin_hash"
    PIN_SALT = "lockdigit_pin_salt"
    PIN_LENGTH = "lockdigit_pin_length"
    DEVICE_ID = "lockdigit_device_id"
    AUTH_TOKEN = "lockdigit_auth_token"
    USER_ID = "lockdigit_user_id"
    PHONE = "lockdigit_phone"
    HAS_COMPLETED_SETUP = "lockdigit_setup_complete"
    BIOMETRIC_ENABLED = "lockdigit_biometric_enabled"

    ALL = (
        PIN_HASH, PIN_SALT, PIN_LENGTH, DEVICE_ID,
        AUTH_TOKEN, USER_ID, PHONE, HAS_COMPLETED_SETUP, BIOMETRIC_ENABLED,
    )


class CredentialStore:
    """Credential-level view over a SecureStore."""

    def __init__(self, store: SecureStore):
        self.store = store

    async def _get(self, key: str) -> Optional[str]:
        try:
            return await self.store.get(key)
        except StorageUnavailableError:
            raise
        except Exception as e:
            logger.error(f"Secure store read of {key} failed: {e}")
            raise StorageUnavailableError(f"Could not read {key}") from e

    async def _set(self, key: str, value: str) -> None:
        try:
            await self.store.set(key, value)
        except StorageUnavailableError:
            raise
        except Exception as e:
            logger.error(f"Secure store write of {key} failed: {e}")
            raise StorageUnavailableError(f"Could not write {key}") from e

    async def _delete(self, key: str) -> None:
        try:
            await self.store.delete(key)
        except StorageUnavailableError:
            raise
        except Exception as e:
            logger.error(f"Secure store delete of {key} failed: {e}")
            raise StorageUnavailableError(f"Could not delete {key}") from e

    # PIN
    async def store_pin(self, pin_hash: str, pin_salt: str, pin_length: int) -> None:
        """Persist hash, salt and length together; the pair is never split."""
        if not pin_hash or not pin_salt:
            raise ValueError("PIN hash and salt are both required")
        await self._set(StoreKeys.PIN_HASH, pin_hash)
        await self._set(StoreKeys.PIN_SALT, pin_salt)
        await self._set(StoreKeys.PIN_LENGTH, str(pin_length))

    async def get_pin_hash(self) -> Tuple[Optional[str], Optional[str]]:
        pin_hash = await self._get(StoreKeys.PIN_HASH)
        pin_salt = await self._get(StoreKeys.PIN_SALT)
        return pin_hash, pin_salt

    async def get_pin_length(self) -> Optional[int]:
        value = await self._get(StoreKeys.PIN_LENGTH)
        return int(value) if value else None

    async def delete_pin(self) -> None:
        await self._delete(StoreKeys.PIN_HASH)
        await self._delete(StoreKeys.PIN_SALT)
        await self._delete(StoreKeys.PIN_LENGTH)

    # Device
    async def store_device_id(self, device_id: str) -> None:
        await self._set(StoreKeys.DEVICE_ID, device_id)

    async def get_device_id(self) -> Optional[str]:
        return await self._get(StoreKeys.DEVICE_ID)

    # Identity
    async def store_auth_token(self, token: str) -> None:
        await self._set(StoreKeys.AUTH_TOKEN, token)

    async def get_auth_token(self) -> Optional[str]:
        return await self._get(StoreKeys.AUTH_TOKEN)

    async def store_user_id(self, user_id: str) -> None:
        await self._set(StoreKeys.USER_ID, user_id)

    async def get_user_id(self) -> Optional[str]:
        return await self._get(StoreKeys.USER_ID)

    async def store_phone(self, phone: str) -> None:
        await self._set(StoreKeys.PHONE, phone)

    async def get_phone(self) -> Optional[str]:
        return await self._get(StoreKeys.PHONE)

    # Setup state
    async def set_setup_complete(self) -> None:
        await self._set(StoreKeys.HAS_COMPLETED_SETUP, "true")

    async def has_completed_setup(self) -> bool:
        return await self._get(StoreKeys.HAS_COMPLETED_SETUP) == "true"

    # Preferences
    async def set_biometric_enabled(self, enabled: bool) -> None:
        await self._set(StoreKeys.BIOMETRIC_ENABLED, "true" if enabled else "false")

    async def is_biometric_enabled(self) -> bool:
        return await self._get(StoreKeys.BIOMETRIC_ENABLED) == "true"

    async def clear_all(self) -> None:
        try:
            await self.store.delete_all()
        except StorageUnavailableError:
            raise
        except Exception as e:
            logger.error(f"Secure store wipe failed: {e}")
            raise StorageUnavailableError("Could not clear secure store") from e
        logger.info("Local credentials cleared")
