"""
Secure key-value persistence for credential material.
EncryptedFileStore keeps values encrypted at rest with Fernet and readable
only by the owning OS user.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from typing import Dict, Optional

from cryptography.fernet import Fernet, InvalidToken

from ..config import AuthConfig
from ..exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


class SecureStore(ABC):
    """Opaque string storage keyed by name."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def delete_all(self) -> None:
        ...


class MemorySecureStore(SecureStore):
    """Volatile store for tests and previews. Nothing survives the process."""

    def __init__(self):
        self._items: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set(self, key: str, value: str) -> None:
        self._items[key] = value

    async def delete(self, key: str) -> None:
        self._items.pop(key, None)

    async def delete_all(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


class FernetKeyLoader:
    """Resolves the Fernet key protecting the store file."""

    @staticmethod
    def load_or_create(key: Optional[str], key_path: Optional[str]) -> bytes:
        """
        Return an explicit key, or read one from key_path, creating it on first use.

        Args:
            key: urlsafe base64 Fernet key, usually from LOCKDIGIT_STORE_KEY
            key_path: file holding the key when no explicit key is set

        Returns:
            Fernet key bytes

        Raises:
            StorageUnavailableError: If no key source is usable
        """
        if key:
            return key.encode("ascii")

        if not key_path:
            raise StorageUnavailableError("No secure store key configured")

        try:
            if os.path.exists(key_path):
                with open(key_path, "rb") as fh:
                    return fh.read().strip()

            os.makedirs(os.path.dirname(key_path) or ".", mode=0o700, exist_ok=True)
            new_key = Fernet.generate_key()
            fd = os.open(key_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
            with os.fdopen(fd, "wb") as fh:
                fh.write(new_key)
            logger.info(f"Generated secure store key at {key_path}")
            return new_key
        except OSError as e:
            logger.error(f"Secure store key unavailable: {e}")
            raise StorageUnavailableError("Secure store key unavailable") from e


class EncryptedFileStore(SecureStore):
    """
    Single-file store: one Fernet token wrapping a JSON object of all entries.
    Every write re-encrypts the whole map and atomically replaces the file.
    """

    def __init__(self, path: str, key: bytes):
        self.path = path
        try:
            self._fernet = Fernet(key)
        except (ValueError, TypeError) as e:
            raise StorageUnavailableError("Invalid secure store key") from e

    @classmethod
    def from_config(cls) -> "EncryptedFileStore":
        key_path = AuthConfig.SECURE_STORE_KEY_PATH or f"{AuthConfig.SECURE_STORE_PATH}.key"
        key = FernetKeyLoader.load_or_create(AuthConfig.SECURE_STORE_KEY, key_path)
        return cls(AuthConfig.SECURE_STORE_PATH, key)

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "rb") as fh:
                token = fh.read()
            if not token:
                return {}
            return json.loads(self._fernet.decrypt(token).decode("utf-8"))
        except InvalidToken as e:
            logger.error(f"Secure store at {self.path} failed integrity check")
            raise StorageUnavailableError("Secure store could not be decrypted") from e
        except (OSError, ValueError) as e:
            logger.error(f"Secure store read failed: {e}")
            raise StorageUnavailableError("Secure store read failed") from e

    def _save(self, items: Dict[str, str]) -> None:
        directory = os.path.dirname(self.path) or "."
        try:
            os.makedirs(directory, mode=0o700, exist_ok=True)
            token = self._fernet.encrypt(
                json.dumps(items, separators=(',', ':')).encode("utf-8")
            )
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".store-")
            try:
                os.chmod(tmp_path, 0o600)
                with os.fdopen(fd, "wb") as fh:
                    fh.write(token)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            logger.error(f"Secure store write failed: {e}")
            raise StorageUnavailableError("Secure store write failed") from e

    async def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    async def set(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._save(items)

    async def delete(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._save(items)

    async def delete_all(self) -> None:
        if not os.path.exists(self.path):
            return
        try:
            os.unlink(self.path)
            logger.info("Secure store wiped")
        except OSError as e:
            logger.error(f"Secure store wipe failed: {e}")
            raise StorageUnavailableError("Secure store wipe failed") from e
