"""
Secure local storage for credential material.
"""

from .secure_store import SecureStore, MemorySecureStore, EncryptedFileStore, FernetKeyLoader
from .credentials import CredentialStore, StoreKeys

__all__ = [
    "SecureStore",
    "MemorySecureStore",
    "EncryptedFileStore",
    "FernetKeyLoader",
    "CredentialStore",
    "StoreKeys"
]
