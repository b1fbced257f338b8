"""
Device fingerprinting and binding verification.
"""

from .fingerprint import DeviceFingerprintManager, hash_device_id
from .providers import (
    PlatformIdProvider,
    NullIdProvider,
    MachineIdProvider,
    MacPlatformUuidProvider,
    WindowsMachineGuidProvider,
    default_id_provider
)

__all__ = [
    "DeviceFingerprintManager",
    "hash_device_id",
    "PlatformIdProvider",
    "NullIdProvider",
    "MachineIdProvider",
    "MacPlatformUuidProvider",
    "WindowsMachineGuidProvider",
    "default_id_provider"
]
