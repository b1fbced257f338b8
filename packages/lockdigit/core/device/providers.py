"""
Platform-native installation identifiers.
One provider is chosen at startup and injected into the fingerprint manager.
"""

import asyncio
import logging
import re
import sys
from abc import ABC, abstractmethod
from typing import Optional, Sequence

logger = logging.getLogger(__name__)


class PlatformIdProvider(ABC):
    """Source of a stable, platform-native device identifier."""

    @abstractmethod
    async def get_native_id(self) -> Optional[str]:
        """Return the identifier, or None if the platform cannot provide one."""


class NullIdProvider(PlatformIdProvider):
    """No native identifier; forces the random fallback."""

    async def get_native_id(self) -> Optional[str]:
        return None


class MachineIdProvider(PlatformIdProvider):
    """systemd / D-Bus machine id on Linux."""

    DEFAULT_PATHS = ("/etc/machine-id", "/var/lib/dbus/machine-id")

    def __init__(self, paths: Sequence[str] = DEFAULT_PATHS):
        self.paths = tuple(paths)

    async def get_native_id(self) -> Optional[str]:
        for path in self.paths:
            try:
                with open(path, "r", encoding="ascii") as fh:
                    value = fh.read().strip()
            except OSError:
                continue
            if value:
                return value
        return None


class MacPlatformUuidProvider(PlatformIdProvider):
    """IOPlatformUUID reported by ioreg on macOS."""

    _PATTERN = re.compile(r'"IOPlatformUUID"\s*=\s*"([^"]+)"')
    TIMEOUT_SECONDS = 5

    async def get_native_id(self) -> Optional[str]:
        try:
            process = await asyncio.create_subprocess_exec(
                "ioreg", "-rd1", "-c", "IOPlatformExpertDevice",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL
            )
        except OSError as e:
            logger.warning(f"ioreg lookup failed: {e}")
            return None

        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout=self.TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            process.kill()
            logger.warning("ioreg lookup timed out")
            return None

        output = (stdout or b"").decode("utf-8", errors="replace")
        match = self._PATTERN.search(output)
        return match.group(1) if match else None


class WindowsMachineGuidProvider(PlatformIdProvider):
    """HKLM\\SOFTWARE\\Microsoft\\Cryptography\\MachineGuid on Windows."""

    async def get_native_id(self) -> Optional[str]:
        try:
            import winreg
            with winreg.OpenKey(
                winreg.HKEY_LOCAL_MACHINE, r"SOFTWARE\Microsoft\Cryptography"
            ) as key:
                value, _ = winreg.QueryValueEx(key, "MachineGuid")
                return str(value) or None
        except (ImportError, OSError) as e:
            logger.warning(f"MachineGuid lookup failed: {e}")
            return None


def default_id_provider(platform: Optional[str] = None) -> PlatformIdProvider:
    """Pick the provider for the running platform."""
    platform = platform or sys.platform
    if platform.startswith("linux"):
        return MachineIdProvider()
    if platform == "darwin":
        return MacPlatformUuidProvider()
    if platform in ("win32", "cygwin"):
        return WindowsMachineGuidProvider()
    return NullIdProvider()
