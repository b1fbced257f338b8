"""
Unit tests for device fingerprinting and binding checks.
"""

import asyncio
import re

import pytest
from unittest.mock import AsyncMock, Mock, patch

from packages.lockdigit.core.device.fingerprint import DeviceFingerprintManager, hash_device_id
from packages.lockdigit.core.device.providers import (
    MacPlatformUuidProvider,
    MachineIdProvider,
    NullIdProvider,
    WindowsMachineGuidProvider,
    default_id_provider
)
from packages.lockdigit.core.exceptions import DeviceMismatchError
from packages.lockdigit.core.storage.credentials import StoreKeys


class StaticIdProvider(NullIdProvider):
    def __init__(self, value):
        self.value = value
        self.calls = 0

    async def get_native_id(self):
        self.calls += 1
        return self.value


@pytest.mark.asyncio
class TestFingerprintCreation:
    """Test get_or_create_fingerprint."""

    async def test_idempotent(self, device):
        """Two consecutive calls return the identical value."""
        first = await device.get_or_create_fingerprint()
        second = await device.get_or_create_fingerprint()
        assert first == second
        assert re.fullmatch(r"[0-9a-f]{64}", first)

    async def test_native_id_is_hashed_not_stored(self, credentials, secure_store):
        provider = StaticIdProvider("android-id-1234")
        manager = DeviceFingerprintManager(credentials, provider)

        device_id = await manager.get_or_create_fingerprint()

        assert device_id == hash_device_id("android-id-1234")
        assert "android-id-1234" not in (await secure_store.get(StoreKeys.DEVICE_ID))

    async def test_native_id_read_only_once(self, credentials):
        provider = StaticIdProvider("vendor-id")
        manager = DeviceFingerprintManager(credentials, provider)

        await manager.get_or_create_fingerprint()
        await manager.get_or_create_fingerprint()

        assert provider.calls == 1

    async def test_random_fallback_differs_per_installation(self, credentials):
        from packages.lockdigit.core.storage.credentials import CredentialStore
        from packages.lockdigit.core.storage.secure_store import MemorySecureStore

        first = await DeviceFingerprintManager(credentials, NullIdProvider()).get_or_create_fingerprint()
        other = DeviceFingerprintManager(CredentialStore(MemorySecureStore()), NullIdProvider())
        assert first != await other.get_or_create_fingerprint()


@pytest.mark.asyncio
class TestBinding:
    """Test local and remote binding checks."""

    async def test_verify_binding(self, device):
        device_id = await device.get_or_create_fingerprint()
        assert await device.verify_binding(device_id) is True
        assert await device.verify_binding("0" * 64) is False

    async def test_verify_binding_without_fingerprint(self, device):
        assert await device.verify_binding("0" * 64) is False

    async def test_remote_mismatch_is_informational(self, device):
        remote = Mock()
        remote.verify_device_binding = AsyncMock(return_value=False)

        assert await device.check_remote_binding(remote, "user123") is False

    async def test_remote_mismatch_strict(self, credentials):
        manager = DeviceFingerprintManager(credentials, NullIdProvider(), strict=True)
        remote = Mock()
        remote.verify_device_binding = AsyncMock(return_value=False)

        with pytest.raises(DeviceMismatchError):
            await manager.check_remote_binding(remote, "user123")

    async def test_rebind_pushes_local_fingerprint(self, device, remote):
        from packages.lockdigit.core.auth.models import IdentityCreate

        identity_id = await remote.create_identity(IdentityCreate(
            phone="+15551234567", pin_hash="a" * 64, pin_salt="b" * 32, device_id="old-device"
        ))
        assert await device.check_remote_binding(remote, identity_id) is False

        await device.rebind_device(remote, identity_id)
        assert await device.check_remote_binding(remote, identity_id) is True


@pytest.mark.asyncio
class TestProviders:
    """Test platform identifier providers."""

    async def test_machine_id_file(self, tmp_path):
        machine_id = tmp_path / "machine-id"
        machine_id.write_text("0123456789abcdef\n")
        provider = MachineIdProvider(paths=[str(tmp_path / "missing"), str(machine_id)])
        assert await provider.get_native_id() == "0123456789abcdef"

    async def test_machine_id_missing(self, tmp_path):
        provider = MachineIdProvider(paths=[str(tmp_path / "missing")])
        assert await provider.get_native_id() is None

    @patch("packages.lockdigit.core.device.providers.asyncio.create_subprocess_exec", new_callable=AsyncMock)
    async def test_mac_platform_uuid(self, mock_exec):
        process = Mock()
        process.communicate = AsyncMock(return_value=(b'  "IOPlatformUUID" = "ABCD-1234"\n', None))
        mock_exec.return_value = process

        assert await MacPlatformUuidProvider().get_native_id() == "ABCD-1234"
        assert mock_exec.await_args.args[0] == "ioreg"

    @patch(
        "packages.lockdigit.core.device.providers.asyncio.create_subprocess_exec",
        new_callable=AsyncMock,
        side_effect=OSError("no ioreg")
    )
    async def test_mac_platform_uuid_unavailable(self, mock_exec):
        assert await MacPlatformUuidProvider().get_native_id() is None

    @patch("packages.lockdigit.core.device.providers.asyncio.create_subprocess_exec", new_callable=AsyncMock)
    async def test_mac_platform_uuid_timeout(self, mock_exec):
        async def hang():
            await asyncio.sleep(10)

        process = Mock()
        process.communicate = hang
        mock_exec.return_value = process

        with patch.object(MacPlatformUuidProvider, "TIMEOUT_SECONDS", 0.01):
            assert await MacPlatformUuidProvider().get_native_id() is None
        process.kill.assert_called_once()

    async def test_windows_provider_off_windows(self):
        """Without winreg the provider reports no identifier."""
        with patch.dict("sys.modules", {"winreg": None}):
            assert await WindowsMachineGuidProvider().get_native_id() is None


class TestProviderSelection:
    """Test startup selection of the identifier provider."""

    def test_default_provider_selection(self):
        assert isinstance(default_id_provider("linux"), MachineIdProvider)
        assert isinstance(default_id_provider("darwin"), MacPlatformUuidProvider)
        assert isinstance(default_id_provider("win32"), WindowsMachineGuidProvider)
        assert isinstance(default_id_provider("emscripten"), NullIdProvider)
