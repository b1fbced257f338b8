"""
Shared fixtures for the authentication core tests.
"""

import pytest

from packages.lockdigit.core.auth.pin_manager import PinManager
from packages.lockdigit.core.auth.remote import InMemoryIdentityStore
from packages.lockdigit.core.device.fingerprint import DeviceFingerprintManager
from packages.lockdigit.core.device.providers import NullIdProvider
from packages.lockdigit.core.session.context import SessionContext
from packages.lockdigit.core.session.lockout import AttemptLimiter
from packages.lockdigit.core.storage.credentials import CredentialStore
from packages.lockdigit.core.storage.secure_store import MemorySecureStore


@pytest.fixture
def secure_store():
    return MemorySecureStore()


@pytest.fixture
def credentials(secure_store):
    return CredentialStore(secure_store)


@pytest.fixture
def remote():
    return InMemoryIdentityStore()


@pytest.fixture
def device(credentials):
    return DeviceFingerprintManager(credentials, NullIdProvider(), strict=False)


@pytest.fixture
def pin_manager(credentials, remote, device):
    return PinManager(credentials, remote=remote, device=device)


@pytest.fixture
def session():
    return SessionContext()


@pytest.fixture
def limiter():
    return AttemptLimiter(5)


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
