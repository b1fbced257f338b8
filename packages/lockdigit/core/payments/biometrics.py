"""
Biometric capability adapters.
Hosts with a native biometric API wrap it in CallbackBiometrics; everything
else gets UnavailableBiometrics.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

BiometricCallback = Callable[[str], Union[bool, Awaitable[bool]]]


class BiometricAuthenticator(ABC):
    """Device biometric check used as a substitute for PIN entry."""

    @abstractmethod
    async def is_available(self) -> bool:
        ...

    @abstractmethod
    async def authenticate(self, prompt: str) -> bool:
        ...


class UnavailableBiometrics(BiometricAuthenticator):
    """Fallback for platforms without biometric hardware or APIs."""

    async def is_available(self) -> bool:
        return False

    async def authenticate(self, prompt: str) -> bool:
        return False


class CallbackBiometrics(BiometricAuthenticator):
    """Delegates to a host-provided callable taking the prompt text."""

    def __init__(self, callback: BiometricCallback,
                 availability: Optional[Callable[[], bool]] = None):
        self.callback = callback
        self.availability = availability

    async def is_available(self) -> bool:
        if self.availability is None:
            return True
        return bool(self.availability())

    async def authenticate(self, prompt: str) -> bool:
        try:
            result = self.callback(prompt)
            if asyncio.iscoroutine(result) or isinstance(result, asyncio.Future):
                result = await result
            return bool(result)
        except Exception as e:
            logger.warning(f"Biometric authentication error: {e}")
            return False


def default_biometrics(callback: Optional[BiometricCallback] = None,
                       availability: Optional[Callable[[], bool]] = None) -> BiometricAuthenticator:
    """Choose the biometric adapter at startup."""
    if callback is None:
        return UnavailableBiometrics()
    return CallbackBiometrics(callback, availability)
