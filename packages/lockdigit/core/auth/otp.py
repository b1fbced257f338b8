"""
One-time-code provider used as the escalation path after a PIN lockout.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from ..config import AuthConfig
from ..exceptions import OtpError

logger = logging.getLogger(__name__)


class OtpProvider(ABC):
    """Send a code to a phone and confirm it."""

    @abstractmethod
    async def send(self, phone: str) -> str:
        """Send a code and return a confirmation handle."""

    @abstractmethod
    async def confirm(self, handle: str, code: str) -> Optional[str]:
        """Return an identity token, or None if the code is wrong."""


class HttpOtpProvider(OtpProvider):
    """
    OTP provider speaking a small JSON API:

        POST {base}/verifications            {"phone": ...}  -> {"handle": ...}
        POST {base}/verifications/{h}/confirm {"code": ...}  -> {"token": ...}

    A 4xx on confirm means the code was rejected.
    """

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.base_url = (base_url or AuthConfig.OTP_API_URL or "").rstrip("/")
        if not self.base_url:
            raise ValueError("OTP provider URL missing")
        self.api_key = api_key or AuthConfig.OTP_API_KEY
        self.timeout = timeout or AuthConfig.OTP_TIMEOUT_SECONDS

    def _headers(self):
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def send(self, phone: str) -> str:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/verifications",
                    json={"phone": phone},
                    headers=self._headers()
                )
                response.raise_for_status()
                handle = response.json().get("handle")
        except httpx.HTTPError as e:
            logger.error(f"OTP send failed: {e}")
            raise OtpError("Failed to send verification code") from e

        if not handle:
            raise OtpError("OTP provider returned no handle")
        logger.info("Verification code sent")
        return handle

    async def confirm(self, handle: str, code: str) -> Optional[str]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/verifications/{handle}/confirm",
                    json={"code": code},
                    headers=self._headers()
                )
                if 400 <= response.status_code < 500:
                    logger.warning("Verification code rejected")
                    return None
                response.raise_for_status()
                return response.json().get("token")
        except httpx.HTTPError as e:
            logger.error(f"OTP confirm failed: {e}")
            raise OtpError("Failed to confirm verification code") from e
