"""
Consecutive-failure counter shared by every PIN entry point.
"""

import logging
from typing import Optional

from ..config import AuthConfig

logger = logging.getLogger(__name__)


class AttemptLimiter:
    """
    Counts consecutive failed PIN checks.

    record_failure() reports True exactly once, on the failure that reaches
    the limit. Only record_success() or reset() clear the count.
    """

    def __init__(self, max_attempts: Optional[int] = None):
        self.max_attempts = AuthConfig.MAX_PIN_ATTEMPTS if max_attempts is None else max_attempts
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be positive")
        self.failures = 0

    @property
    def remaining(self) -> int:
        return max(0, self.max_attempts - self.failures)

    @property
    def locked_out(self) -> bool:
        return self.failures >= self.max_attempts

    def record_failure(self) -> bool:
        if self.locked_out:
            return False

        self.failures += 1
        if self.locked_out:
            logger.warning(f"PIN lockout after {self.failures} consecutive failures")
            return True

        logger.debug(f"PIN failure recorded, {self.remaining} attempts remaining")
        return False

    def record_success(self) -> None:
        self.failures = 0

    def reset(self) -> None:
        self.failures = 0
