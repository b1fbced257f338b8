"""
Auto-lock on return from background.
Wall-clock time is used so that time spent with the device asleep counts
toward the inactivity threshold.
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional

from ..config import AuthConfig
from .context import SessionContext

logger = logging.getLogger(__name__)


class AppState(str, Enum):
    """Foreground/background states reported by the host platform."""
    ACTIVE = "active"
    BACKGROUND = "background"
    INACTIVE = "inactive"


class AutoLockMonitor:
    """Forces PIN re-entry after the app has been away longer than the timeout."""

    def __init__(self, session: SessionContext, timeout_seconds: Optional[float] = None,
                 clock: Callable[[], float] = time.time):
        self.session = session
        self.timeout_seconds = (
            AuthConfig.SESSION_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
        )
        self.clock = clock
        self.background_timestamp: Optional[float] = None

    def on_app_state_change(self, next_state: AppState) -> bool:
        """
        Handle a platform app-state event.

        Returns:
            True if this transition locked the session
        """
        next_state = AppState(next_state)

        if next_state in (AppState.BACKGROUND, AppState.INACTIVE):
            self.background_timestamp = self.clock()
            return False

        if self.background_timestamp is None:
            return False

        elapsed = self.clock() - self.background_timestamp
        self.background_timestamp = None

        if elapsed > self.timeout_seconds and self.session.is_authenticated and self.session.has_pin:
            self.session.set_pin_verified(False)
            logger.info(f"Session locked after {elapsed:.0f}s in background")
            return True

        return False
