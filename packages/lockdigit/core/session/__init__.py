"""
Session state, auto-lock and attempt limiting.
"""

from .context import SessionContext, SessionState
from .monitor import AutoLockMonitor, AppState
from .lockout import AttemptLimiter
from .bootstrap import bootstrap_session
from .unlock import UnlockFlow, UnlockOutcome

__all__ = [
    "SessionContext",
    "SessionState",
    "AutoLockMonitor",
    "AppState",
    "AttemptLimiter",
    "bootstrap_session",
    "UnlockFlow",
    "UnlockOutcome"
]
