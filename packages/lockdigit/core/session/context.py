"""
Explicitly owned session state.
The composition root creates one SessionContext and hands it to every
collaborator; state changes only through the transition methods below.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    """Snapshot of the in-memory authentication state."""
    is_authenticated: bool = False
    is_loading: bool = True
    user_id: Optional[str] = None
    phone: Optional[str] = None
    has_pin: bool = False
    is_pin_verified: bool = False


SessionListener = Callable[[SessionState], None]


class SessionContext:
    """Single writer for SessionState."""

    def __init__(self):
        self._state = SessionState()
        self._listeners: List[SessionListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def has_pin(self) -> bool:
        return self._state.has_pin

    @property
    def is_pin_verified(self) -> bool:
        return self._state.is_pin_verified

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _transition(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)

    def set_authenticated(self, user_id: str, phone: Optional[str]) -> None:
        self._transition(is_authenticated=True, user_id=user_id, phone=phone, is_loading=False)
        logger.info(f"Session authenticated for user {user_id}")

    def set_pin_created(self) -> None:
        self._transition(has_pin=True)

    def set_pin_verified(self, verified: bool) -> None:
        self._transition(is_pin_verified=verified)
        logger.debug(f"Session PIN verified: {verified}")

    def set_loading(self, loading: bool) -> None:
        self._transition(is_loading=loading)

    def logout(self) -> None:
        self._transition(
            is_authenticated=False,
            user_id=None,
            phone=None,
            has_pin=False,
            is_pin_verified=False,
            is_loading=False
        )
        logger.info("Session logged out")
