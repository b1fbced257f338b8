"""
Startup restoration of session state from the secure store.
"""

import logging

from ..storage.credentials import CredentialStore
from .context import SessionContext

logger = logging.getLogger(__name__)


async def bootstrap_session(credentials: CredentialStore, session: SessionContext) -> bool:
    """
    Mark the session authenticated-but-locked when a finished setup is stored.

    Returns:
        True if a stored credential was found and the PIN lock should be shown
    """
    try:
        has_setup = await credentials.has_completed_setup()
        user_id = await credentials.get_user_id()
        pin_hash, _ = await credentials.get_pin_hash()

        if has_setup and user_id and pin_hash:
            phone = await credentials.get_phone()
            session.set_authenticated(user_id, phone)
            session.set_pin_created()
            logger.info("Stored credential found, PIN entry required")
            return True

        logger.info("No stored credential, login required")
        return False
    finally:
        session.set_loading(False)
