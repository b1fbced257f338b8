"""
Runtime configuration for the LockDigit authentication core.
Values are read from the environment once at import time.
"""

import logging
import os


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class AuthConfig:
    """PIN, session and adapter configuration."""
    APP_NAME = "LockDigit"

    # PIN
    PIN_LENGTHS = (4, 6)
    MAX_PIN_ATTEMPTS = int(os.getenv("MAX_PIN_ATTEMPTS", 5))

    # Session
    SESSION_TIMEOUT_SECONDS = int(os.getenv("SESSION_TIMEOUT_SECONDS", 5 * 60))  # 5 minutes

    # Device binding
    STRICT_DEVICE_BINDING = _env_flag("STRICT_DEVICE_BINDING")

    # Secure local store
    SECURE_STORE_PATH = os.getenv(
        "SECURE_STORE_PATH",
        os.path.join(os.path.expanduser("~"), ".lockdigit", "secure_store.bin")
    )
    SECURE_STORE_KEY = os.getenv("LOCKDIGIT_STORE_KEY")
    SECURE_STORE_KEY_PATH = os.getenv("SECURE_STORE_KEY_PATH")

    # Remote identity store
    SUPABASE_URL = os.getenv("SUPABASE_URL")
    SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")

    # OTP provider
    OTP_API_URL = os.getenv("OTP_API_URL")
    OTP_API_KEY = os.getenv("OTP_API_KEY")
    OTP_TIMEOUT_SECONDS = float(os.getenv("OTP_TIMEOUT_SECONDS", 10))


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging for host applications embedding the core."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
