"""
Payment step-up verification and per-account PINs.
"""

from .biometrics import BiometricAuthenticator, UnavailableBiometrics, CallbackBiometrics, default_biometrics
from .account_pin import AccountPinService
from .step_up import StepUpVerifier, StepUpResult, StepUpOutcome, StepUpMethod, SensitiveAction

__all__ = [
    "BiometricAuthenticator",
    "UnavailableBiometrics",
    "CallbackBiometrics",
    "default_biometrics",
    "AccountPinService",
    "StepUpVerifier",
    "StepUpResult",
    "StepUpOutcome",
    "StepUpMethod",
    "SensitiveAction"
]
