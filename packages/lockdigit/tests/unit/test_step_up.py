"""
Unit tests for payment step-up verification.
"""

import pytest
from unittest.mock import AsyncMock, Mock

from packages.lockdigit.core.exceptions import WeakPinError
from packages.lockdigit.core.payments.account_pin import AccountPinService
from packages.lockdigit.core.payments.biometrics import (
    CallbackBiometrics,
    UnavailableBiometrics,
    default_biometrics
)
from packages.lockdigit.core.payments.step_up import (
    SensitiveAction,
    StepUpMethod,
    StepUpOutcome,
    StepUpVerifier
)


@pytest.mark.asyncio
class TestPinStepUp:
    """Test PIN-gated sensitive actions."""

    async def test_every_action_reverifies(self, pin_manager, limiter, session):
        """An unlocked session does not skip the check."""
        await pin_manager.create_pin("4821")
        session.set_pin_verified(True)
        verifier = StepUpVerifier(pin_manager, limiter)

        approved = await verifier.authorize_with_pin(SensitiveAction.TRANSFER, "4821")
        denied = await verifier.authorize_with_pin(SensitiveAction.TRANSFER, "1739")

        assert approved.approved is True
        assert approved.method == StepUpMethod.PIN
        assert denied.outcome == StepUpOutcome.DENIED
        assert denied.remaining_attempts == 4

    async def test_not_configured(self, pin_manager, limiter):
        verifier = StepUpVerifier(pin_manager, limiter)
        result = await verifier.authorize_with_pin(SensitiveAction.BALANCE_REVEAL, "4821")
        assert result.outcome == StepUpOutcome.NOT_CONFIGURED
        assert limiter.failures == 0

    async def test_lockout_fires_callback_once(self, pin_manager, limiter):
        await pin_manager.create_pin("4821")
        on_lockout = AsyncMock()
        verifier = StepUpVerifier(pin_manager, limiter, on_lockout=on_lockout)

        results = [
            await verifier.authorize_with_pin(SensitiveAction.TRANSFER, "9999")
            for _ in range(7)
        ]

        assert [r.outcome for r in results[:4]] == [StepUpOutcome.DENIED] * 4
        assert all(r.outcome == StepUpOutcome.LOCKED_OUT for r in results[4:])
        on_lockout.assert_awaited_once()
        assert on_lockout.await_args.args[0].action == SensitiveAction.TRANSFER

    async def test_locked_out_refuses_correct_pin(self, pin_manager, limiter):
        await pin_manager.create_pin("4821")
        verifier = StepUpVerifier(pin_manager, limiter, on_lockout=Mock())
        for _ in range(5):
            await verifier.authorize_with_pin(SensitiveAction.TRANSFER, "9999")

        result = await verifier.authorize_with_pin(SensitiveAction.TRANSFER, "4821")
        assert result.outcome == StepUpOutcome.LOCKED_OUT

    async def test_success_clears_failures(self, pin_manager, limiter):
        await pin_manager.create_pin("4821")
        verifier = StepUpVerifier(pin_manager, limiter)
        for _ in range(4):
            await verifier.authorize_with_pin(SensitiveAction.BILL_PAYMENT, "9999")

        await verifier.authorize_with_pin(SensitiveAction.BILL_PAYMENT, "4821")
        assert limiter.remaining == 5


@pytest.mark.asyncio
class TestBiometricStepUp:
    """Test biometrics as an equivalent factor."""

    async def test_biometric_success_approves(self, pin_manager, limiter):
        await pin_manager.create_pin("4821")
        prompts = []
        biometrics = CallbackBiometrics(lambda prompt: prompts.append(prompt) or True)
        verifier = StepUpVerifier(pin_manager, limiter, biometrics=biometrics, biometric_enabled=True)

        result = await verifier.authorize_with_biometrics(SensitiveAction.SCAN_TO_PAY)

        assert result.approved is True
        assert result.method == StepUpMethod.BIOMETRIC
        assert prompts == ["Confirm scan to pay"]

    async def test_async_callback(self, pin_manager, limiter):
        await pin_manager.create_pin("4821")

        async def assert_face(prompt):
            return True

        verifier = StepUpVerifier(
            pin_manager, limiter, biometrics=CallbackBiometrics(assert_face), biometric_enabled=True
        )
        result = await verifier.authorize_with_biometrics(SensitiveAction.TRANSFER, "Pay $20")
        assert result.approved is True

    async def test_biometric_failure_not_counted(self, pin_manager, limiter):
        await pin_manager.create_pin("4821")
        biometrics = CallbackBiometrics(lambda prompt: False)
        verifier = StepUpVerifier(pin_manager, limiter, biometrics=biometrics, biometric_enabled=True)

        result = await verifier.authorize_with_biometrics(SensitiveAction.TRANSFER)
        assert result.outcome == StepUpOutcome.DENIED
        assert limiter.failures == 0

    async def test_biometric_error_is_failure(self, pin_manager, limiter):
        await pin_manager.create_pin("4821")

        def sensor_error(prompt):
            raise RuntimeError("sensor busy")

        verifier = StepUpVerifier(
            pin_manager, limiter, biometrics=CallbackBiometrics(sensor_error), biometric_enabled=True
        )
        result = await verifier.authorize_with_biometrics(SensitiveAction.TRANSFER)
        assert result.outcome == StepUpOutcome.DENIED

    async def test_unavailable(self, pin_manager, limiter):
        await pin_manager.create_pin("4821")
        verifier = StepUpVerifier(pin_manager, limiter, biometrics=UnavailableBiometrics(), biometric_enabled=True)
        result = await verifier.authorize_with_biometrics(SensitiveAction.TRANSFER)
        assert result.outcome == StepUpOutcome.BIOMETRIC_UNAVAILABLE

    async def test_disabled_in_settings(self, pin_manager, limiter):
        await pin_manager.create_pin("4821")
        biometrics = CallbackBiometrics(lambda prompt: True)
        verifier = StepUpVerifier(pin_manager, limiter, biometrics=biometrics, biometric_enabled=False)
        result = await verifier.authorize_with_biometrics(SensitiveAction.TRANSFER)
        assert result.outcome == StepUpOutcome.BIOMETRIC_UNAVAILABLE

    async def test_hardware_reports_unavailable(self, pin_manager, limiter):
        await pin_manager.create_pin("4821")
        biometrics = CallbackBiometrics(lambda prompt: True, availability=lambda: False)
        verifier = StepUpVerifier(pin_manager, limiter, biometrics=biometrics, biometric_enabled=True)
        result = await verifier.authorize_with_biometrics(SensitiveAction.TRANSFER)
        assert result.outcome == StepUpOutcome.BIOMETRIC_UNAVAILABLE

    async def test_biometrics_require_pin_credential(self, pin_manager, limiter):
        """Biometrics substitute for PIN entry; without a stored PIN nothing is approved."""
        verifier = StepUpVerifier(
            pin_manager, limiter, biometrics=CallbackBiometrics(lambda prompt: True), biometric_enabled=True
        )

        result = await verifier.authorize_with_biometrics(SensitiveAction.TRANSFER)

        assert result.outcome == StepUpOutcome.NOT_CONFIGURED
        assert result.approved is False

    async def test_stored_preference_enables_biometrics(self, pin_manager, credentials, limiter):
        await pin_manager.create_pin("4821")
        verifier = StepUpVerifier(pin_manager, limiter, biometrics=CallbackBiometrics(lambda prompt: True))

        disabled = await verifier.authorize_with_biometrics(SensitiveAction.TRANSFER)
        await credentials.set_biometric_enabled(True)
        enabled = await verifier.authorize_with_biometrics(SensitiveAction.TRANSFER)

        assert disabled.outcome == StepUpOutcome.BIOMETRIC_UNAVAILABLE
        assert enabled.approved is True

    async def test_default_biometrics(self):
        assert isinstance(default_biometrics(), UnavailableBiometrics)
        assert isinstance(default_biometrics(lambda prompt: True), CallbackBiometrics)


@pytest.mark.asyncio
class TestAccountPin:
    """Test per-account payment PINs."""

    async def test_set_and_verify(self, remote):
        service = AccountPinService(remote)
        await service.set_account_pin("acct_1", "193746")

        assert await service.verify_account_pin("acct_1", "193746") is True
        assert await service.verify_account_pin("acct_1", "193747") is False
        assert await service.verify_account_pin("acct_2", "193746") is False

    async def test_weak_account_pin(self, remote):
        with pytest.raises(WeakPinError):
            await AccountPinService(remote).set_account_pin("acct_1", "000000")
        assert remote.accounts == {}

    async def test_account_pin_is_independent_of_app_pin(self, pin_manager, remote, limiter):
        await pin_manager.create_pin("4821")
        account_pins = AccountPinService(remote)
        await account_pins.set_account_pin("acct_1", "193746")
        verifier = StepUpVerifier(pin_manager, limiter, account_pins=account_pins)

        wrong = await verifier.authorize_account(SensitiveAction.BALANCE_REVEAL, "acct_1", "4821")
        right = await verifier.authorize_account(SensitiveAction.BALANCE_REVEAL, "acct_1", "193746")

        assert wrong.outcome == StepUpOutcome.DENIED
        assert right.approved is True
        assert right.method == StepUpMethod.ACCOUNT_PIN

    async def test_account_failures_share_limiter(self, pin_manager, remote, limiter):
        account_pins = AccountPinService(remote)
        await account_pins.set_account_pin("acct_1", "193746")
        verifier = StepUpVerifier(pin_manager, limiter, account_pins=account_pins)

        for _ in range(5):
            result = await verifier.authorize_account(SensitiveAction.TRANSFER, "acct_1", "000001")
        assert result.outcome == StepUpOutcome.LOCKED_OUT
        assert limiter.locked_out is True

    async def test_without_account_service(self, pin_manager, limiter):
        verifier = StepUpVerifier(pin_manager, limiter)
        result = await verifier.authorize_account(SensitiveAction.TRANSFER, "acct_1", "193746")
        assert result.outcome == StepUpOutcome.NOT_CONFIGURED
