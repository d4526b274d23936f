"""Tests for error classification tables."""

import pytest

from faucetbot.faucet.errors import (
    GAS_ESTIMATION_ERRORS,
    LIGHTNING_ERRORS,
    SUBMISSION_ERRORS,
    ErrorKind,
    FaucetError,
    classify_error_text,
    classify_exception,
)


class TestClassifyErrorText:
    """Tests for substring classification."""

    @pytest.mark.parametrize(
        "body,kind",
        [
            ('{"code":2,"message":"address tb1q is not valid for this network"}', ErrorKind.INVALID_ADDRESS),
            ('{"message":"decoded address is of unknown format"}', ErrorKind.INVALID_ADDRESS),
            ('{"message":"insufficient funds in wallet"}', ErrorKind.INSUFFICIENT_FUNDS),
            ('{"message":"wallet locked"}', ErrorKind.GENERIC),
            ("", ErrorKind.GENERIC),
        ],
    )
    def test_lightning_table(self, body, kind):
        assert classify_error_text(body, LIGHTNING_ERRORS) == kind

    @pytest.mark.parametrize(
        "message,kind",
        [
            ("insufficient funds for gas * price + value", ErrorKind.INSUFFICIENT_FUNDS),
            ("execution reverted", ErrorKind.GENERIC),
        ],
    )
    def test_gas_estimation_table(self, message, kind):
        assert classify_error_text(message, GAS_ESTIMATION_ERRORS) == kind

    @pytest.mark.parametrize(
        "message,kind",
        [
            ("replacement transaction underpriced", ErrorKind.PENDING_TRANSACTION),
            ("already known", ErrorKind.PENDING_TRANSACTION),
            ("insufficient funds for gas * price + value", ErrorKind.INSUFFICIENT_FUNDS),
            ("nonce too high", ErrorKind.GENERIC),
        ],
    )
    def test_submission_table(self, message, kind):
        assert classify_error_text(message, SUBMISSION_ERRORS) == kind

    def test_case_insensitive(self):
        assert classify_error_text("Insufficient Funds", GAS_ESTIMATION_ERRORS) == ErrorKind.INSUFFICIENT_FUNDS

    def test_custom_default(self):
        kind = classify_error_text("???", SUBMISSION_ERRORS, default=ErrorKind.PROVIDER_UNAVAILABLE)
        assert kind == ErrorKind.PROVIDER_UNAVAILABLE


class TestClassifyException:
    """Tests for exception wrapping."""

    def test_faucet_error_passes_through(self):
        error = FaucetError(ErrorKind.INVALID_ADDRESS, "bad")
        assert classify_exception(error, SUBMISSION_ERRORS) is error

    def test_connection_errors_are_unavailable(self):
        error = classify_exception(ConnectionRefusedError("refused"), SUBMISSION_ERRORS)
        assert error.kind == ErrorKind.PROVIDER_UNAVAILABLE
        assert "refused" in error.detail

    def test_extra_unavailable_types(self):
        class ProviderDown(Exception):
            pass

        error = classify_exception(ProviderDown("x"), SUBMISSION_ERRORS, unavailable=(ProviderDown,))
        assert error.kind == ErrorKind.PROVIDER_UNAVAILABLE

    def test_text_fallback(self):
        error = classify_exception(ValueError("replacement transaction underpriced"), SUBMISSION_ERRORS)
        assert error.kind == ErrorKind.PENDING_TRANSACTION

    def test_empty_message_uses_type_name(self):
        error = classify_exception(RuntimeError(), SUBMISSION_ERRORS)
        assert error.kind == ErrorKind.GENERIC
        assert error.detail == "RuntimeError"
