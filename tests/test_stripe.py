"""
Stripe adapter tests.

The stripe SDK is mocked; no request leaves the process.
"""

from decimal import Decimal
from unittest.mock import Mock, patch

import pytest
import stripe

from tillflow.processor import (
    NOT_CONFIGURED,
    ProcessorError,
    ProcessorUnavailable,
    StripeProcessor,
    intent_id_from_secret,
)
from tillflow.settle import CARD, CheckoutSession, SettlementErrorKind

from conftest import VISA


@pytest.fixture
def proc() -> StripeProcessor:
    return StripeProcessor("sk_test_123")


def test_intent_id_from_secret():
    assert intent_id_from_secret("pi_3Abc_secret_xyz") == "pi_3Abc"


class TestConfiguration:
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_env")
        assert StripeProcessor.from_env().configured

    async def test_missing_key_is_unavailable(self, monkeypatch):
        monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
        proc = StripeProcessor.from_env()

        assert not proc.configured
        with pytest.raises(ProcessorUnavailable, match="STRIPE_SECRET_KEY"):
            await proc.create_intent(Decimal("1.00"))

    def test_repr_hides_key(self, proc):
        assert "sk_test_123" not in repr(proc)

    async def test_session_reports_unconfigured_stripe(self, monkeypatch, ten_dollar_cart):
        monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
        session = CheckoutSession(StripeProcessor.from_env())
        session.open(ten_dollar_cart)
        session.select_method(CARD)
        session.set_card_details(VISA)

        e = (await session.settle()).unwrap_err()

        assert e.kind is SettlementErrorKind.ADAPTER_UNAVAILABLE
        assert e.message == NOT_CONFIGURED


class TestCreateIntent:
    @patch("stripe.PaymentIntent.create")
    async def test_sends_cents(self, mock_create, proc):
        mock_create.return_value = Mock(id="pi_1", client_secret="pi_1_secret_a")

        intent = await proc.create_intent(Decimal("12.345"))

        assert intent.intent_id == "pi_1"
        assert intent.client_secret == "pi_1_secret_a"
        call_kwargs = mock_create.call_args[1]
        assert call_kwargs["amount"] == 1234
        assert call_kwargs["currency"] == "usd"
        assert call_kwargs["metadata"] == {"integration_check": "accept_a_payment"}
        assert call_kwargs["api_key"] == "sk_test_123"

    @patch("stripe.PaymentIntent.create")
    async def test_charges_in_adapter_currency(self, mock_create):
        mock_create.return_value = Mock(id="pi_1", client_secret="pi_1_secret_a")

        await StripeProcessor("sk_test_123", currency="EUR").create_intent(Decimal("3"))

        assert mock_create.call_args[1]["currency"] == "eur"

    @patch("stripe.PaymentIntent.create")
    async def test_connection_error(self, mock_create, proc):
        mock_create.side_effect = stripe.APIConnectionError("Network down")
        with pytest.raises(ProcessorError, match="Network down"):
            await proc.create_intent(Decimal("5"))

    @patch("stripe.PaymentIntent.create")
    async def test_bad_key(self, mock_create, proc):
        mock_create.side_effect = stripe.AuthenticationError("Invalid API Key provided")
        with pytest.raises(ProcessorUnavailable):
            await proc.create_intent(Decimal("5"))


class TestConfirm:
    @patch("stripe.PaymentMethod.modify")
    @patch("stripe.PaymentIntent.confirm")
    async def test_succeeded(self, mock_confirm, mock_modify, proc):
        mock_confirm.return_value = Mock(id="pi_1", status="succeeded")

        confirmation = await proc.confirm_card_payment("pi_1_secret_a", VISA, "Jane Doe")

        assert confirmation.succeeded
        assert confirmation.reference == "pi_1"
        mock_confirm.assert_called_once()
        assert mock_confirm.call_args[0][0] == "pi_1"
        assert mock_confirm.call_args[1]["payment_method"] == "pm_card_visa"
        assert mock_modify.call_args[1]["billing_details"] == {"name": "Jane Doe"}

    @patch("stripe.PaymentMethod.modify")
    @patch("stripe.PaymentIntent.confirm")
    async def test_no_billing_name_skips_update(self, mock_confirm, mock_modify, proc):
        mock_confirm.return_value = Mock(id="pi_1", status="succeeded")
        await proc.confirm_card_payment("pi_1_secret_a", VISA, None)
        mock_modify.assert_not_called()

    @patch("stripe.PaymentIntent.confirm")
    async def test_card_error_is_a_failed_confirmation(self, mock_confirm, proc):
        mock_confirm.side_effect = stripe.CardError("Your card was declined.", None, "card_declined")

        confirmation = await proc.confirm_card_payment("pi_1_secret_a", VISA, None)

        assert not confirmation.succeeded
        assert confirmation.error_message == "Your card was declined."

    @patch("stripe.PaymentIntent.confirm")
    async def test_requires_action_is_not_success(self, mock_confirm, proc):
        mock_confirm.return_value = Mock(id="pi_1", status="requires_action", last_payment_error=None)

        confirmation = await proc.confirm_card_payment("pi_1_secret_a", VISA, None)

        assert confirmation.status == "failed"
        assert "requires_action" in confirmation.error_message

    @patch("stripe.PaymentIntent.cancel")
    async def test_cancel(self, mock_cancel, proc):
        await proc.cancel_intent("pi_1")
        assert mock_cancel.call_args[0][0] == "pi_1"
