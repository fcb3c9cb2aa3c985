import random
from decimal import Decimal

import pytest

from app.core.exceptions import ValidationError
from app.services.payment_gateway import PaymentGateway
from conftest import card


def test_card_cvc_ending_in_3_succeeds():
    result = PaymentGateway().charge(Decimal("49.99"), "USD", "card", card("123"))
    assert result.success
    assert result.reference == "card_4242"


def test_card_cvc_ending_in_1_is_declined_by_bank():
    result = PaymentGateway().charge(Decimal("10"), "USD", "card", card("451"))
    assert not result.success
    assert result.reason == "Card was declined by the bank."


def test_card_cvc_ending_in_2_is_insufficient_funds():
    result = PaymentGateway().charge(Decimal("10"), "USD", "card", card("002"))
    assert not result.success
    assert result.reason == "Insufficient funds."


@pytest.mark.parametrize("cvc", ["124", "000", "12", "abc"])
def test_card_other_cvcs_are_rejected(cvc):
    with pytest.raises(ValidationError):
        PaymentGateway().charge(Decimal("10"), "USD", "card", card(cvc))


def test_card_missing_details_is_validation_error():
    with pytest.raises(ValidationError) as exc:
        PaymentGateway().charge(Decimal("10"), "USD", "card", {"cvc": "123"})
    assert exc.value.extra["code"] == "card_incomplete"


def test_paypal_declines_at_configured_rate():
    always = PaymentGateway(decline_rate=1.0, rng=random.Random(7))
    never = PaymentGateway(decline_rate=0.0, rng=random.Random(7))

    declined = always.charge(Decimal("10"), "USD", "paypal", {})
    assert not declined.success
    assert "PayPal" in declined.reason

    paid = never.charge(Decimal("10"), "USD", "paypal", {})
    assert paid.success
    assert paid.reference.startswith("paypal_")


def test_unsupported_method():
    with pytest.raises(ValidationError):
        PaymentGateway().charge(Decimal("10"), "USD", "bitcoin", {})


def test_razorpay_capture(monkeypatch):
    from app.services import razorpay_service

    monkeypatch.setattr(razorpay_service, "verify_payment_signature", lambda *a: True)
    monkeypatch.setattr(
        razorpay_service,
        "capture_payment",
        lambda payment_id, amount, currency: {"id": payment_id, "status": "captured"},
    )
    result = PaymentGateway().charge(
        Decimal("49.99"), "INR", "razorpay",
        {"razorpay_payment_id": "pay_1", "razorpay_order_id": "order_1", "razorpay_signature": "sig"},
    )
    assert result.success
    assert result.reference == "pay_1"


def test_razorpay_bad_signature_is_a_decline(monkeypatch):
    from app.services import razorpay_service

    monkeypatch.setattr(razorpay_service, "verify_payment_signature", lambda *a: False)
    result = PaymentGateway().charge(
        Decimal("49.99"), "INR", "razorpay", {"razorpay_payment_id": "pay_1"},
    )
    assert not result.success
    assert "signature" in result.reason


def test_minor_units():
    from app.services.razorpay_service import to_minor_units

    assert to_minor_units(Decimal("49.99")) == 4999
