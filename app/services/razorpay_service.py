# app/services/razorpay_service.py
# Razorpay API wrapper used by the "razorpay" payment method
#
# Checkout flow:
#   1. Frontend opens Razorpay checkout for the booking amount
#   2. Razorpay returns razorpay_payment_id / razorpay_order_id / razorpay_signature
#   3. POST /bookings/{id}/pay with method="razorpay" and those three values
#   4. We verify the signature and capture the payment here

import hashlib
import hmac
from decimal import Decimal

import razorpay

from app.core.config import settings


def get_razorpay_client() -> razorpay.Client:
    """Return authenticated Razorpay client."""
    return razorpay.Client(
        auth=(settings.razorpay_key_id, settings.razorpay_key_secret)
    )


def to_minor_units(amount: Decimal) -> int:
    """Razorpay amounts are integers in the smallest currency unit."""
    return int((Decimal(amount) * 100).quantize(Decimal("1")))


def verify_payment_signature(order_id: str, payment_id: str, signature: str) -> bool:
    """
    Verify the checkout signature using HMAC-SHA256 over "order_id|payment_id".
    Must be called before capturing.
    """
    if not settings.razorpay_key_secret:
        # In development without keys, skip verification
        return True

    expected = hmac.new(
        settings.razorpay_key_secret.encode("utf-8"),
        f"{order_id}|{payment_id}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()

    return hmac.compare_digest(expected, signature or "")


def capture_payment(payment_id: str, amount: Decimal, currency: str) -> dict:
    """
    Capture an authorized payment.

    Returns:
        Razorpay payment object with 'id', 'status', 'error_description' etc.
    """
    client = get_razorpay_client()
    return client.payment.capture(
        payment_id,
        to_minor_units(amount),
        {"currency": currency},
    )


# Razorpay payment statuses that count as money received
CAPTURED_STATUSES = {"captured"}
