# app/services/payment_gateway.py
# Payment collaborator: charge(amount, currency, method, details) → ChargeResult
#
# Methods:
#   card      -- dev simulator, deterministic on the CVC's last digit:
#                  1 → declined by bank, 2 → insufficient funds, 3 → paid
#   paypal    -- dev simulator, declines at random (settings.paypal_decline_rate)
#   razorpay  -- real capture through the Razorpay SDK
#
# A decline is a legitimate, retryable outcome (ChargeResult.success=False).
# Malformed details raise ValidationError; a broken provider raises
# CollaboratorFailure.

import random
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional

from app.core.config import settings
from app.core.exceptions import CollaboratorFailure, ValidationError
from app.core.logging import get_logger
from app.services import razorpay_service

logger = get_logger("payments")

SUPPORTED_METHODS = ("card", "paypal", "razorpay")

CVC_OUTCOMES = {
    "1": "Card was declined by the bank.",
    "2": "Insufficient funds.",
    "3": None,   # success
}


@dataclass
class ChargeResult:
    success: bool
    reason: str = ""
    reference: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)


class PaymentGateway:
    """Dispatches a charge to the configured provider for the chosen method."""

    def __init__(self, decline_rate: float = 0.2, rng: Optional[random.Random] = None):
        self.decline_rate = decline_rate
        self.rng = rng or random.Random()

    def charge(
        self,
        amount: Decimal,
        currency: str,
        method: str,
        details: Dict[str, Any],
    ) -> ChargeResult:
        if method not in SUPPORTED_METHODS:
            raise ValidationError(
                f"Unsupported payment method '{method}'.",
                extra={"supported": list(SUPPORTED_METHODS)},
            )
        handler = getattr(self, f"_charge_{method}")
        result = handler(amount, currency, details or {})
        logger.info(
            f"charge method={method} amount={amount} {currency} "
            f"success={result.success} reason={result.reason!r}"
        )
        return result

    # ── card ──────────────────────────────────────────────────────────────────

    def _charge_card(self, amount, currency, details) -> ChargeResult:
        required = ("card_number", "exp_month", "exp_year", "cvc")
        if any(not details.get(key) for key in required):
            raise ValidationError("Missing card details.", extra={"code": "card_incomplete"})

        cvc = str(details["cvc"]).strip()
        if not re.fullmatch(r"\d{3}", cvc):
            raise ValidationError("CVC must be a 3-digit number.", extra={"code": "cvc_invalid"})

        last_digit = cvc[-1]
        if last_digit not in CVC_OUTCOMES:
            raise ValidationError(
                "For testing, please use a CVC ending in 1, 2, or 3.",
                extra={"code": "cvc_pattern_required"},
            )

        reason = CVC_OUTCOMES[last_digit]
        if reason:
            return ChargeResult(success=False, reason=reason)
        return ChargeResult(success=True, reference=f"card_{str(details['card_number'])[-4:]}")

    # ── paypal ────────────────────────────────────────────────────────────────

    def _charge_paypal(self, amount, currency, details) -> ChargeResult:
        if self.rng.random() < self.decline_rate:
            return ChargeResult(
                success=False,
                reason="PayPal could not authorize this transaction.",
            )
        return ChargeResult(success=True, reference=f"paypal_{self.rng.getrandbits(32):08x}")

    # ── razorpay ──────────────────────────────────────────────────────────────

    def _charge_razorpay(self, amount, currency, details) -> ChargeResult:
        payment_id = details.get("razorpay_payment_id")
        order_id = details.get("razorpay_order_id", "")
        signature = details.get("razorpay_signature", "")
        if not payment_id:
            raise ValidationError("razorpay_payment_id is required.")

        if not razorpay_service.verify_payment_signature(order_id, payment_id, signature):
            return ChargeResult(success=False, reason="Payment signature verification failed.")

        try:
            payment = razorpay_service.capture_payment(payment_id, amount, currency)
        except Exception as e:
            logger.warning(f"Razorpay capture failed for {payment_id}: {e}")
            raise CollaboratorFailure(f"Payment provider error: {e}")

        status = payment.get("status")
        if status not in razorpay_service.CAPTURED_STATUSES:
            return ChargeResult(
                success=False,
                reason=payment.get("error_description") or f"Payment status '{status}'.",
                reference=payment_id,
                meta={"razorpay_status": status},
            )
        return ChargeResult(success=True, reference=payment_id, meta={"razorpay_status": status})


def get_payment_gateway() -> PaymentGateway:
    return PaymentGateway(decline_rate=settings.paypal_decline_rate)
