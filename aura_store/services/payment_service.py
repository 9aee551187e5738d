import logging
from datetime import datetime
from decimal import Decimal
from functools import lru_cache
from typing import Any, Dict, Optional

import razorpay
import requests
from sqlmodel import Session, select

from aura_store.config import settings
from aura_store.models.order import Order
from aura_store.models.payment import Payment

logger = logging.getLogger(__name__)

GATEWAY_ERRORS = (
    razorpay.errors.BadRequestError,
    razorpay.errors.GatewayError,
    razorpay.errors.ServerError,
    requests.RequestException,
)


class PaymentGatewayError(Exception):
    pass


class PaymentGateway:
    """Thin wrapper over the Razorpay client. Amounts are in paise."""

    def __init__(self, key_id: str, key_secret: str, currency: str = "INR"):
        self.key_id = key_id
        self.currency = currency
        self.client = razorpay.Client(auth=(key_id, key_secret))

    def create_order(self, amount: int, receipt: str, notes: Optional[dict] = None) -> Dict[str, Any]:
        try:
            return self.client.order.create({
                "amount": amount,
                "currency": self.currency,
                "receipt": receipt,
                "notes": notes or {},
            })
        except GATEWAY_ERRORS as e:
            logger.error(f"Razorpay order creation failed for {receipt}: {e}")
            raise PaymentGatewayError("Could not initiate payment. Please try again.") from e

    def verify_signature(self, gateway_order_id: str, payment_id: str, signature: str) -> bool:
        try:
            self.client.utility.verify_payment_signature({
                "razorpay_order_id": gateway_order_id,
                "razorpay_payment_id": payment_id,
                "razorpay_signature": signature,
            })
        except razorpay.errors.SignatureVerificationError:
            logger.warning(f"Signature verification failed for {gateway_order_id}/{payment_id}")
            return False
        return True

    def refund(self, payment_id: str, amount: int, speed: str = "optimum") -> Dict[str, Any]:
        logger.info(f"Processing refund: {payment_id}, amount: {amount}")
        try:
            return self.client.payment.refund(payment_id, {"amount": amount, "speed": speed})
        except GATEWAY_ERRORS as e:
            logger.error(f"Razorpay refund failed for {payment_id}: {e}")
            raise PaymentGatewayError("Refund could not be initiated") from e

    def fetch_refund(self, refund_id: str) -> Dict[str, Any]:
        try:
            return self.client.refund.fetch(refund_id)
        except GATEWAY_ERRORS as e:
            logger.error(f"Razorpay refund fetch failed for {refund_id}: {e}")
            raise PaymentGatewayError("Could not fetch refund status") from e


@lru_cache(maxsize=1)
def get_payment_gateway() -> PaymentGateway:
    return PaymentGateway(
        settings.RAZORPAY_KEY_ID,
        settings.RAZORPAY_KEY_SECRET,
        settings.CURRENCY,
    )


def finalize_payment(
    *,
    session: Session,
    order: Order,
    txn_id: str,
    amount: Decimal,
    method: str,
    gateway_order_id: Optional[str] = None,
) -> Payment:
    """
    Single source of truth for recording a captured payment.
    Repeated verification of the same transaction returns the existing row.
    """

    existing_payment = session.exec(
        select(Payment).where(Payment.txn_id == txn_id)
    ).first()

    if existing_payment:
        return existing_payment

    payment = Payment(
        order_id=order.id,
        user_id=order.user_id,
        txn_id=txn_id,
        gateway_order_id=gateway_order_id,
        amount=amount,
        status="success",
        method=method,
        created_at=datetime.utcnow(),
    )

    session.add(payment)
    order.payment_status = "paid"
    session.add(order)
    session.flush()

    return payment


def get_successful_payment(session: Session, order_id: int) -> Optional[Payment]:
    return session.exec(
        select(Payment)
        .where(Payment.order_id == order_id)
        .where(Payment.method == "razorpay")
        .where(Payment.status.in_(["success", "refund_pending", "refunded"]))
    ).first()
