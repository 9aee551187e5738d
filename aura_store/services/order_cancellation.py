import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlmodel import Session

from aura_store.config import settings
from aura_store.constants.order_status import CANCELLED, PAYMENT_PENDING, TERMINAL_STATUSES
from aura_store.models.order import Order, RefundStatus
from aura_store.models.user import User
from aura_store.pricing.money import percent_of, to_paise, to_rupees
from aura_store.services.coupon_service import release_coupon_usage
from aura_store.services.order_event_service import log_order_event
from aura_store.services.order_service import OrderStateError, gateway_amount
from aura_store.services.payment_service import (
    PaymentGateway,
    PaymentGatewayError,
    finalize_payment,
    get_successful_payment,
)
from aura_store.services.wallet_service import credit_wallet

logger = logging.getLogger(__name__)


def refund_split(order: Order) -> tuple[int, int]:
    """
    Returns ``(gateway refund, wallet credit)`` in paise.

    A placed prepaid order keeps the cancellation fee on both shares. An
    order still awaiting payment gets its wallet share back in full and has
    nothing to refund through the gateway.
    """
    wallet_paid = to_paise(order.wallet_used or 0)
    if order.status == PAYMENT_PENDING:
        return 0, wallet_paid

    keep = 100 - settings.CANCELLATION_FEE_PERCENT
    return percent_of(gateway_amount(order), keep), percent_of(wallet_paid, keep)


def cancel_order(
    session: Session,
    *,
    order: Order,
    actor: User,
    gateway: PaymentGateway,
    reason: Optional[str] = None,
) -> Order:
    if order.status in TERMINAL_STATUSES:
        raise OrderStateError(f"Order cannot be cancelled. Current status: {order.status}")

    was_pending = order.status == PAYMENT_PENDING
    gateway_refund, wallet_refund = refund_split(order)
    fee = 0 if was_pending else (
        gateway_amount(order) + to_paise(order.wallet_used or 0) - gateway_refund - wallet_refund
    )

    now = datetime.utcnow()
    order.status = CANCELLED
    order.cancelled_at = now
    order.cancelled_by = actor.email
    order.updated_at = now

    if order.coupon_id is not None:
        release_coupon_usage(session, order.coupon_id, order.user_id)

    if wallet_refund:
        credit_wallet(
            session,
            user_id=order.user_id,
            amount=to_rupees(wallet_refund),
            reason=f"Refund for cancelled order #{order.id}",
            order_id=order.id,
        )
        order.refund_wallet_amount = to_rupees(wallet_refund)

    if gateway_refund:
        _refund_through_gateway(session, order, gateway, gateway_refund)
    elif wallet_refund:
        order.refund_status = RefundStatus.PROCESSED
        order.refund_initiated_at = now
        order.refund_completed_at = now

    session.add(order)
    log_order_event(
        session,
        order.id,
        CANCELLED,
        title="Order Cancelled",
        description=reason or "",
        created_by=actor.email,
        meta={
            "cancellation_fee": str(to_rupees(fee)),
            "gateway_refund": str(to_rupees(gateway_refund)),
            "wallet_refund": str(to_rupees(wallet_refund)),
        },
    )
    session.commit()
    session.refresh(order)

    logger.info(
        f"Order {order.id} cancelled by {actor.email}: fee={fee}, "
        f"gateway_refund={gateway_refund}, wallet_refund={wallet_refund} (paise)"
    )
    return order


def cancellation_fee(order: Order) -> Decimal:
    """Fee retained on a cancelled order, rupees."""
    if order.status != CANCELLED:
        return Decimal("0.00")
    paid = gateway_amount(order) + to_paise(order.wallet_used or 0)
    refunded = to_paise(order.refund_amount or 0) + to_paise(order.refund_wallet_amount or 0)
    return to_rupees(max(paid - refunded, 0))


def _refund_through_gateway(session: Session, order: Order, gateway: PaymentGateway, amount: int):
    order.refund_amount = to_rupees(amount)
    order.refund_initiated_at = datetime.utcnow()

    payment = get_successful_payment(session, order.id)
    if payment is None:
        logger.error(f"Order {order.id} is marked paid but has no captured payment")
        order.refund_status = RefundStatus.FAILED
        return

    try:
        refund = gateway.refund(payment.txn_id, amount)
    except PaymentGatewayError:
        # the order stays cancelled; the refund can be retried from the dashboard
        order.refund_status = RefundStatus.FAILED
        return

    order.refund_id = refund.get("id")
    order.refund_speed = refund.get("speed_processed") or refund.get("speed_requested")
    _apply_refund_state(order, refund.get("status"))
    payment.status = "refund_pending"
    session.add(payment)


def _apply_refund_state(order: Order, gateway_status: Optional[str]):
    if gateway_status == "processed":
        order.refund_status = RefundStatus.PROCESSED
        order.refund_completed_at = order.refund_completed_at or datetime.utcnow()
        order.payment_status = "refunded"
    elif gateway_status == "failed":
        order.refund_status = RefundStatus.FAILED
    else:
        order.refund_status = RefundStatus.PENDING


def refresh_refund(session: Session, *, order: Order, gateway: PaymentGateway) -> Order:
    """Pulls the latest refund state from the gateway."""
    if not order.refund_id:
        raise OrderStateError("No gateway refund exists for this order")
    if order.refund_status == RefundStatus.PROCESSED:
        return order

    refund = gateway.fetch_refund(order.refund_id)
    _apply_refund_state(order, refund.get("status"))
    if order.refund_status == RefundStatus.PROCESSED:
        payment = get_successful_payment(session, order.id)
        if payment is not None:
            payment.status = "refunded"
            session.add(payment)
        log_order_event(
            session,
            order.id,
            order.status,
            title="Refund Processed",
            description=f"₹{order.refund_amount} refunded to the original payment method",
            meta={"refund_id": order.refund_id},
        )
    order.updated_at = datetime.utcnow()
    session.add(order)
    session.commit()
    session.refresh(order)
    logger.info(f"Refund {order.refund_id} for order {order.id} is {order.refund_status}")
    return order


def refund_late_payment(
    session: Session,
    *,
    order: Order,
    gateway_order_id: str,
    payment_id: str,
    signature: str,
    gateway: PaymentGateway,
) -> Order:
    """
    Records a gateway payment captured after the order was cancelled (by the
    customer or the expiry job) and refunds it in full.
    """
    if order.status != CANCELLED:
        raise OrderStateError(f"Order is {order.status}; nothing to refund")
    if not order.gateway_order_id or order.gateway_order_id != gateway_order_id:
        raise OrderStateError("Razorpay order mismatch")
    if not gateway.verify_signature(gateway_order_id, payment_id, signature):
        raise OrderStateError("Payment verification failed")

    if get_successful_payment(session, order.id) is not None:
        # verification replayed; the refund was already issued
        return order

    finalize_payment(
        session=session,
        order=order,
        txn_id=payment_id,
        amount=order.payable_amount,
        method="razorpay",
        gateway_order_id=gateway_order_id,
    )
    order.refund_completed_at = None
    _refund_through_gateway(session, order, gateway, gateway_amount(order))
    order.updated_at = datetime.utcnow()
    session.add(order)
    log_order_event(
        session,
        order.id,
        CANCELLED,
        title="Late Payment Refunded",
        description="Payment arrived after the order was cancelled and is refunded in full",
        meta={"txn_id": payment_id, "refund_status": order.refund_status},
    )
    session.commit()
    session.refresh(order)
    logger.warning(
        f"Payment {payment_id} captured for cancelled order {order.id}; "
        f"full refund is {order.refund_status}"
    )
    return order
