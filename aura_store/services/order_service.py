import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from sqlmodel import Session, select

from aura_store.constants.order_status import (
    CANCELLED,
    ORDER_PLACED,
    PAYMENT_PENDING,
    can_transition,
)
from aura_store.models.address import Address
from aura_store.models.coupon import Coupon
from aura_store.models.order import Order, PaymentMode
from aura_store.models.order_item import OrderItem
from aura_store.models.product import Product
from aura_store.models.user import User
from aura_store.notifications import Notifier, OrderEvent
from aura_store.pricing import CartLine, CheckoutError, CodUnavailableError, PricingOutcome
from aura_store.pricing.eligibility import USAGE_LIMIT_REACHED
from aura_store.pricing.money import to_paise, to_rupees
from aura_store.services.coupon_service import claim_coupon_usage
from aura_store.services.order_event_service import get_timeline, log_order_event
from aura_store.services.payment_service import PaymentGateway, finalize_payment
from aura_store.services.wallet_service import InsufficientWalletBalance, debit_wallet

logger = logging.getLogger(__name__)


class OrderStateError(Exception):
    pass


@dataclass
class PlacedOrder:
    order: Order
    gateway_order: Optional[dict] = None
    popup: Optional[dict] = None


def _payment_mode(outcome: PricingOutcome, requested: str) -> str:
    if outcome.breakdown.wallet_only:
        return PaymentMode.WALLET
    return PaymentMode.COD if requested == PaymentMode.COD else PaymentMode.ONLINE


def _order_items(session: Session, order_id: int, lines: Sequence[CartLine], free_units: dict):
    for index, line in enumerate(lines):
        product = session.get(Product, line.product_id)
        session.add(
            OrderItem(
                order_id=order_id,
                product_id=line.product_id,
                variant_id=line.variant_id,
                name=line.name,
                image_url=product.image_url if product else None,
                size=line.size,
                price=to_rupees(line.unit_price),
                quantity=line.quantity,
                free_units=free_units.get(index, 0),
                bundle_variant_ids=list(line.bundle_variant_ids) or None,
            )
        )


def place_order(
    session: Session,
    *,
    user: User,
    address: Address,
    lines: Sequence[CartLine],
    outcome: PricingOutcome,
    payment_mode: str,
    gateway: PaymentGateway,
) -> PlacedOrder:
    """
    Persists an order from a server-side breakdown.

    Wallet-covered and COD orders are placed immediately. Online orders wait
    in ``Payment Pending`` until the gateway payment is verified; the wallet
    share and the coupon slot are still taken now and given back if the
    payment never completes.
    """
    breakdown = outcome.breakdown
    mode = _payment_mode(outcome, payment_mode)

    if mode == PaymentMode.COD and not breakdown.cod_available:
        raise CodUnavailableError()

    coupon = session.get(Coupon, outcome.coupon.id) if outcome.coupon else None

    status = PAYMENT_PENDING if mode == PaymentMode.ONLINE else ORDER_PLACED
    order = Order(
        user_id=user.id,
        address_id=address.id,
        shipping_pincode=address.postal_code,
        original_total=to_rupees(breakdown.original_total),
        product_total=to_rupees(breakdown.product_total),
        offer_discount=to_rupees(breakdown.offer_discount),
        discount_amount=to_rupees(breakdown.discount_amount),
        delivery_charge=to_rupees(breakdown.delivery_charge),
        wallet_used=to_rupees(breakdown.wallet_used),
        total_amount=to_rupees(breakdown.total_before_wallet),
        payable_amount=to_rupees(breakdown.total),
        applied_offers=[
            {
                "promotion_id": o.promotion_id,
                "title": o.title,
                "amount": str(to_rupees(o.amount)),
                "variant_id": o.variant_id,
                "free_units": o.free_units,
            }
            for o in breakdown.applied_offers
        ],
        coupon_id=coupon.id if coupon else None,
        coupon_code=coupon.code if coupon else None,
        payment_mode=mode,
        payment_status="paid" if mode == PaymentMode.WALLET else "pending",
        status=status,
    )
    session.add(order)
    session.flush()

    try:
        if coupon is not None and not claim_coupon_usage(session, coupon, user.id):
            raise CheckoutError(f"Coupon {coupon.code}: {USAGE_LIMIT_REACHED}")

        if breakdown.wallet_used:
            debit_wallet(
                session,
                user_id=user.id,
                amount=to_rupees(breakdown.wallet_used),
                reason=f"Used for order #{order.id}",
                order_id=order.id,
            )

        _order_items(session, order.id, lines, outcome.discounts.free_units)
        log_order_event(
            session,
            order.id,
            status,
            title=status,
            description=(
                "Awaiting payment confirmation"
                if status == PAYMENT_PENDING
                else f"Order received ({mode.upper()})"
            ),
            meta={"payment_mode": mode},
        )

        gateway_order = None
        if mode == PaymentMode.ONLINE:
            gateway_order = gateway.create_order(
                amount=breakdown.total,
                receipt=f"order_{order.id}",
                notes={"order_id": order.id, "user_id": user.id},
            )
            order.gateway_order_id = gateway_order["id"]
            session.add(order)

        session.commit()
    except InsufficientWalletBalance as e:
        session.rollback()
        raise CheckoutError("Wallet balance changed. Please review your order.") from e
    except Exception:
        session.rollback()
        raise

    session.refresh(order)
    logger.info(
        f"Order {order.id} created for user {user.id}: mode={mode}, status={order.status}, "
        f"payable={order.payable_amount}"
    )
    return PlacedOrder(order=order, gateway_order=gateway_order)


def confirm_online_payment(
    session: Session,
    *,
    order: Order,
    gateway_order_id: str,
    payment_id: str,
    signature: str,
    gateway: PaymentGateway,
):
    if order.status != PAYMENT_PENDING:
        if order.payment_status == "paid":
            # verification replayed by the client
            return order
        raise OrderStateError(f"Order is {order.status}; payment can no longer be accepted")

    if not order.gateway_order_id or order.gateway_order_id != gateway_order_id:
        raise OrderStateError("Razorpay order mismatch")

    if not gateway.verify_signature(gateway_order_id, payment_id, signature):
        raise OrderStateError("Payment verification failed")

    finalize_payment(
        session=session,
        order=order,
        txn_id=payment_id,
        amount=order.payable_amount,
        method="razorpay",
        gateway_order_id=gateway_order_id,
    )
    order.status = ORDER_PLACED
    order.updated_at = datetime.utcnow()
    session.add(order)
    log_order_event(
        session,
        order.id,
        ORDER_PLACED,
        title=ORDER_PLACED,
        description="Payment received",
        meta={"txn_id": payment_id},
    )
    session.commit()
    session.refresh(order)
    logger.info(f"Payment {payment_id} verified for order {order.id}")
    return order


def update_order_status(
    session: Session,
    *,
    order: Order,
    new_status: str,
    admin: User,
    notifier: Notifier,
    note: Optional[str] = None,
) -> Order:
    if new_status == CANCELLED:
        raise OrderStateError("Use the cancellation endpoint to cancel orders")
    if not can_transition(order.status, new_status):
        raise OrderStateError(f"Cannot move order from {order.status} to {new_status}")

    previous = order.status
    order.status = new_status
    order.updated_at = datetime.utcnow()
    if new_status == "Delivered" and order.payment_mode == PaymentMode.COD:
        order.payment_status = "paid"
    session.add(order)
    log_order_event(
        session,
        order.id,
        new_status,
        title=new_status,
        description=note or "",
        created_by=admin.email,
        meta={"from": previous},
    )
    session.commit()
    session.refresh(order)

    customer = session.get(User, order.user_id)
    notifier.notify(
        OrderEvent.STATUS_CHANGED,
        order=order,
        user=customer,
        extra={
            "user_title": f"Order #{order.id} {new_status}",
            "user_content": note or f"Your order is now {new_status}.",
            "user_template": "user_emails/order_status.html",
            "user_subject": f"Order #{order.id} is {new_status}",
            "context": {"status": new_status, "note": note},
        },
    )
    logger.info(f"Order {order.id}: {previous} -> {new_status} by {admin.email}")
    return order


def get_user_order(session: Session, order_id: int, user_id: int) -> Optional[Order]:
    return session.exec(
        select(Order).where(Order.id == order_id).where(Order.user_id == user_id)
    ).first()


def serialize_order(session: Session, order: Order) -> dict:
    items = session.exec(select(OrderItem).where(OrderItem.order_id == order.id)).all()
    refund = None
    if order.refund_status:
        refund = {
            "refund_id": order.refund_id,
            "status": order.refund_status,
            "amount": order.refund_amount,
            "wallet_amount": order.refund_wallet_amount,
            "speed": order.refund_speed,
            "initiated_at": order.refund_initiated_at,
            "completed_at": order.refund_completed_at,
        }

    return {
        "order_id": order.id,
        "status": order.status,
        "payment_mode": order.payment_mode,
        "payment_status": order.payment_status,
        "created_at": order.created_at,
        "shipping_pincode": order.shipping_pincode,
        "coupon_code": order.coupon_code,
        "summary": {
            "original_total": order.original_total,
            "product_total": order.product_total,
            "offer_discount": order.offer_discount,
            "discount_amount": order.discount_amount,
            "delivery_charge": order.delivery_charge,
            "wallet_used": order.wallet_used,
            "total_amount": order.total_amount,
            "payable_amount": order.payable_amount,
            "applied_offers": order.applied_offers or [],
        },
        "items": [
            {
                "product_id": i.product_id,
                "variant_id": i.variant_id,
                "name": i.name,
                "image_url": i.image_url,
                "size": i.size,
                "price": i.price,
                "quantity": i.quantity,
                "free_units": i.free_units,
                "bundle_variant_ids": i.bundle_variant_ids,
            }
            for i in items
        ],
        "refund": refund,
        "timeline": [
            {
                "status": e.status,
                "title": e.title,
                "description": e.description,
                "timestamp": e.created_at,
            }
            for e in get_timeline(session, order.id)
        ],
    }


def gateway_amount(order: Order) -> int:
    """Amount the gateway captured for ``order``, in paise."""
    if order.payment_mode == PaymentMode.ONLINE and order.payment_status in ("paid", "refunded"):
        return to_paise(order.payable_amount)
    return 0
