import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from aura_store.database import get_session
from aura_store.dependencies.admin import require_admin
from aura_store.models.order import Order, RefundStatus
from aura_store.models.user import User
from aura_store.notifications import Notifier, OrderEvent, get_notifier
from aura_store.schemas.order_schemas import (
    CancelOrderRequest,
    CancelOrderResponse,
    RefundOut,
    StatusUpdateRequest,
)
from aura_store.services.order_cancellation import cancel_order, cancellation_fee, refresh_refund
from aura_store.services.order_service import (
    OrderStateError,
    get_user_order,
    serialize_order,
    update_order_status,
)
from aura_store.services.payment_service import (
    PaymentGateway,
    PaymentGatewayError,
    get_payment_gateway,
)
from aura_store.utils.pagination import paginate
from aura_store.utils.token import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()
admin_router = APIRouter()


def _refund_out(order: Order):
    if order.refund_status is None:
        return None
    return RefundOut(
        refund_id=order.refund_id,
        status=order.refund_status,
        amount=order.refund_amount,
        wallet_amount=order.refund_wallet_amount,
        speed=order.refund_speed,
        initiated_at=order.refund_initiated_at,
        completed_at=order.refund_completed_at,
    )


@router.get("")
def my_orders(
    page: int = 1,
    limit: int = 10,
    status: str | None = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    query = select(Order).where(Order.user_id == current_user.id)
    if status:
        query = query.where(Order.status == status)
    query = query.order_by(Order.created_at.desc())

    data = paginate(session=session, query=query, page=page, limit=limit)
    data["results"] = [
        {
            "order_id": o.id,
            "status": o.status,
            "payment_mode": o.payment_mode,
            "total_amount": o.total_amount,
            "payable_amount": o.payable_amount,
            "created_at": o.created_at,
            "refund_status": o.refund_status,
        }
        for o in data["results"]
    ]
    return data


@router.get("/{order_id}")
def order_detail(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    order = get_user_order(session, order_id, current_user.id)
    if not order:
        raise HTTPException(404, "Order not found")
    return serialize_order(session, order)


@router.post("/{order_id}/cancel", response_model=CancelOrderResponse)
def cancel_my_order(
    order_id: int,
    data: CancelOrderRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notifier: Notifier = Depends(get_notifier),
):
    order = session.get(Order, order_id)
    if not order:
        raise HTTPException(404, "Order not found")
    if order.user_id != current_user.id and current_user.role != "admin":
        raise HTTPException(403, "You can only cancel your own orders")

    try:
        order = cancel_order(
            session,
            order=order,
            actor=current_user,
            gateway=gateway,
            reason=data.reason,
        )
    except OrderStateError as e:
        raise HTTPException(400, str(e))

    fee = cancellation_fee(order)
    customer = session.get(User, order.user_id)
    notifier.notify(
        OrderEvent.ORDER_CANCELLED,
        order=order,
        user=customer,
        extra={
            "popup_message": "Your order has been cancelled.",
            "user_title": f"Order #{order.id} cancelled",
            "user_content": data.reason or "Your order has been cancelled.",
            "admin_title": "Order cancelled",
            "admin_content": f"Order #{order.id} cancelled by {current_user.email}",
            "user_template": "user_emails/order_cancelled.html",
            "user_subject": f"Order #{order.id} cancelled",
            "admin_template": "admin_emails/order_cancelled.html",
            "admin_subject": f"Order #{order.id} cancelled",
            "context": {"reason": data.reason, "cancellation_fee": fee},
        },
    )

    return CancelOrderResponse(
        message="Order cancelled",
        order_id=order.id,
        status=order.status,
        cancellation_fee=fee,
        refund=_refund_out(order),
    )


@router.post("/{order_id}/refund/refresh")
def refresh_order_refund(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notifier: Notifier = Depends(get_notifier),
):
    order = session.get(Order, order_id)
    if not order:
        raise HTTPException(404, "Order not found")
    if order.user_id != current_user.id and current_user.role != "admin":
        raise HTTPException(403, "Not authorized")

    was_processed = order.refund_status == RefundStatus.PROCESSED
    try:
        order = refresh_refund(session, order=order, gateway=gateway)
    except OrderStateError as e:
        raise HTTPException(400, str(e))
    except PaymentGatewayError as e:
        raise HTTPException(502, str(e))

    if not was_processed and order.refund_status == RefundStatus.PROCESSED:
        notifier.notify(
            OrderEvent.REFUND_PROCESSED,
            order=order,
            user=session.get(User, order.user_id),
            extra={
                "user_title": f"Refund for order #{order.id} processed",
                "user_content": f"₹{order.refund_amount} is on its way to your account.",
                "admin_title": "Refund processed",
                "admin_content": f"Refund {order.refund_id} for order #{order.id} processed",
                "user_template": "user_emails/refund_processed.html",
                "user_subject": f"Refund processed – Order #{order.id}",
            },
        )

    return {"order_id": order.id, "refund": _refund_out(order)}


@admin_router.patch("/{order_id}/status")
def change_order_status(
    order_id: int,
    data: StatusUpdateRequest,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
    notifier: Notifier = Depends(get_notifier),
):
    order = session.get(Order, order_id)
    if not order:
        raise HTTPException(404, "Order not found")

    try:
        order = update_order_status(
            session,
            order=order,
            new_status=data.status,
            admin=admin,
            notifier=notifier,
            note=data.note,
        )
    except OrderStateError as e:
        raise HTTPException(400, str(e))

    return {"message": "Order status updated", "order_id": order.id, "status": order.status}
