import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from aura_store.config import settings
from aura_store.constants.order_status import CANCELLED
from aura_store.database import get_session
from aura_store.models.address import Address
from aura_store.models.order import Order
from aura_store.models.user import User
from aura_store.notifications import Notifier, OrderEvent, get_notifier
from aura_store.pricing import CheckoutError, MissingPincodeError
from aura_store.schemas.checkout_schemas import (
    BreakdownRequest,
    BreakdownResponse,
    CreateOrderRequest,
    CreateOrderResponse,
    PriceBreakdownOut,
    RazorpayOrderOut,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from aura_store.services.cart_session import CartSessionStore, get_cart_store
from aura_store.services.order_cancellation import refund_late_payment
from aura_store.services.order_service import (
    OrderStateError,
    confirm_online_payment,
    place_order,
)
from aura_store.services.payment_service import (
    PaymentGateway,
    PaymentGatewayError,
    get_payment_gateway,
)
from aura_store.services.pricing_service import price_cart
from aura_store.utils.token import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/breakdown", response_model=BreakdownResponse, response_model_by_alias=True)
def checkout_breakdown(
    data: BreakdownRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Prices the submitted cart. Coupon rejections come back in ``couponMessage``."""
    _, outcome = price_cart(
        session,
        user=current_user,
        items=data.cart_items,
        coupon_code=data.coupon_code,
        pincode=data.pincode,
        use_wallet=data.use_wallet,
    )
    return BreakdownResponse(
        breakdown=PriceBreakdownOut.from_breakdown(outcome.breakdown),
        coupon_message=outcome.coupon_message,
    )


@router.post("/createOrder", response_model=CreateOrderResponse, response_model_by_alias=True)
def create_order(
    data: CreateOrderRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notifier: Notifier = Depends(get_notifier),
    cart_store: CartSessionStore = Depends(get_cart_store),
):
    address = session.get(Address, data.address_id)
    if not address or address.user_id != current_user.id:
        raise MissingPincodeError()

    lines, outcome = price_cart(
        session,
        user=current_user,
        items=data.cart_items,
        coupon_code=data.coupon_code,
        pincode=address.postal_code,
        use_wallet=data.use_wallet,
    )
    try:
        placed = place_order(
            session,
            user=current_user,
            address=address,
            lines=lines,
            outcome=outcome,
            payment_mode=data.payment_mode,
            gateway=gateway,
        )
    except PaymentGatewayError as e:
        raise HTTPException(status_code=502, detail=str(e))

    order = placed.order
    cart_store.clear(current_user.id)

    razorpay_details = None
    popup = None
    if placed.gateway_order is not None:
        razorpay_details = RazorpayOrderOut(
            razorpay_order_id=placed.gateway_order["id"],
            razorpay_key=gateway.key_id,
            amount=placed.gateway_order["amount"],
            currency=placed.gateway_order.get("currency", settings.CURRENCY),
        )
    else:
        popup = notifier.notify(
            OrderEvent.ORDER_PLACED,
            order=order,
            user=current_user,
            extra=_placed_extra(order, current_user),
        )

    return CreateOrderResponse(
        order_id=order.id,
        status=order.status,
        payment_mode=order.payment_mode,
        breakdown=PriceBreakdownOut.from_breakdown(outcome.breakdown),
        coupon_message=outcome.coupon_message,
        razorpay=razorpay_details,
        popup=popup,
    )


@router.post("/verify", response_model=VerifyPaymentResponse, response_model_by_alias=True)
def verify_payment(
    data: VerifyPaymentRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notifier: Notifier = Depends(get_notifier),
):
    order = session.get(Order, data.order_id)
    if not order or order.user_id != current_user.id:
        raise HTTPException(status_code=404, detail="Order not found")

    if order.status == CANCELLED:
        try:
            order = refund_late_payment(
                session,
                order=order,
                gateway_order_id=data.razorpay_order_id,
                payment_id=data.razorpay_payment_id,
                signature=data.razorpay_signature,
                gateway=gateway,
            )
        except OrderStateError as e:
            raise CheckoutError(str(e))
        return VerifyPaymentResponse(
            order_id=order.id,
            status=order.status,
            txn_id=data.razorpay_payment_id,
            popup={
                "type": "info",
                "message": "This order was cancelled before your payment completed. "
                           "The full amount is being refunded.",
            },
        )

    already_paid = order.payment_status == "paid"
    try:
        order = confirm_online_payment(
            session,
            order=order,
            gateway_order_id=data.razorpay_order_id,
            payment_id=data.razorpay_payment_id,
            signature=data.razorpay_signature,
            gateway=gateway,
        )
    except OrderStateError as e:
        raise CheckoutError(str(e))

    popup = None
    if not already_paid:
        popup = notifier.notify(
            OrderEvent.PAYMENT_SUCCESS,
            order=order,
            user=current_user,
            extra={
                **_placed_extra(order, current_user),
                "popup_message": "Payment successful! Your order has been placed.",
                "user_subject": f"Payment received – Order #{order.id}",
                "user_template": "user_emails/payment_success.html",
                "context": {"txn_id": data.razorpay_payment_id},
            },
        )

    return VerifyPaymentResponse(
        order_id=order.id,
        status=order.status,
        txn_id=data.razorpay_payment_id,
        popup=popup,
    )


def _placed_extra(order: Order, user: User) -> dict:
    return {
        "popup_message": "Order placed successfully!",
        "admin_title": "New order",
        "admin_content": f"Order #{order.id} placed by {user.email} for ₹{order.total_amount}",
        "user_template": "user_emails/order_placed.html",
        "user_subject": f"Order confirmed – #{order.id}",
        "admin_template": "admin_emails/new_order.html",
        "admin_subject": f"New order #{order.id}",
    }
