import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlmodel import Session, select

from aura_store.config import settings
from aura_store.constants.order_status import CANCELLED, PAYMENT_PENDING
from aura_store.database import engine
from aura_store.models.order import Order
from aura_store.pricing.money import to_paise, to_rupees
from aura_store.services.coupon_service import release_coupon_usage
from aura_store.services.order_event_service import log_order_event
from aura_store.services.wallet_service import credit_wallet

logger = logging.getLogger(__name__)


def expire_unpaid_orders(session: Optional[Session] = None, now: Optional[datetime] = None) -> int:
    """
    Cancels online orders whose payment never completed, giving back the
    wallet share and the coupon slot they were holding.
    """
    if session is None:
        with Session(engine) as own_session:
            return expire_unpaid_orders(own_session, now)

    now = now or datetime.utcnow()
    cutoff = now - timedelta(minutes=settings.PAYMENT_EXPIRY_MINUTES)

    orders = session.exec(
        select(Order)
        .where(Order.status == PAYMENT_PENDING)
        .where(Order.created_at < cutoff)
    ).all()

    for order in orders:
        if order.coupon_id is not None:
            release_coupon_usage(session, order.coupon_id, order.user_id)
        if order.wallet_used and to_paise(order.wallet_used) > 0:
            credit_wallet(
                session,
                user_id=order.user_id,
                amount=to_rupees(to_paise(order.wallet_used)),
                reason=f"Payment window expired for order #{order.id}",
                order_id=order.id,
            )
        order.status = CANCELLED
        order.cancelled_at = now
        order.cancelled_by = "system"
        order.updated_at = now
        session.add(order)
        log_order_event(
            session,
            order.id,
            CANCELLED,
            title="Order Cancelled",
            description="Payment was not completed in time",
        )

    session.commit()
    logger.info(f"Expired {len(orders)} unpaid orders")
    return len(orders)


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    expire_unpaid_orders()
