import logging
from datetime import datetime
from typing import List

from sqlalchemy import update
from sqlmodel import Session, select

from aura_store.models.coupon import Coupon, CouponUsage
from aura_store.models.user import User
from aura_store.pricing import ManualCoupon, promotion_from_record
from aura_store.pricing.eligibility import check_coupon_rules
from aura_store.services.pricing_service import load_user_history

logger = logging.getLogger(__name__)


def get_coupon_by_code(session: Session, code: str):
    return session.exec(
        select(Coupon)
        .where(Coupon.code == code.strip().upper())
        .where(Coupon.is_automatic == False)  # noqa: E712
        .where(Coupon.is_active == True)  # noqa: E712
    ).first()


def claim_coupon_usage(session: Session, coupon: Coupon, user_id: int) -> bool:
    """
    Atomically takes one usage slot for ``user_id``.

    The conditional UPDATE only matches while ``used_count`` is below the
    cap, so two concurrent checkouts cannot both take the last slot.
    """
    usage = session.exec(
        select(CouponUsage)
        .where(CouponUsage.coupon_id == coupon.id)
        .where(CouponUsage.user_id == user_id)
    ).first()
    if usage is None:
        session.add(CouponUsage(coupon_id=coupon.id, user_id=user_id, used_count=0))
        session.flush()

    statement = (
        update(CouponUsage)
        .where(CouponUsage.coupon_id == coupon.id)
        .where(CouponUsage.user_id == user_id)
        .values(used_count=CouponUsage.used_count + 1, updated_at=datetime.utcnow())
    )
    if coupon.max_usage_per_user is not None:
        statement = statement.where(CouponUsage.used_count < coupon.max_usage_per_user)

    result = session.execute(statement.execution_options(synchronize_session=False))
    claimed = result.rowcount == 1
    if not claimed:
        logger.info(f"Coupon {coupon.code} usage cap reached for user {user_id}")
    return claimed


def release_coupon_usage(session: Session, coupon_id: int, user_id: int):
    session.execute(
        update(CouponUsage)
        .where(CouponUsage.coupon_id == coupon_id)
        .where(CouponUsage.user_id == user_id)
        .where(CouponUsage.used_count > 0)
        .values(used_count=CouponUsage.used_count - 1, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )


def validate_coupon_for_user(session: Session, user: User, code: str, now: datetime | None = None):
    """Cart-independent validation used by the coupon entry box."""
    coupon = get_coupon_by_code(session, code)
    if coupon is None:
        return None, "Invalid coupon code"

    promotion = promotion_from_record(coupon)
    if not isinstance(promotion, ManualCoupon):
        return None, "Invalid coupon code"

    reason = check_coupon_rules(promotion, load_user_history(session, user), now or datetime.utcnow())
    if reason:
        return None, reason
    return coupon, None


def available_coupons(session: Session, user: User, now: datetime | None = None) -> List[Coupon]:
    now = now or datetime.utcnow()
    history = load_user_history(session, user)
    coupons = session.exec(
        select(Coupon)
        .where(Coupon.is_automatic == False)  # noqa: E712
        .where(Coupon.is_active == True)  # noqa: E712
        .order_by(Coupon.created_at.desc())
    ).all()
    return [
        c for c in coupons
        if check_coupon_rules(promotion_from_record(c), history, now) is None
    ]
