import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from aura_store.models.coupon import DiscountType
from aura_store.pricing.cart import CartLine, ensure_not_empty, item_count, product_total
from aura_store.pricing.money import format_rupees
from aura_store.pricing.promotions import AutomaticPromotion, ManualCoupon, Promotion

logger = logging.getLogger(__name__)

INVALID_CODE = "Invalid coupon code"
NOT_STARTED = "Coupon is not active yet"
EXPIRED = "Coupon has expired"
FIRST_ORDER_ONLY = "This coupon is valid on your first order only"
USAGE_LIMIT_REACHED = "usage limit reached"
NOT_FOR_USER = "This coupon is not available for your account"


@dataclass(frozen=True)
class UserHistory:
    user_id: Optional[int]
    prior_order_count: int = 0               # non-cancelled orders
    coupon_usage: Dict[int, int] = field(default_factory=dict)

    def usage_of(self, coupon_id: int) -> int:
        return self.coupon_usage.get(coupon_id, 0)


@dataclass(frozen=True)
class EligibilityResult:
    manual_match: Optional[ManualCoupon]
    automatic_matches: List[AutomaticPromotion]
    rejection_reason: Optional[str] = None


def check_coupon_rules(coupon: ManualCoupon, history: UserHistory, now: datetime) -> Optional[str]:
    """Cart-independent checks. Returns a rejection reason or ``None``."""
    if coupon.window.not_started(now):
        return NOT_STARTED
    if coupon.window.expired(now):
        return EXPIRED
    if coupon.target_user_id is not None and coupon.target_user_id != history.user_id:
        return NOT_FOR_USER
    if coupon.first_order_only and history.prior_order_count > 0:
        return FIRST_ORDER_ONLY
    if (
        coupon.max_usage_per_user is not None
        and history.usage_of(coupon.id) >= coupon.max_usage_per_user
    ):
        return USAGE_LIMIT_REACHED
    return None


def check_cart_thresholds(promotion: Promotion, cart: Sequence[CartLine]) -> Optional[str]:
    if promotion.min_order_value and product_total(cart) < promotion.min_order_value:
        return f"This coupon requires a minimum order of ₹{format_rupees(promotion.min_order_value)}"
    if promotion.min_item_count and item_count(cart) < promotion.min_item_count:
        return f"This coupon requires at least {promotion.min_item_count} items"
    return None


def _trigger_matches(promotion: AutomaticPromotion, cart: Sequence[CartLine]) -> bool:
    if not promotion.has_trigger:
        return True
    return any(line_matches_trigger(promotion, line) for line in cart)


def line_matches_trigger(promotion: AutomaticPromotion, line: CartLine) -> bool:
    if (
        promotion.required_category
        and line.category.casefold() != promotion.required_category.casefold()
    ):
        return False
    if promotion.required_size is not None and line.size != promotion.required_size:
        return False
    return True


def automatic_is_eligible(promotion: AutomaticPromotion, cart: Sequence[CartLine],
                          history: UserHistory, now: datetime) -> bool:
    if not promotion.window.contains(now):
        return False
    if promotion.target_user_id is not None and promotion.target_user_id != history.user_id:
        return False
    if check_cart_thresholds(promotion, cart):
        return False
    return _trigger_matches(promotion, cart)


def filter_eligible(
    cart: Sequence[CartLine],
    promotions: Sequence[Promotion],
    history: UserHistory,
    coupon_code: Optional[str],
    now: Optional[datetime] = None,
) -> EligibilityResult:
    ensure_not_empty(cart)
    now = now or datetime.utcnow()

    automatic = [
        p for p in promotions
        if isinstance(p, AutomaticPromotion) and automatic_is_eligible(p, cart, history, now)
    ]
    automatic.sort(key=lambda p: p.id)

    if not coupon_code or not coupon_code.strip():
        return EligibilityResult(manual_match=None, automatic_matches=automatic)

    wanted = coupon_code.strip().casefold()
    coupon = next(
        (
            p for p in promotions
            if isinstance(p, ManualCoupon) and p.code.casefold() == wanted
        ),
        None,
    )

    if coupon is None:
        reason = INVALID_CODE
    elif coupon.discount_type not in (DiscountType.PERCENT, DiscountType.FLAT):
        reason = INVALID_CODE
    else:
        reason = check_coupon_rules(coupon, history, now) or check_cart_thresholds(coupon, cart)

    if reason:
        logger.info(f"Coupon {coupon_code!r} rejected for user {history.user_id}: {reason}")
        return EligibilityResult(manual_match=None, automatic_matches=automatic, rejection_reason=reason)

    return EligibilityResult(manual_match=coupon, automatic_matches=automatic)
