"""
Promotion variants.

A ``Coupon`` row is one flat record for both kinds of promotion. Pricing code
works on the two dataclasses below instead, so a manual coupon never carries
trigger/reward fields and an automatic promotion never carries a code the
customer types.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from aura_store.models.coupon import Coupon, DiscountType
from aura_store.pricing.money import to_paise


@dataclass(frozen=True)
class Window:
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None

    def not_started(self, now: datetime) -> bool:
        return self.valid_from is not None and now < self.valid_from

    def expired(self, now: datetime) -> bool:
        return self.valid_until is not None and now > self.valid_until

    def contains(self, now: datetime) -> bool:
        return not self.not_started(now) and not self.expired(now)


@dataclass(frozen=True)
class ManualCoupon:
    id: int
    code: str
    discount_type: str               # percent | flat
    discount_value: str              # percent, or rupees for flat
    max_discount: Optional[int]      # paise, percent only
    min_order_value: int             # paise
    min_item_count: int
    first_order_only: bool
    max_usage_per_user: Optional[int]
    window: Window
    target_user_id: Optional[int] = None
    description: str = ""

    @property
    def flat_amount(self) -> int:
        return to_paise(self.discount_value)


@dataclass(frozen=True)
class AutomaticPromotion:
    id: int
    name: str
    discount_type: str               # percent | flat | free_item
    discount_value: str
    max_discount: Optional[int]
    min_order_value: int
    min_item_count: int
    window: Window
    required_category: Optional[str] = None
    required_size: Optional[int] = None
    target_size: Optional[int] = None
    target_max_price: Optional[int] = None   # paise
    buy_x: Optional[int] = None
    get_y: Optional[int] = None
    target_user_id: Optional[int] = None
    description: str = ""

    @property
    def flat_amount(self) -> int:
        return to_paise(self.discount_value)

    @property
    def is_buy_x_get_y(self) -> bool:
        return bool(self.buy_x and self.get_y)

    @property
    def has_trigger(self) -> bool:
        return bool(self.required_category) or self.required_size is not None

    @property
    def has_reward_filter(self) -> bool:
        return self.target_size is not None or self.target_max_price is not None

    @property
    def title(self) -> str:
        return self.description or self.name


Promotion = Union[ManualCoupon, AutomaticPromotion]


def _optional_paise(value) -> Optional[int]:
    return to_paise(value) if value is not None else None


def promotion_from_record(coupon: Coupon) -> Promotion:
    window = Window(valid_from=coupon.valid_from, valid_until=coupon.valid_until)
    max_discount = (
        _optional_paise(coupon.max_discount_amount)
        if coupon.discount_type == DiscountType.PERCENT
        else None
    )

    if coupon.is_automatic:
        return AutomaticPromotion(
            id=coupon.id,
            name=coupon.code,
            discount_type=coupon.discount_type,
            discount_value=str(coupon.discount_value),
            max_discount=max_discount,
            min_order_value=to_paise(coupon.min_order_value or 0),
            min_item_count=coupon.min_item_count or 0,
            window=window,
            required_category=coupon.cond_required_category or None,
            required_size=coupon.cond_required_size,
            target_size=coupon.action_target_size,
            target_max_price=_optional_paise(coupon.action_target_max_price),
            buy_x=coupon.action_buy_x,
            get_y=coupon.action_get_y,
            target_user_id=coupon.target_user_id,
            description=coupon.description,
        )

    return ManualCoupon(
        id=coupon.id,
        code=coupon.code,
        discount_type=coupon.discount_type,
        discount_value=str(coupon.discount_value),
        max_discount=max_discount,
        min_order_value=to_paise(coupon.min_order_value or 0),
        min_item_count=coupon.min_item_count or 0,
        first_order_only=coupon.first_order_only,
        max_usage_per_user=coupon.max_usage_per_user,
        window=window,
        target_user_id=coupon.target_user_id,
        description=coupon.description,
    )
