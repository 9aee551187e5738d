from datetime import datetime, timedelta
from typing import Optional

from aura_store.models.coupon import DiscountType
from aura_store.pricing import (
    AutomaticPromotion,
    CartLine,
    ManualCoupon,
    PincodeInfo,
    PricingRules,
    UserHistory,
)
from aura_store.pricing.promotions import Window

NOW = datetime(2026, 3, 1, 12, 0, 0)
RULES = PricingRules(free_shipping_threshold=99_900, standard_delivery_charge=5_000)

_next_variant = iter(range(1, 10_000))


def line(price, qty=1, *, size=30, category="Template", mrp=None, name="Oud Noir", variant_id=None):
    """Cart line with rupee prices."""
    return CartLine(
        product_id=1,
        variant_id=variant_id or next(_next_variant),
        name=name,
        category=category,
        size=size,
        quantity=qty,
        unit_price=price * 100,
        unit_mrp=(mrp if mrp is not None else price) * 100,
    )


def manual(code="SAVE20", discount_type=DiscountType.PERCENT, value="20", *, cap=None,
           min_order=0, min_items=0, first_order_only=False, max_usage=None,
           valid_from=None, valid_until=None, target_user_id=None, id=101) -> ManualCoupon:
    return ManualCoupon(
        id=id,
        code=code,
        discount_type=discount_type,
        discount_value=value,
        max_discount=cap * 100 if cap is not None else None,
        min_order_value=min_order * 100,
        min_item_count=min_items,
        first_order_only=first_order_only,
        max_usage_per_user=max_usage,
        window=Window(valid_from, valid_until),
        target_user_id=target_user_id,
    )


def automatic(id=1, discount_type=DiscountType.FREE_ITEM, value="0", *, name="AUTO",
              cap=None, min_order=0, min_items=0, category=None, size=None,
              target_size=None, target_max_price=None, buy_x=None, get_y=None,
              description="", valid_from=None, valid_until=None) -> AutomaticPromotion:
    return AutomaticPromotion(
        id=id,
        name=name,
        discount_type=discount_type,
        discount_value=value,
        max_discount=cap * 100 if cap is not None else None,
        min_order_value=min_order * 100,
        min_item_count=min_items,
        window=Window(valid_from, valid_until),
        required_category=category,
        required_size=size,
        target_size=target_size,
        target_max_price=target_max_price * 100 if target_max_price is not None else None,
        buy_x=buy_x,
        get_y=get_y,
        description=description,
    )


def history(prior_orders=0, usage=None, user_id=7) -> UserHistory:
    return UserHistory(user_id=user_id, prior_order_count=prior_orders, coupon_usage=usage or {})


def lookup_from(table: dict):
    def lookup(pincode: str) -> Optional[PincodeInfo]:
        return table.get(pincode)
    return lookup


COD_PINCODES = lookup_from({
    "560001": PincodeInfo("560001", cod_available=True),
    "110001": PincodeInfo("110001", cod_available=False),
    "400001": PincodeInfo("400001", cod_available=True, delivery_charge=8_000),
})


def yesterday():
    return NOW - timedelta(days=1)


def tomorrow():
    return NOW + timedelta(days=1)
