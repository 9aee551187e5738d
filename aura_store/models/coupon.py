from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from typing import Optional
from datetime import datetime
from decimal import Decimal


class DiscountType:
    PERCENT = "percent"
    FLAT = "flat"
    FREE_ITEM = "free_item"

    ALL = (PERCENT, FLAT, FREE_ITEM)


class Coupon(SQLModel, table=True):
    """
    One row per promotion.

    Manual coupons are matched on ``code``; automatic promotions use ``code``
    as their internal name and carry the ``cond_*`` / ``action_*`` columns.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(index=True, unique=True)
    description: str = ""
    is_automatic: bool = Field(default=False, index=True)

    discount_type: str = Field(default=DiscountType.PERCENT)
    discount_value: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    max_discount_amount: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)

    min_order_value: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    min_item_count: int = 0
    first_order_only: bool = False
    max_usage_per_user: Optional[int] = None

    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None

    target_user_id: Optional[int] = Field(default=None, foreign_key="user.id")

    # automatic promotions only
    cond_required_category: Optional[str] = None
    cond_required_size: Optional[int] = None
    action_target_size: Optional[int] = None
    action_target_max_price: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    action_buy_x: Optional[int] = None
    action_get_y: Optional[int] = None

    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class CouponUsage(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("coupon_id", "user_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    coupon_id: int = Field(foreign_key="coupon.id", index=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    used_count: int = Field(default=0)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
