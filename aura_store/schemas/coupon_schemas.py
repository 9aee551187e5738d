from pydantic import BaseModel, field_validator, model_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal

from aura_store.models.coupon import DiscountType


class CouponBase(BaseModel):
    code: str
    description: str = ""
    is_automatic: bool = False
    discount_type: str = DiscountType.PERCENT
    discount_value: Decimal = Decimal("0")
    max_discount_amount: Optional[Decimal] = None
    min_order_value: Decimal = Decimal("0")
    min_item_count: int = 0
    first_order_only: bool = False
    max_usage_per_user: Optional[int] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    target_user_id: Optional[int] = None

    cond_required_category: Optional[str] = None
    cond_required_size: Optional[int] = None
    action_target_size: Optional[int] = None
    action_target_max_price: Optional[Decimal] = None
    action_buy_x: Optional[int] = None
    action_get_y: Optional[int] = None

    is_active: bool = True

    @field_validator("code")
    @classmethod
    def normalise_code(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("Code is required")
        return value

    @model_validator(mode="after")
    def check_discount_semantics(self):
        if self.discount_type not in DiscountType.ALL:
            raise ValueError(f"discount_type must be one of {', '.join(DiscountType.ALL)}")
        if self.discount_value < 0 or self.min_order_value < 0 or self.min_item_count < 0:
            raise ValueError("Amounts and counts must not be negative")
        if self.discount_type == DiscountType.PERCENT and self.discount_value > 100:
            raise ValueError("Percent discount cannot exceed 100")
        if self.discount_type != DiscountType.PERCENT and self.max_discount_amount is not None:
            raise ValueError("max_discount_amount only applies to percent discounts")
        if self.discount_type == DiscountType.FREE_ITEM and not self.is_automatic:
            raise ValueError("Free item rewards are only available on automatic promotions")
        if (self.action_buy_x is None) != (self.action_get_y is None):
            raise ValueError("action_buy_x and action_get_y must be set together")
        if self.action_buy_x is not None and (self.action_buy_x < 1 or self.action_get_y < 1):
            raise ValueError("Buy X / Get Y quantities must be positive")
        if self.max_usage_per_user is not None and self.max_usage_per_user < 1:
            raise ValueError("max_usage_per_user must be at least 1")
        if self.valid_from and self.valid_until and self.valid_from > self.valid_until:
            raise ValueError("valid_from must be before valid_until")
        return self


class CouponCreate(CouponBase):
    pass


class CouponUpdate(CouponBase):
    pass


class CouponRead(CouponBase):
    id: int
    created_at: datetime
    updated_at: datetime


class CouponValidateRequest(BaseModel):
    code: str


class CouponValidateResponse(BaseModel):
    valid: bool
    code: Optional[str] = None
    discount_type: Optional[str] = None
    discount_value: Optional[Decimal] = None
    max_discount_amount: Optional[Decimal] = None
    min_order_value: Optional[Decimal] = None
    description: Optional[str] = None
    message: Optional[str] = None
