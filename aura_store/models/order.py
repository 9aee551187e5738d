from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from aura_store.models.order_item import OrderItem


class PaymentMode:
    COD = "cod"
    ONLINE = "online"
    WALLET = "wallet"


class RefundStatus:
    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"


class Order(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    address_id: int = Field(foreign_key="address.id")
    shipping_pincode: str

    # breakdown snapshot, rupees
    original_total: Decimal = Field(max_digits=10, decimal_places=2)
    product_total: Decimal = Field(max_digits=10, decimal_places=2)
    offer_discount: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    discount_amount: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    delivery_charge: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    wallet_used: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    total_amount: Decimal = Field(max_digits=10, decimal_places=2)   # before wallet
    payable_amount: Decimal = Field(max_digits=10, decimal_places=2)  # charged to gateway / collected on delivery
    applied_offers: Optional[list] = Field(default=None, sa_column=Column(JSON))

    coupon_id: Optional[int] = Field(default=None, foreign_key="coupon.id")
    coupon_code: Optional[str] = None

    payment_mode: str = Field(default=PaymentMode.ONLINE)
    payment_status: str = Field(default="pending")   # pending | paid | refunded
    status: str = Field(default="Order Placed", index=True)
    gateway_order_id: Optional[str] = Field(default=None, index=True)

    # refund sub-record
    refund_id: Optional[str] = None
    refund_status: Optional[str] = None
    refund_amount: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    refund_wallet_amount: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    refund_speed: Optional[str] = None
    refund_initiated_at: Optional[datetime] = None
    refund_completed_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None

    items: List["OrderItem"] = Relationship(back_populates="order")
