from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class Payment(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    order_id: int = Field(index=True)
    user_id: int = Field(index=True)

    txn_id: Optional[str] = Field(default=None, index=True, unique=True)
    gateway_order_id: Optional[str] = None

    amount: Decimal = Field(max_digits=10, decimal_places=2)
    status: str  # success | refund_pending | refunded | failed
    method: str  # razorpay
    created_at: datetime = Field(default_factory=datetime.utcnow)
