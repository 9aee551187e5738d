from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from decimal import Decimal


class StatusUpdateRequest(BaseModel):
    status: str
    note: Optional[str] = None


class CancelOrderRequest(BaseModel):
    reason: Optional[str] = None


class RefundOut(BaseModel):
    refund_id: Optional[str] = None
    status: Optional[str] = None
    amount: Optional[Decimal] = None
    wallet_amount: Optional[Decimal] = None
    speed: Optional[str] = None
    initiated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class CancelOrderResponse(BaseModel):
    message: str
    order_id: int
    status: str
    cancellation_fee: Decimal
    refund: Optional[RefundOut] = None
