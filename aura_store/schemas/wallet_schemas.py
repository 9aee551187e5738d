from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal


class WalletTransactionOut(BaseModel):
    id: int
    amount: Decimal
    reason: str
    order_id: Optional[int] = None
    balance_after: Decimal
    created_at: datetime


class WalletOut(BaseModel):
    wallet_balance: Decimal
    transactions: List[WalletTransactionOut]


class WalletCreditRequest(BaseModel):
    amount: Decimal = Field(gt=0)
    reason: str = "Store credit"
