from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class WalletTransaction(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    order_id: Optional[int] = Field(default=None, foreign_key="order.id")

    # positive = credit, negative = debit
    amount: Decimal = Field(max_digits=10, decimal_places=2)
    reason: str
    balance_after: Decimal = Field(max_digits=10, decimal_places=2)

    created_at: datetime = Field(default_factory=datetime.utcnow)
