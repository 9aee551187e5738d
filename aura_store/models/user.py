from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    # subject id issued by the identity provider
    external_id: Optional[str] = Field(default=None, index=True)
    first_name: str
    last_name: str = ""
    email: str = Field(index=True)
    phone_number: Optional[str] = None
    role: str = Field(default="user")
    can_login: bool = Field(default=True)
    wallet_balance: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    created_at: datetime = Field(default_factory=datetime.utcnow)
