from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class ServiceablePincode(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    pincode: str = Field(index=True, unique=True)
    city: str = Field(index=True)
    state: str = Field(index=True)

    cod_available: bool = Field(default=True)
    # overrides STANDARD_DELIVERY_CHARGE when set
    delivery_charge: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    is_active: bool = Field(default=True)

    updated_at: datetime = Field(default_factory=datetime.utcnow)
