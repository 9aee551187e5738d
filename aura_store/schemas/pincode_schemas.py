from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal


class PincodeIn(BaseModel):
    pincode: str = Field(pattern=r"^\d{6}$")
    city: str
    state: str
    cod_available: bool = True
    delivery_charge: Optional[Decimal] = Field(default=None, ge=0)
    is_active: bool = True


class PincodeBatchRequest(BaseModel):
    pincodes: List[PincodeIn] = Field(min_length=1)


class PincodeUpdate(BaseModel):
    city: Optional[str] = None
    state: Optional[str] = None
    cod_available: Optional[bool] = None
    delivery_charge: Optional[Decimal] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class PincodeCheckResponse(BaseModel):
    pincode: str
    serviceable: bool
    cod_available: bool
    city: Optional[str] = None
    state: Optional[str] = None
