from pydantic import BaseModel, Field

class AddressCreate(BaseModel):
    full_name: str
    phone_number: str
    address_line: str
    city: str
    state: str
    postal_code: str = Field(pattern=r"^\d{6}$")
