from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON
from typing import List, Optional, TYPE_CHECKING
from decimal import Decimal

if TYPE_CHECKING:
    from aura_store.models.order import Order

class OrderItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="order.id", index=True)
    product_id: int = Field(foreign_key="product.id")
    variant_id: int = Field(foreign_key="productvariant.id")

    name: str
    image_url: Optional[str] = None
    size: int
    price: Decimal = Field(max_digits=10, decimal_places=2)
    quantity: int
    free_units: int = 0
    bundle_variant_ids: Optional[List[int]] = Field(default=None, sa_column=Column(JSON))

    order: Optional["Order"] = Relationship(back_populates="items")
