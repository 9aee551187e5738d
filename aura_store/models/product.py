from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional
from datetime import datetime
from decimal import Decimal


class Product(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    slug: str = Field(index=True, unique=True)
    category: str = Field(index=True)   # e.g. "Template", "Attar", "Combo"
    image_url: Optional[str] = None
    is_bundle: bool = Field(default=False)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    variants: List["ProductVariant"] = Relationship(back_populates="product")


class ProductVariant(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="product.id", index=True)

    size: int                     # millilitres
    price: Decimal = Field(max_digits=10, decimal_places=2)     # selling price
    mrp: Decimal = Field(max_digits=10, decimal_places=2)
    stock: int = Field(default=0)

    product: Optional[Product] = Relationship(back_populates="variants")
