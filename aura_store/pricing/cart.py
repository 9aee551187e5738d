from dataclasses import dataclass, field
from typing import Sequence, Tuple

from aura_store.pricing.errors import EmptyCartError, InvalidCartItemError


@dataclass(frozen=True)
class CartLine:
    product_id: int
    variant_id: int
    name: str
    category: str
    size: int
    quantity: int
    unit_price: int       # paise
    unit_mrp: int         # paise
    bundle_variant_ids: Tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.quantity < 1:
            raise InvalidCartItemError(f"Invalid quantity for {self.name}")
        if self.unit_price < 0 or self.unit_mrp < 0:
            raise InvalidCartItemError(f"Invalid price for {self.name}")

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity

    @property
    def line_mrp(self) -> int:
        return self.unit_mrp * self.quantity


def ensure_not_empty(cart: Sequence[CartLine]):
    if not cart:
        raise EmptyCartError()


def product_total(cart: Sequence[CartLine]) -> int:
    return sum(line.line_total for line in cart)


def original_total(cart: Sequence[CartLine]) -> int:
    # MRP below the selling price is treated as the selling price
    return sum(max(line.unit_mrp, line.unit_price) * line.quantity for line in cart)


def item_count(cart: Sequence[CartLine]) -> int:
    return sum(line.quantity for line in cart)
