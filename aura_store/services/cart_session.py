from typing import List, Protocol, Sequence

from fastapi import Depends
from sqlalchemy import delete
from sqlmodel import Session, select

from aura_store.database import get_session
from aura_store.models.cart import CartItem
from aura_store.schemas.checkout_schemas import CartItemIn


class CartSessionStore(Protocol):
    def load(self, user_id: int) -> List[CartItemIn]:
        ...

    def save(self, user_id: int, items: Sequence[CartItemIn]) -> None:
        ...

    def clear(self, user_id: int) -> None:
        ...


class DbCartSessionStore:
    """Keeps a signed-in user's cart in the ``cartitem`` table."""

    def __init__(self, session: Session):
        self.session = session

    def load(self, user_id: int) -> List[CartItemIn]:
        rows = self.session.exec(
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.id)
        ).all()
        return [
            CartItemIn(
                variant_id=row.variant_id,
                product_id=row.product_id,
                quantity=row.quantity,
                bundle_variant_ids=row.bundle_variant_ids,
            )
            for row in rows
        ]

    def save(self, user_id: int, items: Sequence[CartItemIn]) -> None:
        self._delete(user_id)
        for item in items:
            self.session.add(
                CartItem(
                    user_id=user_id,
                    product_id=item.product_id,
                    variant_id=item.variant_id,
                    quantity=item.quantity,
                    bundle_variant_ids=item.bundle_variant_ids,
                )
            )
        self.session.commit()

    def clear(self, user_id: int) -> None:
        self._delete(user_id)
        self.session.commit()

    def _delete(self, user_id: int):
        self.session.execute(delete(CartItem).where(CartItem.user_id == user_id))


def get_cart_store(session: Session = Depends(get_session)) -> CartSessionStore:
    return DbCartSessionStore(session)
