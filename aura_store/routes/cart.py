from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from aura_store.database import get_session
from aura_store.models.user import User
from aura_store.schemas.checkout_schemas import CartItemIn
from aura_store.services.cart_session import CartSessionStore, get_cart_store
from aura_store.services.pricing_service import load_cart_lines
from aura_store.utils.token import get_current_user

router = APIRouter()


@router.get("", response_model=List[CartItemIn], response_model_by_alias=True)
def get_cart(
    store: CartSessionStore = Depends(get_cart_store),
    current_user: User = Depends(get_current_user)
):
    return store.load(current_user.id)


@router.put("", response_model=List[CartItemIn], response_model_by_alias=True)
def replace_cart(
    items: List[CartItemIn],
    session: Session = Depends(get_session),
    store: CartSessionStore = Depends(get_cart_store),
    current_user: User = Depends(get_current_user)
):
    # rejects unknown or mismatched variants before anything is stored
    load_cart_lines(session, items)
    store.save(current_user.id, items)
    return store.load(current_user.id)


@router.delete("")
def clear_cart(
    store: CartSessionStore = Depends(get_cart_store),
    current_user: User = Depends(get_current_user)
):
    store.clear(current_user.id)
    return {"message": "Cart cleared"}
