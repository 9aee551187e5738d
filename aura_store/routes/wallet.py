import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from aura_store.database import get_session
from aura_store.dependencies.admin import require_admin
from aura_store.models.user import User
from aura_store.models.wallet import WalletTransaction
from aura_store.schemas.wallet_schemas import WalletCreditRequest, WalletOut, WalletTransactionOut
from aura_store.services.wallet_service import credit_wallet
from aura_store.utils.token import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()
admin_router = APIRouter()


def _wallet_out(session: Session, user: User) -> WalletOut:
    transactions = session.exec(
        select(WalletTransaction)
        .where(WalletTransaction.user_id == user.id)
        .order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc())
    ).all()
    return WalletOut(
        wallet_balance=user.wallet_balance,
        transactions=[WalletTransactionOut.model_validate(t, from_attributes=True) for t in transactions],
    )


@router.get("", response_model=WalletOut)
def my_wallet(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return _wallet_out(session, current_user)


@admin_router.post("/{user_id}/credit", response_model=WalletOut)
def credit_user_wallet(
    user_id: int,
    data: WalletCreditRequest,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(404, "User not found")

    credit_wallet(session, user_id=user.id, amount=data.amount, reason=data.reason)
    session.commit()
    session.refresh(user)
    logger.info(f"{admin.email} credited {data.amount} to wallet of user {user.id}")
    return _wallet_out(session, user)
