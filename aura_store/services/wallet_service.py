import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session, select

from aura_store.models.user import User
from aura_store.models.wallet import WalletTransaction

logger = logging.getLogger(__name__)


class InsufficientWalletBalance(Exception):
    pass


def _current_balance(session: Session, user_id: int) -> Decimal:
    balance = session.exec(select(User.wallet_balance).where(User.id == user_id)).one()
    user = session.get(User, user_id)
    if user is not None:
        session.expire(user, ["wallet_balance"])
    return balance


def debit_wallet(
    session: Session,
    *,
    user_id: int,
    amount: Decimal,
    reason: str,
    order_id: Optional[int] = None,
) -> WalletTransaction:
    """Conditional debit: never takes the balance below zero."""
    result = session.execute(
        update(User)
        .where(User.id == user_id)
        .where(User.wallet_balance >= amount)
        .values(wallet_balance=User.wallet_balance - amount)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InsufficientWalletBalance("Wallet balance is lower than the amount requested")

    txn = WalletTransaction(
        user_id=user_id,
        order_id=order_id,
        amount=-amount,
        reason=reason,
        balance_after=_current_balance(session, user_id),
    )
    session.add(txn)
    session.flush()
    logger.info(f"Debited {amount} from wallet of user {user_id} ({reason})")
    return txn


def credit_wallet(
    session: Session,
    *,
    user_id: int,
    amount: Decimal,
    reason: str,
    order_id: Optional[int] = None,
) -> WalletTransaction:
    session.execute(
        update(User)
        .where(User.id == user_id)
        .values(wallet_balance=User.wallet_balance + amount)
        .execution_options(synchronize_session=False)
    )
    txn = WalletTransaction(
        user_id=user_id,
        order_id=order_id,
        amount=amount,
        reason=reason,
        balance_after=_current_balance(session, user_id),
    )
    session.add(txn)
    session.flush()
    logger.info(f"Credited {amount} to wallet of user {user_id} ({reason})")
    return txn
