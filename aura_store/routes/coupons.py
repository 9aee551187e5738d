import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete
from sqlmodel import Session, select

from aura_store.database import get_session
from aura_store.dependencies.admin import require_admin
from aura_store.models.coupon import Coupon, CouponUsage
from aura_store.models.order import Order
from aura_store.models.user import User
from aura_store.schemas.coupon_schemas import (
    CouponCreate,
    CouponRead,
    CouponUpdate,
    CouponValidateRequest,
    CouponValidateResponse,
)
from aura_store.services.coupon_service import available_coupons, validate_coupon_for_user
from aura_store.utils.token import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[CouponRead])
def list_coupons(
    automatic: bool | None = None,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    query = select(Coupon).order_by(Coupon.created_at.desc())
    if automatic is not None:
        query = query.where(Coupon.is_automatic == automatic)
    return session.exec(query).all()


@router.post("", response_model=CouponRead, status_code=status.HTTP_201_CREATED)
def create_coupon(
    data: CouponCreate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    existing = session.exec(select(Coupon).where(Coupon.code == data.code)).first()
    if existing:
        raise HTTPException(400, "Coupon code already exists")

    coupon = Coupon(**data.model_dump())
    session.add(coupon)
    session.commit()
    session.refresh(coupon)
    logger.info(f"Coupon {coupon.code} created by {admin.email}")
    return coupon


@router.put("/{coupon_id}", response_model=CouponRead)
def update_coupon(
    coupon_id: int,
    data: CouponUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    coupon = session.get(Coupon, coupon_id)
    if not coupon:
        raise HTTPException(404, "Coupon not found")

    clash = session.exec(
        select(Coupon).where(Coupon.code == data.code).where(Coupon.id != coupon_id)
    ).first()
    if clash:
        raise HTTPException(400, "Coupon code already exists")

    for field, value in data.model_dump().items():
        setattr(coupon, field, value)
    coupon.updated_at = datetime.utcnow()

    session.add(coupon)
    session.commit()
    session.refresh(coupon)
    logger.info(f"Coupon {coupon.code} updated by {admin.email}")
    return coupon


@router.delete("/{coupon_id}")
def delete_coupon(
    coupon_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    coupon = session.get(Coupon, coupon_id)
    if not coupon:
        raise HTTPException(404, "Coupon not found")

    used = session.exec(select(Order.id).where(Order.coupon_id == coupon_id)).first()
    if used is not None:
        # orders keep pointing at the coupon, so it is only switched off
        coupon.is_active = False
        coupon.updated_at = datetime.utcnow()
        session.add(coupon)
        session.commit()
        logger.info(f"Coupon {coupon.code} deactivated by {admin.email}")
        return {"message": "Coupon is referenced by orders and has been deactivated"}

    session.execute(delete(CouponUsage).where(CouponUsage.coupon_id == coupon_id))
    session.delete(coupon)
    session.commit()
    logger.info(f"Coupon {coupon.code} deleted by {admin.email}")
    return {"message": "Coupon deleted successfully"}


@router.post("/validate", response_model=CouponValidateResponse)
def validate_coupon(
    data: CouponValidateRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Checks a code without a cart. Cart thresholds are enforced at breakdown time."""
    coupon, reason = validate_coupon_for_user(session, current_user, data.code)
    if coupon is None:
        return CouponValidateResponse(valid=False, message=reason)

    return CouponValidateResponse(
        valid=True,
        code=coupon.code,
        discount_type=coupon.discount_type,
        discount_value=coupon.discount_value,
        max_discount_amount=coupon.max_discount_amount,
        min_order_value=coupon.min_order_value,
        description=coupon.description,
    )


@router.get("/available", response_model=List[CouponRead])
def list_available_coupons(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return available_coupons(session, current_user)
