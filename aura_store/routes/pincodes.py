import logging
from collections import defaultdict
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from aura_store.database import get_session
from aura_store.dependencies.admin import require_admin
from aura_store.models.pincode import ServiceablePincode
from aura_store.models.user import User
from aura_store.schemas.pincode_schemas import (
    PincodeBatchRequest,
    PincodeCheckResponse,
    PincodeUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _pincode_dict(row: ServiceablePincode) -> dict:
    return {
        "pincode": row.pincode,
        "city": row.city,
        "state": row.state,
        "cod_available": row.cod_available,
        "delivery_charge": row.delivery_charge,
        "is_active": row.is_active,
    }


@router.get("")
def list_pincodes(
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """All serviceable pincodes grouped as ``{state: {city: [pincode, ...]}}``."""
    rows = session.exec(
        select(ServiceablePincode).order_by(
            ServiceablePincode.state, ServiceablePincode.city, ServiceablePincode.pincode
        )
    ).all()

    grouped = defaultdict(lambda: defaultdict(list))
    for row in rows:
        grouped[row.state][row.city].append(_pincode_dict(row))

    return {
        "success": True,
        "data": {state: dict(cities) for state, cities in grouped.items()},
    }


@router.get("/check/{pincode}", response_model=PincodeCheckResponse)
def check_pincode(pincode: str, session: Session = Depends(get_session)):
    row = session.exec(
        select(ServiceablePincode)
        .where(ServiceablePincode.pincode == pincode)
        .where(ServiceablePincode.is_active == True)  # noqa: E712
    ).first()
    if row is None:
        return PincodeCheckResponse(pincode=pincode, serviceable=False, cod_available=False)

    return PincodeCheckResponse(
        pincode=row.pincode,
        serviceable=True,
        cod_available=row.cod_available,
        city=row.city,
        state=row.state,
    )


@router.post("/batch")
def upsert_pincodes(
    data: PincodeBatchRequest,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    created = updated = 0
    for item in data.pincodes:
        row = session.exec(
            select(ServiceablePincode).where(ServiceablePincode.pincode == item.pincode)
        ).first()
        if row is None:
            session.add(ServiceablePincode(**item.model_dump()))
            created += 1
            continue

        for field, value in item.model_dump().items():
            setattr(row, field, value)
        row.updated_at = datetime.utcnow()
        session.add(row)
        updated += 1

    session.commit()
    logger.info(f"Pincode batch by {admin.email}: {created} created, {updated} updated")
    return {"success": True, "created": created, "updated": updated}


@router.get("/{state}/{city}")
def city_pincodes(
    state: str,
    city: str,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    rows = session.exec(
        select(ServiceablePincode)
        .where(ServiceablePincode.state == state)
        .where(ServiceablePincode.city == city)
        .order_by(ServiceablePincode.pincode)
    ).all()
    return {"success": True, "data": [_pincode_dict(r) for r in rows]}


@router.put("/{pincode}")
def update_pincode(
    pincode: str,
    data: PincodeUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    row = session.exec(
        select(ServiceablePincode).where(ServiceablePincode.pincode == pincode)
    ).first()
    if row is None:
        raise HTTPException(404, "Pincode not found")

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(row, field, value)
    row.updated_at = datetime.utcnow()

    session.add(row)
    session.commit()
    session.refresh(row)
    return {"success": True, "data": _pincode_dict(row)}


@router.delete("/{pincode}")
def delete_pincode(
    pincode: str,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    row = session.exec(
        select(ServiceablePincode).where(ServiceablePincode.pincode == pincode)
    ).first()
    if row is None:
        raise HTTPException(404, "Pincode not found")

    session.delete(row)
    session.commit()
    logger.info(f"Pincode {pincode} removed by {admin.email}")
    return {"success": True, "message": "Pincode removed"}
