from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from aura_store.database import get_session
from aura_store.models.address import Address
from aura_store.models.user import User
from aura_store.schemas.address_schemas import AddressCreate
from aura_store.utils.token import get_current_user

router = APIRouter()


@router.post("")
def add_address(
    data: AddressCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    address = Address(user_id=current_user.id, **data.model_dump())

    session.add(address)
    session.commit()
    session.refresh(address)

    return {"message": "Address saved", "address_id": address.id}


@router.get("")
def list_addresses(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    addresses = session.exec(
        select(Address)
        .where(Address.user_id == current_user.id)
        .order_by(Address.created_at.desc())
    ).all()

    return [
        {
            "id": a.id,
            "full_name": a.full_name,
            "phone_number": a.phone_number,
            "address_line": a.address_line,
            "city": a.city,
            "state": a.state,
            "postal_code": a.postal_code,
            "created_at": a.created_at,
        }
        for a in addresses
    ]
