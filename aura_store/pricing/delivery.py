import logging
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PincodeInfo:
    pincode: str
    cod_available: bool
    delivery_charge: Optional[int] = None   # paise, overrides the standard fee


@dataclass(frozen=True)
class DeliveryQuote:
    delivery_charge: int
    cod_available: bool
    serviceable: bool


PincodeLookup = Callable[[str], Optional[PincodeInfo]]


def resolve_delivery(
    pincode: str,
    product_total: int,
    lookup: PincodeLookup,
    *,
    free_shipping_threshold: int,
    standard_charge: int,
) -> DeliveryQuote:
    """
    Unknown pincodes and lookup failures both fail closed: no COD and the
    standard fee.
    """
    try:
        info = lookup(pincode)
    except Exception as e:
        logger.warning(f"Pincode lookup failed for {pincode}: {e}")
        info = None

    charge = standard_charge
    if info is not None and info.delivery_charge is not None:
        charge = info.delivery_charge
    if product_total >= free_shipping_threshold:
        charge = 0

    return DeliveryQuote(
        delivery_charge=charge,
        cod_available=bool(info and info.cod_available),
        serviceable=info is not None,
    )
