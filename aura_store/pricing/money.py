"""
Money helpers.

Every amount inside the pricing package is an ``int`` number of paise.
Rupee ``Decimal`` values only appear at the edges (database rows and API
payloads).
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

PAISE_PER_RUPEE = 100

Number = Union[Decimal, int, float, str]


def to_paise(rupees: Number) -> int:
    amount = Decimal(str(rupees)) * PAISE_PER_RUPEE
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_rupees(paise: int) -> Decimal:
    return (Decimal(paise) / PAISE_PER_RUPEE).quantize(Decimal("0.01"))


def percent_of(paise: int, percent: Number) -> int:
    """``paise * percent / 100`` rounded half-up to a whole paisa."""
    share = Decimal(paise) * Decimal(str(percent)) / 100
    return int(share.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_rupees(paise: int) -> str:
    rupees = to_rupees(paise)
    if paise % PAISE_PER_RUPEE == 0:
        return f"{rupees:,.0f}"
    return f"{rupees:,.2f}"
