import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from aura_store.models.coupon import DiscountType
from aura_store.pricing.cart import CartLine, product_total
from aura_store.pricing.eligibility import line_matches_trigger
from aura_store.pricing.money import percent_of
from aura_store.pricing.promotions import AutomaticPromotion, ManualCoupon

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppliedOffer:
    promotion_id: int
    title: str
    amount: int                        # paise
    variant_id: Optional[int] = None   # set for free-item grants
    free_units: int = 0


@dataclass(frozen=True)
class DiscountResult:
    discount_amount: int                      # manual coupon, paise
    applied_offers: Tuple[AppliedOffer, ...]
    # line index -> units granted free
    free_units: Dict[int, int] = field(default_factory=dict)

    @property
    def offer_discount(self) -> int:
        return sum(offer.amount for offer in self.applied_offers)


def clamp_discount(amount: int, base: int, label: str) -> int:
    if amount < 0:
        logger.error(f"Negative discount {amount} computed for {label}; using 0")
        return 0
    if amount > base:
        logger.error(f"Discount {amount} for {label} exceeds base {base}; clamping")
        return base
    return amount


def _value_discount(promotion, base: int) -> int:
    if promotion.discount_type == DiscountType.PERCENT:
        amount = percent_of(base, promotion.discount_value)
        if promotion.max_discount is not None:
            amount = min(amount, promotion.max_discount)
        return amount
    if promotion.discount_type == DiscountType.FLAT:
        return min(promotion.flat_amount, base)
    return 0


def _trigger_lines(promotion: AutomaticPromotion, cart: Sequence[CartLine]) -> List[int]:
    return [index for index, line in enumerate(cart) if line_matches_trigger(promotion, line)]


def _reward_candidates(promotion: AutomaticPromotion, cart: Sequence[CartLine]) -> List[int]:
    """
    Lines the reward may be taken from. Reward filters are independent of
    the trigger; a buy-X-get-Y offer without filters rewards the bought lines.
    """
    if promotion.is_buy_x_get_y and not promotion.has_reward_filter:
        return _trigger_lines(promotion, cart)

    indexes = []
    for index, line in enumerate(cart):
        if promotion.target_size is not None and line.size != promotion.target_size:
            continue
        if promotion.target_max_price is not None and line.unit_price > promotion.target_max_price:
            continue
        indexes.append(index)
    return indexes


def _grant_free_units(
    promotion: AutomaticPromotion,
    cart: Sequence[CartLine],
    free_units: Dict[int, int],
) -> List[Tuple[int, int]]:
    """Returns ``(line index, units)`` grants and records them in ``free_units``."""
    candidates = _reward_candidates(promotion, cart)
    if not candidates:
        return []

    def remaining(index: int) -> int:
        return cart[index].quantity - free_units.get(index, 0)

    if promotion.is_buy_x_get_y:
        qualifying = sum(cart[i].quantity for i in _trigger_lines(promotion, cart))
        wanted = (qualifying // promotion.buy_x) * promotion.get_y
        order = sorted(candidates, key=lambda i: (cart[i].unit_price, i))
    else:
        wanted = 1
        order = sorted(candidates, key=lambda i: (-cart[i].unit_price, i))
        if promotion.has_trigger:
            # the unit that triggers the offer is paid for
            triggers = _trigger_lines(promotion, cart)
            paid_triggers = sum(remaining(i) for i in triggers)
            order = [i for i in order if paid_triggers - (i in triggers) >= 1]

    grants = []
    for index in order:
        if wanted <= 0:
            break
        units = min(wanted, remaining(index))
        if units <= 0:
            continue
        grants.append((index, units))
        free_units[index] = free_units.get(index, 0) + units
        wanted -= units
    return grants


def compute_discounts(
    cart: Sequence[CartLine],
    manual_match: Optional[ManualCoupon],
    automatic_matches: Sequence[AutomaticPromotion],
) -> DiscountResult:
    """
    Automatic offers are applied first, in promotion id order, each against
    what is left of the product total. The manual coupon is then applied to
    the remainder, so a percentage coupon never compounds on value already
    given away as a free item.
    """
    base = product_total(cart)
    free_units: Dict[int, int] = {}
    offers: List[AppliedOffer] = []

    for promotion in automatic_matches:
        if promotion.discount_type == DiscountType.FREE_ITEM:
            grants = _grant_free_units(promotion, cart, free_units)
            if not grants:
                continue
            amount = sum(cart[index].unit_price * units for index, units in grants)
            amount = clamp_discount(amount, base, promotion.name)
            offer = AppliedOffer(
                promotion_id=promotion.id,
                title=promotion.title,
                amount=amount,
                variant_id=cart[grants[0][0]].variant_id,
                free_units=sum(units for _, units in grants),
            )
        else:
            amount = clamp_discount(_value_discount(promotion, base), base, promotion.name)
            if amount == 0:
                continue
            offer = AppliedOffer(promotion_id=promotion.id, title=promotion.title, amount=amount)

        offers.append(offer)
        base -= offer.amount

    discount_amount = 0
    if manual_match is not None:
        discount_amount = clamp_discount(_value_discount(manual_match, base), base, manual_match.code)

    return DiscountResult(
        discount_amount=discount_amount,
        applied_offers=tuple(offers),
        free_units=free_units,
    )
