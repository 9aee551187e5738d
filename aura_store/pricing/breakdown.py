import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence, Tuple

from aura_store.pricing.cart import CartLine, ensure_not_empty, original_total, product_total
from aura_store.pricing.delivery import PincodeLookup, resolve_delivery
from aura_store.pricing.discounts import AppliedOffer, DiscountResult, compute_discounts
from aura_store.pricing.eligibility import UserHistory, filter_eligible
from aura_store.pricing.errors import MissingPincodeError
from aura_store.pricing.promotions import ManualCoupon, Promotion
from aura_store.pricing.wallet import apply_wallet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingRules:
    free_shipping_threshold: int   # paise
    standard_delivery_charge: int  # paise


@dataclass(frozen=True)
class PriceBreakdown:
    original_total: int
    product_total: int
    discount_amount: int
    applied_offers: Tuple[AppliedOffer, ...]
    delivery_charge: int
    cod_available: bool
    wallet_used: int
    total_before_wallet: int
    total: int

    @property
    def offer_discount(self) -> int:
        return sum(offer.amount for offer in self.applied_offers)

    @property
    def wallet_only(self) -> bool:
        return self.total == 0


@dataclass(frozen=True)
class PricingOutcome:
    breakdown: PriceBreakdown
    coupon: Optional[ManualCoupon]
    coupon_message: Optional[str]
    discounts: DiscountResult
    serviceable: bool


def compute_breakdown(
    cart: Sequence[CartLine],
    promotions: Sequence[Promotion],
    history: UserHistory,
    *,
    coupon_code: Optional[str],
    pincode: Optional[str],
    wallet_balance: int,
    use_wallet: bool,
    lookup: PincodeLookup,
    rules: PricingRules,
    now: Optional[datetime] = None,
) -> PricingOutcome:
    """
    Pure function of its inputs: the same cart, promotions, history, coupon,
    pincode and wallet flag always produce the same breakdown.
    """
    ensure_not_empty(cart)
    if not pincode or not pincode.strip():
        raise MissingPincodeError()

    eligibility = filter_eligible(cart, promotions, history, coupon_code, now=now)
    discounts = compute_discounts(cart, eligibility.manual_match, eligibility.automatic_matches)

    merchandise = product_total(cart)
    delivery = resolve_delivery(
        pincode.strip(),
        merchandise,
        lookup,
        free_shipping_threshold=rules.free_shipping_threshold,
        standard_charge=rules.standard_delivery_charge,
    )

    after_discounts = merchandise - discounts.offer_discount - discounts.discount_amount
    if after_discounts < 0:
        logger.error(f"Discounts exceed product total ({after_discounts}); clamping to 0")
        after_discounts = 0

    total_before_wallet = after_discounts + delivery.delivery_charge
    wallet = apply_wallet(total_before_wallet, wallet_balance, use_wallet)

    breakdown = PriceBreakdown(
        original_total=original_total(cart),
        product_total=merchandise,
        discount_amount=discounts.discount_amount,
        applied_offers=discounts.applied_offers,
        delivery_charge=delivery.delivery_charge,
        cod_available=delivery.cod_available,
        wallet_used=wallet.wallet_used,
        total_before_wallet=total_before_wallet,
        total=wallet.payable,
    )
    return PricingOutcome(
        breakdown=breakdown,
        coupon=eligibility.manual_match,
        coupon_message=eligibility.rejection_reason,
        discounts=discounts,
        serviceable=delivery.serviceable,
    )
