from .breakdown import PriceBreakdown, PricingOutcome, PricingRules, compute_breakdown
from .cart import CartLine
from .delivery import DeliveryQuote, PincodeInfo, resolve_delivery
from .discounts import AppliedOffer, DiscountResult, compute_discounts
from .eligibility import EligibilityResult, UserHistory, filter_eligible
from .errors import (
    CheckoutError,
    CodUnavailableError,
    EmptyCartError,
    InvalidCartItemError,
    MissingPincodeError,
)
from .promotions import AutomaticPromotion, ManualCoupon, Promotion, promotion_from_record
from .wallet import WalletQuote, apply_wallet

__all__ = [
    "AppliedOffer",
    "AutomaticPromotion",
    "CartLine",
    "CheckoutError",
    "CodUnavailableError",
    "DeliveryQuote",
    "DiscountResult",
    "EligibilityResult",
    "EmptyCartError",
    "InvalidCartItemError",
    "ManualCoupon",
    "MissingPincodeError",
    "PincodeInfo",
    "PriceBreakdown",
    "PricingOutcome",
    "PricingRules",
    "Promotion",
    "UserHistory",
    "WalletQuote",
    "apply_wallet",
    "compute_breakdown",
    "compute_discounts",
    "filter_eligible",
    "promotion_from_record",
    "resolve_delivery",
]
