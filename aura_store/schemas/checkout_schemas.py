# aura_store/schemas/checkout_schemas.py
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Literal, Optional

from aura_store.pricing import AppliedOffer, PriceBreakdown
from aura_store.pricing.money import to_rupees


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def rupees(paise: int) -> float:
    return float(to_rupees(paise))


class CartItemIn(CamelModel):
    variant_id: int
    product_id: int
    quantity: int = Field(ge=1)
    bundle_variant_ids: Optional[List[int]] = None


class BreakdownRequest(CamelModel):
    cart_items: List[CartItemIn] = []
    coupon_code: Optional[str] = None
    pincode: Optional[str] = None
    use_wallet: bool = False


class AppliedOfferOut(CamelModel):
    promotion_id: int
    title: str
    amount: float
    variant_id: Optional[int] = None
    free_units: int = 0

    @classmethod
    def from_offer(cls, offer: AppliedOffer) -> "AppliedOfferOut":
        return cls(
            promotion_id=offer.promotion_id,
            title=offer.title,
            amount=rupees(offer.amount),
            variant_id=offer.variant_id,
            free_units=offer.free_units,
        )


class PriceBreakdownOut(CamelModel):
    original_total: float
    product_total: float
    discount_amount: float
    offer_discount: float
    applied_offers: List[AppliedOfferOut]
    delivery_charge: float
    cod_available: bool
    wallet_used: float
    total_before_wallet: float
    total: float

    @classmethod
    def from_breakdown(cls, breakdown: PriceBreakdown) -> "PriceBreakdownOut":
        return cls(
            original_total=rupees(breakdown.original_total),
            product_total=rupees(breakdown.product_total),
            discount_amount=rupees(breakdown.discount_amount),
            offer_discount=rupees(breakdown.offer_discount),
            applied_offers=[AppliedOfferOut.from_offer(o) for o in breakdown.applied_offers],
            delivery_charge=rupees(breakdown.delivery_charge),
            cod_available=breakdown.cod_available,
            wallet_used=rupees(breakdown.wallet_used),
            total_before_wallet=rupees(breakdown.total_before_wallet),
            total=rupees(breakdown.total),
        )


class BreakdownResponse(CamelModel):
    success: bool = True
    breakdown: PriceBreakdownOut
    coupon_message: Optional[str] = None


class CreateOrderRequest(CamelModel):
    cart_items: List[CartItemIn] = []
    coupon_code: Optional[str] = None
    address_id: int
    payment_mode: Literal["cod", "online"]
    use_wallet: bool = False


class RazorpayOrderOut(CamelModel):
    razorpay_order_id: str
    razorpay_key: str
    amount: int          # paise, as the checkout widget expects
    currency: str


class CreateOrderResponse(CamelModel):
    success: bool = True
    order_id: int
    status: str
    payment_mode: str
    breakdown: PriceBreakdownOut
    coupon_message: Optional[str] = None
    razorpay: Optional[RazorpayOrderOut] = None
    popup: Optional[dict] = None


class VerifyPaymentRequest(CamelModel):
    order_id: int
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class VerifyPaymentResponse(CamelModel):
    success: bool = True
    order_id: int
    status: str
    txn_id: str
    popup: Optional[dict] = None
