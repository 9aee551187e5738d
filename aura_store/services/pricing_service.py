import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlmodel import Session, select

from aura_store.config import settings
from aura_store.constants.order_status import CANCELLED, PAYMENT_PENDING
from aura_store.models.coupon import Coupon, CouponUsage
from aura_store.models.order import Order
from aura_store.models.pincode import ServiceablePincode
from aura_store.models.product import Product, ProductVariant
from aura_store.models.user import User
from aura_store.pricing import (
    CartLine,
    InvalidCartItemError,
    PincodeInfo,
    PricingOutcome,
    PricingRules,
    UserHistory,
    compute_breakdown,
    promotion_from_record,
)
from aura_store.pricing.money import to_paise
from aura_store.schemas.checkout_schemas import CartItemIn

logger = logging.getLogger(__name__)


def pricing_rules() -> PricingRules:
    return PricingRules(
        free_shipping_threshold=to_paise(settings.FREE_SHIPPING_THRESHOLD),
        standard_delivery_charge=to_paise(settings.STANDARD_DELIVERY_CHARGE),
    )


def load_cart_lines(session: Session, items: Sequence[CartItemIn]) -> List[CartLine]:
    """Resolves submitted cart items against the catalogue. Prices always come from the database."""
    lines = []
    for item in items:
        variant = session.get(ProductVariant, item.variant_id)
        if variant is None:
            raise InvalidCartItemError(f"Product variant {item.variant_id} not found")
        if variant.product_id != item.product_id:
            raise InvalidCartItemError(
                f"Variant {item.variant_id} does not belong to product {item.product_id}"
            )

        product = session.get(Product, item.product_id)
        if product is None or not product.is_active:
            raise InvalidCartItemError(f"Product {item.product_id} is not available")

        bundle_ids = tuple(item.bundle_variant_ids or ())
        if bundle_ids and not product.is_bundle:
            raise InvalidCartItemError(f"{product.name} is not a bundle")
        for constituent_id in bundle_ids:
            if session.get(ProductVariant, constituent_id) is None:
                raise InvalidCartItemError(f"Bundle item {constituent_id} not found")

        lines.append(
            CartLine(
                product_id=product.id,
                variant_id=variant.id,
                name=product.name,
                category=product.category,
                size=variant.size,
                quantity=item.quantity,
                unit_price=to_paise(variant.price),
                unit_mrp=to_paise(variant.mrp),
                bundle_variant_ids=bundle_ids,
            )
        )
    return lines


def load_promotions(session: Session):
    coupons = session.exec(
        select(Coupon).where(Coupon.is_active == True)  # noqa: E712
    ).all()
    return [promotion_from_record(c) for c in coupons]


def load_user_history(session: Session, user: User) -> UserHistory:
    prior_orders = session.exec(
        select(func.count())
        .select_from(Order)
        .where(Order.user_id == user.id)
        .where(Order.status.not_in([CANCELLED, PAYMENT_PENDING]))
    ).one()

    usage_rows = session.exec(
        select(CouponUsage).where(CouponUsage.user_id == user.id)
    ).all()

    return UserHistory(
        user_id=user.id,
        prior_order_count=prior_orders,
        coupon_usage={row.coupon_id: row.used_count for row in usage_rows},
    )


def pincode_lookup(session: Session):
    def lookup(pincode: str) -> Optional[PincodeInfo]:
        row = session.exec(
            select(ServiceablePincode)
            .where(ServiceablePincode.pincode == pincode)
            .where(ServiceablePincode.is_active == True)  # noqa: E712
        ).first()
        if row is None:
            return None
        return PincodeInfo(
            pincode=row.pincode,
            cod_available=row.cod_available,
            delivery_charge=to_paise(row.delivery_charge) if row.delivery_charge is not None else None,
        )

    return lookup


def price_cart(
    session: Session,
    *,
    user: User,
    items: Sequence[CartItemIn],
    coupon_code: Optional[str],
    pincode: Optional[str],
    use_wallet: bool,
    now: Optional[datetime] = None,
) -> Tuple[List[CartLine], PricingOutcome]:
    lines = load_cart_lines(session, items)
    outcome = compute_breakdown(
        lines,
        load_promotions(session),
        load_user_history(session, user),
        coupon_code=coupon_code,
        pincode=pincode,
        wallet_balance=to_paise(user.wallet_balance or 0),
        use_wallet=use_wallet,
        lookup=pincode_lookup(session),
        rules=pricing_rules(),
        now=now,
    )
    logger.info(
        f"Priced cart for user {user.id}: {len(lines)} lines, "
        f"payable {outcome.breakdown.total} paise"
    )
    return lines, outcome
