from aura_store.models.user import User
from aura_store.models.address import Address
from aura_store.models.product import Product, ProductVariant
from aura_store.models.cart import CartItem
from aura_store.models.coupon import Coupon, CouponUsage
from aura_store.models.pincode import ServiceablePincode
from aura_store.models.order import Order
from aura_store.models.order_item import OrderItem
from aura_store.models.order_event import OrderTimelineEntry
from aura_store.models.payment import Payment
from aura_store.models.wallet import WalletTransaction
from aura_store.models.notifications import Notification

# add ALL models here
