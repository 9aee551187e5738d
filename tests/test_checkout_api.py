from decimal import Decimal

from sqlmodel import select

from aura_store.models.coupon import CouponUsage
from aura_store.models.order import Order
from aura_store.models.order_item import OrderItem
from aura_store.models.payment import Payment
from aura_store.models.user import User
from aura_store.models.wallet import WalletTransaction
from aura_store.notifications import OrderEvent

from tests.conftest import auth, cart_item, make_address, make_coupon


def breakdown(client, user, items, **body):
    return client.post("/payments/breakdown", json={"cartItems": items, **body}, headers=auth(user))


def create_order(client, user, items, address, mode="cod", **body):
    return client.post(
        "/payments/createOrder",
        json={"cartItems": items, "addressId": address.id, "paymentMode": mode, **body},
        headers=auth(user),
    )


class TestBreakdown:
    def test_prices_come_from_the_catalogue(self, client, customer, catalog, pincodes):
        res = breakdown(client, customer, [cart_item(catalog, "oud30", 2)], pincode="560001")

        assert res.status_code == 200
        body = res.json()
        assert body["success"] is True
        data = body["breakdown"]
        assert data["productTotal"] == 1000.0
        assert data["originalTotal"] == 1200.0
        assert data["deliveryCharge"] == 0
        assert data["codAvailable"] is True
        assert data["total"] == 1000.0
        assert body["couponMessage"] is None

    def test_coupon_with_cap(self, client, session, customer, catalog, pincodes):
        make_coupon(session, max_discount_amount=Decimal("150"))

        res = breakdown(client, customer, [cart_item(catalog, "oud30", 2)],
                        pincode="560001", couponCode="save20")

        data = res.json()["breakdown"]
        assert data["discountAmount"] == 150.0
        assert data["total"] == 850.0

    def test_rejected_coupon_still_prices_the_cart(self, client, session, customer, catalog, pincodes):
        make_coupon(session, min_order_value=Decimal("1500"))

        res = breakdown(client, customer, [cart_item(catalog, "oud30", 2)],
                        pincode="560001", couponCode="SAVE20")

        assert res.status_code == 200
        body = res.json()
        assert body["success"] is True
        assert body["couponMessage"] == "This coupon requires a minimum order of ₹1,500"
        assert body["breakdown"]["discountAmount"] == 0

    def test_automatic_buy_x_get_y_offer(self, client, session, customer, catalog, pincodes):
        make_coupon(session, code="B4G1-30ML", is_automatic=True, discount_type="free_item",
                    discount_value=Decimal("0"), description="Buy 4 get the cheapest free",
                    action_buy_x=4, action_get_y=1, action_target_size=30,
                    cond_required_category="Template")

        res = breakdown(client, customer, [cart_item(catalog, "oud30", 4)], pincode="560001")

        data = res.json()["breakdown"]
        (offer,) = data["appliedOffers"]
        assert offer["variantId"] == catalog["oud30"][1]
        assert offer["freeUnits"] == 1
        assert offer["amount"] == 500.0
        assert data["offerDiscount"] == 500.0
        assert data["total"] == 1500.0

    def test_unknown_pincode_fails_closed(self, client, customer, catalog, pincodes):
        res = breakdown(client, customer, [cart_item(catalog, "attar30")], pincode="999999")

        data = res.json()["breakdown"]
        assert data["codAvailable"] is False
        assert data["deliveryCharge"] == 50.0

    def test_empty_cart(self, client, customer, pincodes):
        res = breakdown(client, customer, [], pincode="560001")
        assert res.status_code == 400
        assert res.json() == {"success": False, "msg": "Your cart is empty."}

    def test_missing_pincode(self, client, customer, catalog):
        res = breakdown(client, customer, [cart_item(catalog, "attar30")])
        assert res.status_code == 400
        assert res.json()["msg"] == "Please select a delivery address."

    def test_variant_must_belong_to_product(self, client, customer, catalog, pincodes):
        item = cart_item(catalog, "attar30")
        item["productId"] = catalog["oud30"][0]

        res = breakdown(client, customer, [item], pincode="560001")

        assert res.status_code == 400
        assert res.json()["success"] is False

    def test_inactive_product_is_rejected(self, client, customer, catalog, pincodes):
        res = breakdown(client, customer, [cart_item(catalog, "retired")], pincode="560001")
        assert res.status_code == 400

    def test_bundle_constituents_are_checked(self, client, customer, catalog, pincodes):
        ok = cart_item(catalog, "combo", bundleVariantIds=[catalog["attar30"][1], catalog["musk10"][1]])
        bad = cart_item(catalog, "combo", bundleVariantIds=[98765])

        assert breakdown(client, customer, [ok], pincode="560001").status_code == 200
        assert breakdown(client, customer, [bad], pincode="560001").status_code == 400

    def test_requires_authentication(self, client, catalog):
        res = client.post("/payments/breakdown", json={"cartItems": [], "pincode": "560001"})
        assert res.status_code == 401


class TestCreateOrder:
    def test_cod_rejected_where_not_available(self, client, session, customer, catalog, pincodes, gateway):
        delhi = make_address(session, customer, postal_code="110001")

        res = create_order(client, customer, [cart_item(catalog, "oud30")], delhi, mode="cod")

        assert res.status_code == 400
        assert res.json() == {"success": False, "msg": "Cash on delivery is not available for this pincode"}
        assert gateway.orders == []
        assert session.exec(select(Order)).all() == []

    def test_cod_order_is_placed(self, client, session, customer, catalog, address, notifier):
        res = create_order(client, customer, [cart_item(catalog, "oud50", 2)], address, mode="cod")

        assert res.status_code == 200
        body = res.json()
        assert body["status"] == "Order Placed"
        assert body["paymentMode"] == "cod"
        assert body["razorpay"] is None
        assert body["popup"]["type"] == "success"

        order = session.get(Order, body["orderId"])
        assert order.payable_amount == Decimal("1600.00")
        items = session.exec(select(OrderItem).where(OrderItem.order_id == order.id)).all()
        assert [(i.name, i.quantity) for i in items] == [("Oud Noir", 2)]
        assert notifier.events == [(OrderEvent.ORDER_PLACED, order.id)]

    def test_wallet_only_order_skips_gateway(self, client, session, catalog, pincodes, gateway):
        from tests.conftest import make_user
        user = make_user(session, email="ravi@example.com", wallet="300")
        home = make_address(session, user)

        res = create_order(client, user, [cart_item(catalog, "musk10")], home,
                           mode="online", useWallet=True)

        assert res.status_code == 200
        body = res.json()
        assert body["breakdown"]["walletUsed"] == 250.0
        assert body["breakdown"]["total"] == 0
        assert body["paymentMode"] == "wallet"
        assert body["status"] == "Order Placed"
        assert gateway.orders == []

        session.expire_all()
        assert session.get(User, user.id).wallet_balance == Decimal("50.00")
        (txn,) = session.exec(select(WalletTransaction).where(WalletTransaction.user_id == user.id)).all()
        assert txn.amount == Decimal("-250.00")
        assert txn.order_id == body["orderId"]

    def test_online_order_then_verify(self, client, session, customer, catalog, address, gateway, notifier):
        res = create_order(client, customer, [cart_item(catalog, "oud50", 2)], address, mode="online")

        body = res.json()
        assert body["status"] == "Payment Pending"
        assert body["razorpay"]["amount"] == 160_000
        assert body["razorpay"]["razorpayKey"] == "rzp_test_key"
        assert notifier.events == []

        verify = {
            "orderId": body["orderId"],
            "razorpayOrderId": body["razorpay"]["razorpayOrderId"],
            "razorpayPaymentId": "pay_123",
            "razorpaySignature": "good-signature",
        }
        res = client.post("/payments/verify", json=verify, headers=auth(customer))

        assert res.status_code == 200
        assert res.json()["status"] == "Order Placed"
        assert notifier.events == [(OrderEvent.PAYMENT_SUCCESS, body["orderId"])]

        # replaying the verification is harmless
        again = client.post("/payments/verify", json=verify, headers=auth(customer))
        assert again.status_code == 200
        assert len(session.exec(select(Payment)).all()) == 1
        assert len(notifier.events) == 1

    def test_bad_signature(self, client, session, customer, catalog, address):
        body = create_order(client, customer, [cart_item(catalog, "oud30")], address, mode="online").json()

        res = client.post("/payments/verify", headers=auth(customer), json={
            "orderId": body["orderId"],
            "razorpayOrderId": body["razorpay"]["razorpayOrderId"],
            "razorpayPaymentId": "pay_bad",
            "razorpaySignature": "forged",
        })

        assert res.status_code == 400
        assert res.json() == {"success": False, "msg": "Payment verification failed"}
        session.expire_all()
        assert session.get(Order, body["orderId"]).status == "Payment Pending"

    def test_address_of_another_user(self, client, session, customer, catalog, pincodes):
        from tests.conftest import make_user
        other = make_user(session, email="other@example.com")
        foreign = make_address(session, other)

        res = create_order(client, customer, [cart_item(catalog, "oud30")], foreign)
        assert res.status_code == 400

    def test_coupon_usage_is_claimed_and_enforced(self, client, session, customer, catalog, address):
        coupon = make_coupon(session, max_usage_per_user=1)
        items = [cart_item(catalog, "oud50", 2)]

        first = create_order(client, customer, items, address, couponCode="SAVE20").json()
        assert first["breakdown"]["discountAmount"] == 320.0

        usage = session.exec(select(CouponUsage).where(CouponUsage.coupon_id == coupon.id)).one()
        assert usage.used_count == 1

        quote = breakdown(client, customer, items, pincode="560001", couponCode="SAVE20").json()
        assert quote["couponMessage"] == "usage limit reached"
        assert quote["breakdown"]["discountAmount"] == 0

        second = create_order(client, customer, items, address, couponCode="SAVE20")
        assert second.status_code == 200
        assert second.json()["couponMessage"] == "usage limit reached"
        assert second.json()["breakdown"]["discountAmount"] == 0
        session.expire_all()
        assert session.get(Order, second.json()["orderId"]).coupon_id is None

    def test_cart_is_cleared_after_order(self, client, customer, catalog, address):
        items = [cart_item(catalog, "attar30", 3)]
        client.put("/cart", json=items, headers=auth(customer))
        assert len(client.get("/cart", headers=auth(customer)).json()) == 1

        create_order(client, customer, items, address)

        assert client.get("/cart", headers=auth(customer)).json() == []
