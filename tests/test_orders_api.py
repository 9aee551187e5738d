from datetime import datetime, timedelta
from decimal import Decimal

from sqlmodel import select

from aura_store.jobs.order_expiry import expire_unpaid_orders
from aura_store.models.coupon import CouponUsage
from aura_store.models.order import Order
from aura_store.models.user import User
from aura_store.notifications import OrderEvent

from tests.conftest import auth, cart_item, make_address, make_coupon, make_user


def place(client, user, catalog, address, mode="online", items=None, **body):
    res = client.post(
        "/payments/createOrder",
        headers=auth(user),
        json={
            "cartItems": items or [cart_item(catalog, "oud50", 2)],
            "addressId": address.id,
            "paymentMode": mode,
            **body,
        },
    )
    assert res.status_code == 200, res.text
    return res.json()


def pay(client, user, order):
    res = client.post("/payments/verify", headers=auth(user), json={
        "orderId": order["orderId"],
        "razorpayOrderId": order["razorpay"]["razorpayOrderId"],
        "razorpayPaymentId": f"pay_{order['orderId']}",
        "razorpaySignature": "good-signature",
    })
    assert res.status_code == 200, res.text


class TestCancellation:
    def test_paid_order_refunds_ninety_five_percent(self, client, session, customer, catalog, address, gateway, notifier):
        order = place(client, customer, catalog, address)
        pay(client, customer, order)

        res = client.post(f"/orders/{order['orderId']}/cancel", json={"reason": "Ordered twice"},
                          headers=auth(customer))

        assert res.status_code == 200
        body = res.json()
        assert body["status"] == "Cancelled"
        assert Decimal(body["cancellation_fee"]) == Decimal("80.00")
        assert Decimal(body["refund"]["amount"]) == Decimal("1520.00")
        assert body["refund"]["status"] == "processed"

        (refund,) = gateway.refunds
        assert refund["amount"] == 152_000
        assert refund["payment_id"] == f"pay_{order['orderId']}"
        assert notifier.events[-1] == (OrderEvent.ORDER_CANCELLED, order["orderId"])

    def test_wallet_share_is_credited_back(self, client, session, catalog, pincodes, gateway):
        user = make_user(session, email="meera@example.com", wallet="100")
        home = make_address(session, user)
        order = place(client, user, catalog, home, mode="cod", useWallet=True)
        assert order["breakdown"]["walletUsed"] == 100.0

        res = client.post(f"/orders/{order['orderId']}/cancel", json={}, headers=auth(user))

        body = res.json()
        assert Decimal(body["cancellation_fee"]) == Decimal("5.00")
        assert Decimal(body["refund"]["wallet_amount"]) == Decimal("95.00")
        assert gateway.refunds == []
        session.expire_all()
        assert session.get(User, user.id).wallet_balance == Decimal("95.00")

    def test_unpaid_order_gets_everything_back(self, client, session, catalog, pincodes, gateway):
        user = make_user(session, email="kiran@example.com", wallet="100")
        home = make_address(session, user)
        order = place(client, user, catalog, home, mode="online", useWallet=True)
        assert order["status"] == "Payment Pending"

        res = client.post(f"/orders/{order['orderId']}/cancel", json={}, headers=auth(user))

        assert Decimal(res.json()["cancellation_fee"]) == Decimal("0.00")
        assert gateway.refunds == []
        session.expire_all()
        assert session.get(User, user.id).wallet_balance == Decimal("100.00")

    def test_cod_order_without_wallet_needs_no_refund(self, client, customer, catalog, address, gateway):
        order = place(client, customer, catalog, address, mode="cod")

        body = client.post(f"/orders/{order['orderId']}/cancel", json={}, headers=auth(customer)).json()

        assert body["refund"] is None
        assert Decimal(body["cancellation_fee"]) == 0
        assert gateway.refunds == []

    def test_gateway_failure_still_cancels(self, client, session, customer, catalog, address, gateway):
        gateway.fail_refunds = True
        order = place(client, customer, catalog, address)
        pay(client, customer, order)

        body = client.post(f"/orders/{order['orderId']}/cancel", json={}, headers=auth(customer)).json()

        assert body["status"] == "Cancelled"
        assert body["refund"]["status"] == "failed"

    def test_coupon_slot_is_released(self, client, session, customer, catalog, address):
        coupon = make_coupon(session, max_usage_per_user=1)
        order = place(client, customer, catalog, address, mode="cod", couponCode="SAVE20")

        client.post(f"/orders/{order['orderId']}/cancel", json={}, headers=auth(customer))

        usage = session.exec(select(CouponUsage).where(CouponUsage.coupon_id == coupon.id)).one()
        assert usage.used_count == 0

    def test_cannot_cancel_twice(self, client, customer, catalog, address):
        order = place(client, customer, catalog, address, mode="cod")
        client.post(f"/orders/{order['orderId']}/cancel", json={}, headers=auth(customer))

        res = client.post(f"/orders/{order['orderId']}/cancel", json={}, headers=auth(customer))
        assert res.status_code == 400

    def test_cannot_cancel_someone_elses_order(self, client, session, customer, catalog, address):
        order = place(client, customer, catalog, address, mode="cod")
        stranger = make_user(session, email="stranger@example.com")

        res = client.post(f"/orders/{order['orderId']}/cancel", json={}, headers=auth(stranger))
        assert res.status_code == 403


class TestRefundRefresh:
    def test_pending_refund_becomes_processed(self, client, customer, catalog, address, gateway, notifier):
        gateway.refund_status = "pending"
        order = place(client, customer, catalog, address)
        pay(client, customer, order)
        cancelled = client.post(f"/orders/{order['orderId']}/cancel", json={}, headers=auth(customer)).json()
        assert cancelled["refund"]["status"] == "pending"

        res = client.post(f"/orders/{order['orderId']}/refund/refresh", headers=auth(customer))

        assert res.status_code == 200
        assert res.json()["refund"]["status"] == "processed"
        assert notifier.events[-1] == (OrderEvent.REFUND_PROCESSED, order["orderId"])

    def test_nothing_to_refresh(self, client, customer, catalog, address):
        order = place(client, customer, catalog, address, mode="cod")
        res = client.post(f"/orders/{order['orderId']}/refund/refresh", headers=auth(customer))
        assert res.status_code == 400


class TestStatusUpdates:
    def test_forward_transitions(self, client, customer, admin, catalog, address, notifier):
        order = place(client, customer, catalog, address, mode="cod")
        url = f"/admin/orders/{order['orderId']}/status"

        for status in ["Processing", "Shipped", "Delivered"]:
            res = client.patch(url, json={"status": status}, headers=auth(admin))
            assert res.status_code == 200, res.text
            assert res.json()["status"] == status

        assert client.patch(url, json={"status": "Processing"}, headers=auth(admin)).status_code == 400
        assert [e for e, _ in notifier.events].count(OrderEvent.STATUS_CHANGED) == 3

    def test_steps_cannot_be_skipped(self, client, customer, admin, catalog, address):
        order = place(client, customer, catalog, address, mode="cod")
        res = client.patch(f"/admin/orders/{order['orderId']}/status", json={"status": "Delivered"},
                           headers=auth(admin))
        assert res.status_code == 400

    def test_customers_cannot_update_status(self, client, customer, catalog, address):
        order = place(client, customer, catalog, address, mode="cod")
        res = client.patch(f"/admin/orders/{order['orderId']}/status", json={"status": "Processing"},
                           headers=auth(customer))
        assert res.status_code == 403


class TestOrderViews:
    def test_detail_has_timeline_and_summary(self, client, customer, admin, catalog, address):
        order = place(client, customer, catalog, address, mode="cod")
        client.patch(f"/admin/orders/{order['orderId']}/status", json={"status": "Processing", "note": "Packed"},
                     headers=auth(admin))

        res = client.get(f"/orders/{order['orderId']}", headers=auth(customer))

        assert res.status_code == 200
        body = res.json()
        assert body["status"] == "Processing"
        assert Decimal(body["summary"]["payable_amount"]) == Decimal("1600.00")
        assert [e["status"] for e in body["timeline"]] == ["Processing", "Order Placed"]
        assert body["timeline"][0]["description"] == "Packed"

    def test_list_is_paginated_and_private(self, client, session, customer, catalog, address):
        for _ in range(3):
            place(client, customer, catalog, address, mode="cod")
        stranger = make_user(session, email="nosy@example.com")

        mine = client.get("/orders?limit=2", headers=auth(customer)).json()
        theirs = client.get("/orders", headers=auth(stranger)).json()

        assert mine["total_items"] == 3
        assert len(mine["results"]) == 2
        assert theirs["total_items"] == 0
        assert client.get(f"/orders/{mine['results'][0]['order_id']}",
                          headers=auth(stranger)).status_code == 404


class TestExpiry:
    def test_stale_pending_orders_are_cancelled(self, client, session, catalog, pincodes):
        user = make_user(session, email="late@example.com", wallet="100")
        home = make_address(session, user)
        coupon = make_coupon(session, max_usage_per_user=1)
        order = place(client, user, catalog, home, mode="online", useWallet=True, couponCode="SAVE20")

        assert expire_unpaid_orders(session, now=datetime.utcnow()) == 0
        expired = expire_unpaid_orders(session, now=datetime.utcnow() + timedelta(minutes=31))

        assert expired == 1
        session.expire_all()
        stored = session.get(Order, order["orderId"])
        assert stored.status == "Cancelled"
        assert stored.cancelled_by == "system"
        assert session.get(User, user.id).wallet_balance == Decimal("100.00")
        usage = session.exec(select(CouponUsage).where(CouponUsage.coupon_id == coupon.id)).one()
        assert usage.used_count == 0

    def test_placed_orders_are_left_alone(self, client, session, customer, catalog, address):
        place(client, customer, catalog, address, mode="cod")
        assert expire_unpaid_orders(session, now=datetime.utcnow() + timedelta(days=1)) == 0


class TestPaymentAfterCancellation:
    def test_payment_for_cancelled_order_is_refunded_in_full(self, client, session, customer, catalog,
                                                            address, gateway):
        order = place(client, customer, catalog, address)
        client.post(f"/orders/{order['orderId']}/cancel", json={}, headers=auth(customer))

        pay(client, customer, order)
        pay(client, customer, order)

        (refund,) = gateway.refunds
        assert refund["amount"] == 160_000
        assert refund["payment_id"] == f"pay_{order['orderId']}"
        session.expire_all()
        stored = session.get(Order, order["orderId"])
        assert stored.status == "Cancelled"
        assert stored.payment_status == "refunded"
        assert stored.refund_status == "processed"
        assert stored.refund_amount == Decimal("1600.00")

    def test_payment_after_expiry_is_refunded(self, client, session, customer, catalog, address, gateway):
        order = place(client, customer, catalog, address)
        expire_unpaid_orders(session, now=datetime.utcnow() + timedelta(minutes=31))

        res = client.post("/payments/verify", headers=auth(customer), json={
            "orderId": order["orderId"],
            "razorpayOrderId": order["razorpay"]["razorpayOrderId"],
            "razorpayPaymentId": "pay_late",
            "razorpaySignature": "good-signature",
        })

        assert res.status_code == 200
        assert res.json()["status"] == "Cancelled"
        assert [r["amount"] for r in gateway.refunds] == [160_000]

    def test_forged_payment_for_cancelled_order_is_rejected(self, client, customer, catalog, address, gateway):
        order = place(client, customer, catalog, address)
        client.post(f"/orders/{order['orderId']}/cancel", json={}, headers=auth(customer))

        res = client.post("/payments/verify", headers=auth(customer), json={
            "orderId": order["orderId"],
            "razorpayOrderId": order["razorpay"]["razorpayOrderId"],
            "razorpayPaymentId": "pay_forged",
            "razorpaySignature": "bad-signature",
        })

        assert res.status_code == 400
        assert gateway.refunds == []
