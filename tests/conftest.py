import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ["BREVO_API_KEY"] = ""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import aura_store.models  # noqa: F401
from aura_store.database import get_session
from aura_store.main import app
from aura_store.models.address import Address
from aura_store.models.coupon import Coupon, DiscountType
from aura_store.models.pincode import ServiceablePincode
from aura_store.models.product import Product, ProductVariant
from aura_store.models.user import User
from aura_store.notifications import get_notifier
from aura_store.services.payment_service import PaymentGatewayError, get_payment_gateway
from aura_store.utils.token import create_access_token


class FakeGateway:
    key_id = "rzp_test_key"

    def __init__(self):
        self.orders = []
        self.refunds = []
        self.refund_status = "processed"
        self.fail_refunds = False

    def create_order(self, amount, receipt, notes=None):
        order = {"id": f"order_test_{len(self.orders) + 1}", "amount": amount,
                 "currency": "INR", "receipt": receipt}
        self.orders.append(order)
        return order

    def verify_signature(self, gateway_order_id, payment_id, signature):
        return signature == "good-signature"

    def refund(self, payment_id, amount, speed="optimum"):
        if self.fail_refunds:
            raise PaymentGatewayError("Refund could not be initiated")
        refund = {"id": f"rfnd_test_{len(self.refunds) + 1}", "payment_id": payment_id,
                  "amount": amount, "status": self.refund_status, "speed_requested": speed}
        self.refunds.append(refund)
        return refund

    def fetch_refund(self, refund_id):
        return {"id": refund_id, "status": "processed"}


class RecordingNotifier:
    def __init__(self):
        self.events = []

    def notify(self, event, *, order, user, extra=None):
        self.events.append((event, order.id))
        return {"type": "success", "message": (extra or {}).get("popup_message", "Success")}


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture(name="client")
def client_fixture(engine, gateway, notifier):
    def get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_notifier] = lambda: notifier

    yield TestClient(app)

    app.dependency_overrides.clear()


def make_user(session, *, email, role="user", wallet="0"):
    user = User(first_name=email.split("@")[0].title(), email=email, role=role,
                wallet_balance=Decimal(wallet))
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def customer(session):
    return make_user(session, email="asha@example.com")


@pytest.fixture
def admin(session):
    return make_user(session, email="ops@devidaura.com", role="admin")


def auth(user):
    return {"Authorization": f"Bearer {create_access_token({'user_id': user.id})}"}


@pytest.fixture
def catalog(session):
    """Variant ids by name; prices in rupees."""
    oud = Product(name="Oud Noir", slug="oud-noir", category="Template")
    attar = Product(name="Rose Attar", slug="rose-attar", category="Attar")
    musk = Product(name="White Musk", slug="white-musk", category="Attar")
    combo = Product(name="Discovery Combo", slug="discovery-combo", category="Combo", is_bundle=True)
    retired = Product(name="Old Spice Trail", slug="old-spice-trail", category="Template", is_active=False)
    session.add_all([oud, attar, musk, combo, retired])
    session.commit()

    variants = {
        "oud30": ProductVariant(product_id=oud.id, size=30, price=Decimal("500"), mrp=Decimal("600"), stock=20),
        "oud50": ProductVariant(product_id=oud.id, size=50, price=Decimal("800"), mrp=Decimal("1000"), stock=20),
        "attar30": ProductVariant(product_id=attar.id, size=30, price=Decimal("300"), mrp=Decimal("300"), stock=20),
        "musk10": ProductVariant(product_id=musk.id, size=10, price=Decimal("200"), mrp=Decimal("250"), stock=20),
        "combo": ProductVariant(product_id=combo.id, size=10, price=Decimal("999"), mrp=Decimal("1200"), stock=5),
        "retired": ProductVariant(product_id=retired.id, size=30, price=Decimal("400"), mrp=Decimal("400"), stock=0),
    }
    session.add_all(variants.values())
    session.commit()
    return {name: (v.product_id, v.id) for name, v in variants.items()}


@pytest.fixture
def pincodes(session):
    session.add_all([
        ServiceablePincode(pincode="560001", city="Bengaluru", state="Karnataka", cod_available=True),
        ServiceablePincode(pincode="110001", city="New Delhi", state="Delhi", cod_available=False),
        ServiceablePincode(pincode="400001", city="Mumbai", state="Maharashtra", cod_available=True,
                           delivery_charge=Decimal("80")),
    ])
    session.commit()


def make_address(session, user, postal_code="560001"):
    address = Address(user_id=user.id, full_name="Asha Rao", phone_number="9876543210",
                      address_line="12 MG Road", city="Bengaluru", state="Karnataka",
                      postal_code=postal_code)
    session.add(address)
    session.commit()
    session.refresh(address)
    return address


@pytest.fixture
def address(session, customer, pincodes):
    return make_address(session, customer)


def make_coupon(session, code="SAVE20", **fields):
    values = dict(code=code, discount_type=DiscountType.PERCENT, discount_value=Decimal("20"))
    values.update(fields)
    coupon = Coupon(**values)
    session.add(coupon)
    session.commit()
    session.refresh(coupon)
    return coupon


def cart_item(catalog, name, quantity=1, **extra):
    product_id, variant_id = catalog[name]
    return {"productId": product_id, "variantId": variant_id, "quantity": quantity, **extra}
