from decimal import Decimal

from aura_store.config import settings

from tests.conftest import auth, make_user


def test_wallet_lists_newest_transactions_first(client, session, admin):
    user = make_user(session, email="ravi@example.com", wallet="0")

    client.post(f"/admin/wallet/{user.id}/credit", json={"amount": "150", "reason": "Goodwill"},
                headers=auth(admin))
    res = client.post(f"/admin/wallet/{user.id}/credit", json={"amount": "50", "reason": "Referral"},
                      headers=auth(admin))

    assert res.status_code == 200
    assert Decimal(res.json()["wallet_balance"]) == Decimal("200")

    mine = client.get("/wallet", headers=auth(user)).json()
    assert [t["reason"] for t in mine["transactions"]] == ["Referral", "Goodwill"]


def test_only_admins_credit_wallets(client, customer):
    res = client.post(f"/admin/wallet/{customer.id}/credit", json={"amount": "100", "reason": "Free money"},
                      headers=auth(customer))
    assert res.status_code == 403


def test_credit_unknown_user(client, admin):
    res = client.post("/admin/wallet/999/credit", json={"amount": "10", "reason": "x"}, headers=auth(admin))
    assert res.status_code == 404


def test_health(client):
    assert client.get("/health").json()["database"] == "ok"


def test_openapi_points_at_the_identity_provider(client):
    schemes = client.get("/openapi.json").json()["components"]["securitySchemes"]
    assert schemes["OAuth2PasswordBearer"]["flows"]["password"]["tokenUrl"] == settings.AUTH_TOKEN_URL
