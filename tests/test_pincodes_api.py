from decimal import Decimal

from sqlmodel import select

from aura_store.models.pincode import ServiceablePincode

from tests.conftest import auth, cart_item


class TestPincodeAdmin:
    def test_grouped_by_state_and_city(self, client, admin, pincodes):
        res = client.get("/address/pincodes", headers=auth(admin))

        assert res.status_code == 200
        data = res.json()["data"]
        assert sorted(data) == ["Delhi", "Karnataka", "Maharashtra"]
        (mumbai,) = data["Maharashtra"]["Mumbai"]
        assert mumbai["pincode"] == "400001"
        assert Decimal(mumbai["delivery_charge"]) == Decimal("80")
        assert data["Delhi"]["New Delhi"][0]["cod_available"] is False

    def test_batch_upsert(self, client, session, admin, pincodes):
        res = client.post("/address/pincodes/batch", headers=auth(admin), json={"pincodes": [
            {"pincode": "110001", "city": "New Delhi", "state": "Delhi", "cod_available": True},
            {"pincode": "600001", "city": "Chennai", "state": "Tamil Nadu"},
        ]})

        assert res.json() == {"success": True, "created": 1, "updated": 1}
        session.expire_all()
        delhi = session.exec(select(ServiceablePincode).where(ServiceablePincode.pincode == "110001")).one()
        assert delhi.cod_available is True

    def test_batch_rejects_malformed_pincodes(self, client, admin):
        res = client.post("/address/pincodes/batch", headers=auth(admin), json={"pincodes": [
            {"pincode": "5600", "city": "Bengaluru", "state": "Karnataka"},
        ]})
        assert res.status_code == 422

    def test_city_listing(self, client, admin, pincodes):
        res = client.get("/address/pincodes/Karnataka/Bengaluru", headers=auth(admin))
        assert [p["pincode"] for p in res.json()["data"]] == ["560001"]

    def test_partial_update(self, client, admin, pincodes):
        res = client.put("/address/pincodes/560001", json={"cod_available": False}, headers=auth(admin))

        assert res.status_code == 200
        data = res.json()["data"]
        assert data["cod_available"] is False
        assert data["city"] == "Bengaluru"
        assert client.put("/address/pincodes/999999", json={}, headers=auth(admin)).status_code == 404

    def test_delete(self, client, admin, pincodes):
        assert client.delete("/address/pincodes/400001", headers=auth(admin)).status_code == 200
        assert client.delete("/address/pincodes/400001", headers=auth(admin)).status_code == 404

    def test_customers_cannot_manage_pincodes(self, client, customer):
        assert client.get("/address/pincodes", headers=auth(customer)).status_code == 403


class TestPincodeCheck:
    def test_serviceable(self, client, pincodes):
        body = client.get("/address/pincodes/check/400001").json()
        assert body == {"pincode": "400001", "serviceable": True, "cod_available": True,
                        "city": "Mumbai", "state": "Maharashtra"}

    def test_unknown(self, client, pincodes):
        body = client.get("/address/pincodes/check/999999").json()
        assert body["serviceable"] is False
        assert body["cod_available"] is False

    def test_custom_charge_reaches_the_breakdown(self, client, customer, catalog, pincodes):
        res = client.post("/payments/breakdown", headers=auth(customer), json={
            "cartItems": [cart_item(catalog, "attar30")],
            "pincode": "400001",
        })
        assert res.json()["breakdown"]["deliveryCharge"] == 80.0
