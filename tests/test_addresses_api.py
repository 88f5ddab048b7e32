from tests.conftest import auth_headers

ADDRESSES = "/api/v1/addresses/"

ADDRESS = {
    "name": "Shopper",
    "email": "shopper@example.com",
    "phone": "+1 555 0199",
    "street": "3 Elm Road",
    "city": "Portland",
    "state": "OR",
    "zip": "97201",
    "country": "US",
}


def test_addresses_are_private(client, shopper, vendor):
    r = client.post(ADDRESSES, json=ADDRESS, headers=auth_headers(shopper))
    assert r.status_code == 201

    assert len(client.get(ADDRESSES, headers=auth_headers(shopper)).json()["data"]) == 1
    assert client.get(ADDRESSES, headers=auth_headers(vendor)).json()["data"] == []


def test_address_validation(client, shopper):
    r = client.post(ADDRESSES, json={**ADDRESS, "phone": "call me"}, headers=auth_headers(shopper))
    assert r.status_code == 422
