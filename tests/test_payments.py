from storefront.db.models import Order, OrderStatus
from storefront.kafka.consumer import process_event
from tests.conftest import auth_headers

WEBHOOK = "/webhooks/payments"
INTERNAL = {"X-Internal-Key": "devkey"}


def place_order(client, shopper, store, address, product, method="STRIPE"):
    r = client.post("/api/v1/orders/", json={
        "store_id": store.id,
        "address_id": address.id,
        "payment_method": method,
        "items": [{"product_id": product.id, "quantity": 2}],
    }, headers=auth_headers(shopper))
    assert r.status_code == 201, r.text
    return r.json()["data"]["id"]


def test_webhook_marks_order_paid(client, db, shopper, store, address, make_product):
    order_id = place_order(client, shopper, store, address, make_product(store))

    r = client.post(WEBHOOK, json={"type": "payment.succeeded", "order_id": order_id}, headers=INTERNAL)
    assert r.status_code == 200
    order = db.get(Order, order_id)
    assert order.is_paid is True
    assert order.status == OrderStatus.PROCESSING


def test_webhook_requires_internal_key(client, db, shopper, store, address, make_product):
    order_id = place_order(client, shopper, store, address, make_product(store))
    r = client.post(WEBHOOK, json={"type": "payment.succeeded", "order_id": order_id}, headers={"X-Internal-Key": "wrong"})
    assert r.status_code == 401
    assert db.get(Order, order_id).is_paid is False


def test_webhook_unknown_order(client):
    r = client.post(WEBHOOK, json={"type": "payment.succeeded", "order_id": 777}, headers=INTERNAL)
    assert r.status_code == 404


def test_webhook_ignores_other_event_types(client, db, shopper, store, address, make_product):
    order_id = place_order(client, shopper, store, address, make_product(store))
    r = client.post(WEBHOOK, json={"type": "payment.failed", "order_id": order_id}, headers=INTERNAL)
    assert r.status_code == 200
    assert db.get(Order, order_id).is_paid is False


def test_consumer_event_marks_order_paid(client, db, shopper, store, address, make_product):
    order_id = place_order(client, shopper, store, address, make_product(store))
    process_event({"type": "payment.succeeded", "order_id": order_id}, db)
    assert db.get(Order, order_id).is_paid is True

    # unknown orders are skipped
    process_event({"type": "payment.succeeded", "order_id": 999}, db)


def test_order_created_event_carries_snapshot_prices(client, db, shopper, store, address, make_product, events):
    product = make_product(store, price_cents=450)
    order_id = place_order(client, shopper, store, address, product, method="COD")

    topic, key, value = events[-1]
    assert (topic, key) == ("order.events", str(order_id))
    assert value == {
        "type": "order.created",
        "order_id": order_id,
        "user_id": shopper.id,
        "store_id": store.id,
        "payment_method": "COD",
        "amount_cents": 900,
        "items": [{"product_id": product.id, "quantity": 2, "price_cents": 450}],
    }


def test_payment_for_cancelled_order_is_ignored(client, db, shopper, vendor, store, address, make_product):
    order_id = place_order(client, shopper, store, address, make_product(store))
    r = client.patch(f"/api/v1/orders/{order_id}/status", json={"status": "cancelled"}, headers=auth_headers(vendor))
    assert r.status_code == 200

    r = client.post(WEBHOOK, json={"type": "payment.succeeded", "order_id": order_id}, headers=INTERNAL)
    assert r.status_code == 200
    process_event({"type": "payment.succeeded", "order_id": order_id}, db)

    order = db.get(Order, order_id)
    assert order.status == OrderStatus.CANCELLED
    assert order.is_paid is False


def test_webhook_rejects_mismatched_amount(client, db, shopper, store, address, make_product):
    order_id = place_order(client, shopper, store, address, make_product(store, price_cents=500))

    r = client.post(WEBHOOK, json={"type": "payment.succeeded", "order_id": order_id, "amount_cents": 1}, headers=INTERNAL)
    assert r.status_code == 400
    assert db.get(Order, order_id).is_paid is False

    r = client.post(WEBHOOK, json={"type": "payment.succeeded", "order_id": order_id, "amount_cents": 1000}, headers=INTERNAL)
    assert r.status_code == 200
    assert db.get(Order, order_id).is_paid is True
