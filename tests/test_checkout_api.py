import pytest

ITEMS = [{"name": "Jollof Rice", "price": 8.5, "quantity": 1}, {"name": "Plantain", "price": 4.0, "quantity": 1}]


def test_first_checkout_gets_base_number(client):
    r = client.post("/checkout", json={"total": 12.50, "items": ITEMS})
    assert r.status_code == 200
    assert r.json() == {"success": True, "orderNumber": 1001, "message": "Order processed successfully"}


def test_order_numbers_strictly_increase(client):
    numbers = []
    for i in range(10):
        path = "/checkout" if i % 2 else "/api/checkout"
        numbers.append(client.post(path, json={"total": i + 1}).json()["orderNumber"])
    assert numbers == list(range(1001, 1011))
    assert len(set(numbers)) == len(numbers)


def test_accepted_order_is_stamped_pending(client, clock):
    client.post("/checkout", json={"total": 3, "items": ITEMS, "status": "completed", "table": 7})
    orders = client.get("/api/orders").json()["orders"]
    assert len(orders) == 1
    o = orders[0]
    assert o["status"] == "pending"
    assert o["timestamp"] == clock.now
    assert o["items"] == ITEMS
    assert o["table"] == 7


def test_client_order_number_is_ignored(client, app):
    first = client.post("/checkout", json={"total": 99, "orderNumber": 1001}).json()
    second = client.post("/checkout", json={"total": 1}).json()
    assert (first["orderNumber"], second["orderNumber"]) == (1001, 1002)
    # a number the counter already handed out can't be reused either
    third = client.post("/checkout", json={"total": 2, "orderNumber": 1001}).json()
    assert third["orderNumber"] == 1003
    numbers = [o.orderNumber for o in app.state.store.list()]
    assert numbers == [1003, 1002, 1001]
    assert app.state.writer.read_order(1001).total == 99


@pytest.mark.parametrize(
    "body",
    [
        {"items": ITEMS},
        {"total": "12.50"},
        {"total": None},
        {"total": True},
        {"total": -1},
        [1, 2, 3],
        "total",
    ],
)
def test_bad_payload_is_rejected_without_side_effects(client, app, body):
    r = client.post("/checkout", json=body)
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Error processing order"}
    assert len(app.state.store) == 0
    assert app.state.store.peek_next() == 1001


def test_malformed_json_is_rejected(client, app):
    r = client.post("/checkout", content=b"{not json", headers={"content-type": "application/json"})
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert app.state.store.peek_next() == 1001


def test_fifty_one_orders_keep_fifty(client):
    for i in range(51):
        client.post("/checkout", json={"total": 1 + i})
    body = client.get("/api/orders").json()
    assert body["success"] is True
    assert body["count"] == 50
    numbers = [o["orderNumber"] for o in body["orders"]]
    assert 1001 not in numbers
    assert numbers[0] == 1051
    assert numbers[-1] == 1002


def test_clear_orders_resets_counter(client):
    client.post("/checkout", json={"total": 1})
    client.post("/checkout", json={"total": 2})
    r = client.post("/api/clear-orders")
    assert r.json() == {"success": True, "message": "All orders cleared"}
    assert client.get("/api/orders").json()["count"] == 0
    assert client.post("/checkout", json={"total": 3}).json()["orderNumber"] == 1001


def test_checkout_persists_in_background(client, app, clock):
    client.post("/checkout", json={"total": 9.99})
    writer = app.state.writer
    saved = writer.read_order(1001)
    assert saved is not None and saved.total == 9.99
    assert [o["orderNumber"] for o in writer.read_daily(clock.now[:10])] == [1001]


def test_persist_failure_does_not_fail_checkout(client, app, tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    app.state.writer.orders_dir = str(blocker)
    r = client.post("/checkout", json={"total": 1})
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert client.get("/api/orders").json()["count"] == 1


def test_healthz(client):
    client.post("/checkout", json={"total": 1})
    assert client.get("/healthz").json() == {"ok": True, "orders": 1, "subscribers": 0, "nextOrderNumber": 1002}


def test_pages_404_when_missing(client):
    assert client.get("/").status_code == 404
    assert client.get("/kitchen").status_code == 404


def test_pages_served_from_public_dir(client, settings):
    import os

    os.makedirs(settings.public_dir, exist_ok=True)
    with open(os.path.join(settings.public_dir, "kitchen.html"), "w") as f:
        f.write("<h1>Kitchen</h1>")
    r = client.get("/kitchen")
    assert r.status_code == 200
    assert "Kitchen" in r.text
