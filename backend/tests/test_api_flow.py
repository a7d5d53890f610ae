"""Полный путь детали через HTTP: заказ линии → цех → склад → выдача на линию."""
from kanban_tracker.models import UserRole

PART = "1002.2002.3002"


def test_store_to_fabrication_to_line(client, auth_headers):
    line = auth_headers(UserRole.ASSEMBLY_LINE_OPERATOR)
    store = auth_headers(UserRole.ASSEMBLY_STORE_OPERATOR)
    fab = auth_headers(UserRole.FABRICATION_OPERATOR)

    # Линия заказывает 5 шестерён со склада
    r = client.post("/assembly-line/orders", json={"partNumber": PART, "quantity": 5}, headers=line)
    assert r.status_code == 201, r.text
    store_order_id = r.json()["id"]
    assert r.json()["kanbanId"]

    r = client.get("/assembly-store/orders", headers=store)
    order_store = r.json()[0]
    assert order_store["status"] == "pending"

    # Склад передаёт заказ в цех
    r = client.post("/assembly-store/orders/status", json={"id": order_store["id"], "status": "production"}, headers=store)
    assert r.status_code == 201, r.text
    fab_order_id = r.json()["id"]
    kanban_id = r.json()["kanbanId"]
    assert fab_order_id != store_order_id

    shop_floor = client.get("/fabrication/shop-floors", headers=fab).json()[0]
    assert shop_floor["orderId"] == fab_order_id

    # Без плана карту не подтвердить
    r = client.put("/kanban/confirm", json={"id": kanban_id, "status": "progress"}, headers=fab)
    assert r.status_code == 400
    assert r.json()["code"] == "PlanRequired"

    r = client.put(
        "/fabrication/shop-floors/plan",
        json={"id": shop_floor["id"], "planStart": "2026-03-01T08:00:00", "planFinish": "2026-03-01T17:00:00"},
        headers=fab,
    )
    assert r.status_code == 200, r.text

    r = client.put("/kanban/confirm", json={"id": kanban_id, "status": "progress"}, headers=fab)
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "progress"

    r = client.put("/kanban/confirm", json={"id": kanban_id, "status": "progress"}, headers=fab)
    assert r.json()["code"] == "NoOp"

    r = client.put("/kanban/confirm", json={"id": kanban_id, "status": "done"}, headers=fab)
    assert r.status_code == 200, r.text
    assert r.json()["finishDate"]

    fab_row = client.get("/fabrication/orders", headers=fab).json()[0]
    assert fab_row["status"] == "deliver"

    # Цех отгружает, склад принимает
    r = client.get(f"/fabrication/orders/deliver/{fab_row['id']}", headers=fab)
    assert r.status_code == 200, r.text

    part_row = client.get("/assembly-store/parts", headers=store).json()[0]
    assert part_row["status"] == "receive"
    r = client.put("/assembly-store/parts/status", json={"id": part_row["id"], "status": "idle"}, headers=store)
    assert r.status_code == 200, r.text
    assert r.json() == {"id": part_row["id"], "status": "idle", "stock": 5, "received": 5}

    r = client.put("/assembly-store/parts/status", json={"id": part_row["id"], "status": "idle"}, headers=store)
    assert r.json()["code"] == "InvalidTransition"

    # Склад выдаёт на линию
    r = client.post("/assembly-store/orders/status", json={"id": order_store["id"], "status": "deliver"}, headers=store)
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "finish"

    parts = client.get("/assembly-line/parts", headers=line).json()
    gear = next(p for p in parts["parts"] if p["partNumber"] == PART)
    assert gear["quantity"] == 25

    order = client.get(f"/orders/{fab_order_id}", headers=line).json()
    assert order["stationId"] == 2
    assert order["fabrication"]["status"] == "finish"
    assert order["kanban"]["status"] == "done"


def test_confirm_requires_station_access(client, auth_headers):
    fab = auth_headers(UserRole.FABRICATION_OPERATOR)
    r = client.post("/fabrication/orders", json={"partNumber": PART, "quantity": 2}, headers=fab)
    assert r.status_code == 201, r.text
    kanban_id = r.json()["kanbanId"]

    r = client.put(
        "/kanban/confirm",
        json={"id": kanban_id, "status": "progress"},
        headers=auth_headers(UserRole.ASSEMBLY_STORE_OPERATOR),
    )
    assert r.status_code == 403


def test_kanban_read_and_unknown(client, auth_headers):
    fab = auth_headers(UserRole.FABRICATION_OPERATOR)
    kanban_id = client.post("/fabrication/orders", json={"partNumber": PART, "quantity": 2}, headers=fab).json()["kanbanId"]

    r = client.get(f"/kanban/{kanban_id}", headers=fab)
    assert r.status_code == 200
    data = r.json()
    assert data["id"] == kanban_id
    assert data["status"] == "queue"
    assert data["qrCode"].startswith("data:image/png;base64,")

    r = client.get("/kanban/deadbeef-42", headers=fab)
    assert r.status_code == 404
    assert r.json()["code"] == "NotFound"


def test_domain_errors_render_message_and_code(client, auth_headers):
    line = auth_headers(UserRole.ASSEMBLY_LINE_OPERATOR)
    r = client.post("/assembly-line/orders", json={"partNumber": PART, "quantity": 0}, headers=line)
    assert r.status_code == 400
    assert r.json()["code"] == "InvalidQuantity"

    r = client.post("/assembly-line/orders", json={"partNumber": "nope", "quantity": 1}, headers=line)
    assert r.status_code == 404
    assert r.json()["code"] == "PartNotFound"

    r = client.put("/assembly-line/parts", json={"id": 1, "quantity": -2}, headers=line)
    assert r.json()["code"] == "InvalidQuantity"


def test_start_assembly_and_delete(client, auth_headers, seed):
    line = auth_headers(UserRole.ASSEMBLY_LINE_OPERATOR)
    r = client.post("/assembly-line/start", json={"componentId": seed.gearbox}, headers=line)
    assert r.status_code == 201, r.text
    order_id = r.json()["id"]

    board = client.get("/assembly-line/kanbans", headers=line).json()
    assert len(board["progress"]) == 1
    assert board["progress"][0]["type"] == "withdrawal"

    r = client.delete(f"/assembly-line/orders/{order_id}", headers=line)
    assert r.status_code == 200
    r = client.get(f"/orders/{order_id}", headers=line)
    assert r.status_code == 404
    assert r.json()["code"] == "OrderNotFound"


def test_delete_locked_order(client, auth_headers):
    fab = auth_headers(UserRole.FABRICATION_OPERATOR)
    order_id = client.post("/fabrication/orders", json={"partNumber": PART, "quantity": 2}, headers=fab).json()["id"]
    sf = client.get("/fabrication/shop-floors", headers=fab).json()[0]
    client.put(
        "/fabrication/shop-floors/plan",
        json={"id": sf["id"], "planStart": "2026-03-01T08:00:00", "planFinish": "2026-03-01T17:00:00"},
        headers=fab,
    )
    r = client.put("/fabrication/shop-floors/status", json={"id": sf["id"], "status": "in_progress"}, headers=fab)
    assert r.status_code == 200, r.text

    r = client.delete(f"/assembly-line/orders/{order_id}", headers=auth_headers(UserRole.MANAGER))
    assert r.status_code == 400
    assert r.json()["code"] == "OrderLocked"


def test_plan_accepts_camel_case_fields(client, auth_headers):
    fab = auth_headers(UserRole.FABRICATION_OPERATOR)
    client.post("/fabrication/orders", json={"partNumber": PART, "quantity": 2}, headers=fab)
    sf = client.get("/fabrication/shop-floors", headers=fab).json()[0]
    assert sf["timeRemaining"] is None

    r = client.put(
        "/fabrication/shop-floors/plan",
        json={"id": sf["id"], "planStart": "2026-03-01T08:00:00", "planFinish": "2026-03-01T17:00:00"},
        headers=fab,
    )
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["planStart"] == "2026-03-01T08:00:00"
    assert data["planFinish"] == "2026-03-01T17:00:00"
    assert data["actualStart"] is None

    r = client.put("/fabrication/shop-floors/plan", json={"id": sf["id"], "planStart": "2026-03-01T08:00:00"}, headers=fab)
    assert r.status_code == 400
    assert r.json()["code"] == "InvalidDate"
    assert "planFinish" in r.json()["message"]


def test_malformed_body_is_invalid_request(client, auth_headers):
    fab = auth_headers(UserRole.FABRICATION_OPERATOR)
    r = client.put("/kanban/confirm", json={"id": "x", "status": "bogus"}, headers=fab)
    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "InvalidRequest"
    assert "status" in body["message"]

    r = client.put("/assembly-line/parts", json={"quantity": 3}, headers=auth_headers(UserRole.ASSEMBLY_LINE_OPERATOR))
    assert r.status_code == 400
    assert r.json()["code"] == "InvalidRequest"
