"""HTTP endpoints over in-memory stores."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from load_service.api.main import AppState, app
from load_service.api.routes.loads import get_consolidation_engine
from load_service.core.consolidation import LoadConsolidationEngine
from load_service.core.models.domain import LoadStatus, OrderStatus
from load_service.db.database import close_database, init_database
from load_service.db.memory import InMemoryLoadRepository

from builders import CENTER, make_order, window


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def client(engine):
    app.dependency_overrides[get_consolidation_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(order_repository):
    for order in (
        make_order("ORD_1", weight=5, time_window=window("08:00", "12:00")),
        make_order("ORD_2", weight=10, time_window=window("08:30", "12:00")),
        make_order("ORD_3", weight=40, time_window=window("09:00", "12:00")),
        make_order("ORD_EVENING", weight=1, time_window=window("18:00", "20:00"),
                   latitude=38.5816, longitude=-121.4944),
    ):
        run(order_repository.add(order))
    return order_repository


def group(client, **extra):
    payload = {"latitude": CENTER.latitude, "longitude": CENTER.longitude, **extra}
    return client.post("/api/v1/loads/group", json=payload)


def test_root_reports_service_up(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_group_creates_loads(client, seeded):
    response = group(client)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Created 2 load(s)"
    assert [l["order_ids"] for l in body["loads"]] == [["ORD_1", "ORD_2"], ["ORD_3"]]
    assert body["loads"][0]["status"] == "consolidated"
    assert body["loads"][0]["total_weight"] == 15


def test_group_applies_request_options(client, seeded):
    response = group(client, max_weight_kg=100)

    assert [l["order_ids"] for l in response.json()["loads"]] == [["ORD_1", "ORD_2", "ORD_3"]]


def test_group_validates_request(client):
    assert group(client, latitude=120).status_code == 422
    assert group(client, max_weight_kg=-1).status_code == 422


def test_list_and_get_loads(client, seeded, load_repository):
    created = group(client).json()["loads"]
    run(load_repository.create(["ORD_X"], 1, 0.001))

    listed = client.get("/api/v1/loads").json()["loads"]
    consolidated = client.get("/api/v1/loads", params={"status": "consolidated"}).json()["loads"]
    detail = client.get(f"/api/v1/loads/{created[0]['load_id']}")

    assert len(listed) == 3
    assert sorted(l["load_id"] for l in consolidated) == sorted(l["load_id"] for l in created)
    assert detail.status_code == 200
    assert detail.json()["load"]["order_ids"] == ["ORD_1", "ORD_2"]


def test_get_missing_load_is_404(client):
    assert client.get("/api/v1/loads/LOAD_MISSING").status_code == 404


def test_add_and_remove_order(client, seeded, load_repository):
    load_id = group(client).json()["loads"][0]["load_id"]

    removed = client.delete(f"/api/v1/loads/{load_id}/orders/ORD_2")
    assert removed.status_code == 200
    assert removed.json()["load"]["order_ids"] == ["ORD_1"]
    assert seeded.orders["ORD_2"].status == OrderStatus.PENDING

    added = client.post(f"/api/v1/loads/{load_id}/orders", json={"order_id": "ORD_2"})
    assert added.status_code == 200
    assert added.json()["message"] == "Order added to load successfully"
    assert load_repository.loads[load_id].order_ids == ["ORD_1", "ORD_2"]


def test_add_order_rejections(client, seeded):
    load_id = group(client).json()["loads"][0]["load_id"]

    missing_load = client.post("/api/v1/loads/LOAD_MISSING/orders", json={"order_id": "ORD_3"})
    missing_order = client.post(f"/api/v1/loads/{load_id}/orders", json={"order_id": "ORD_NONE"})
    too_heavy = client.post(f"/api/v1/loads/{load_id}/orders", json={"order_id": "ORD_3"})
    too_late = client.post(f"/api/v1/loads/{load_id}/orders", json={"order_id": "ORD_EVENING"})

    assert missing_load.status_code == 404
    assert missing_order.status_code == 404
    assert too_heavy.status_code == 400
    assert "capacity" in too_heavy.json()["detail"]
    assert too_late.status_code == 400
    assert "time window" in too_late.json()["detail"]


def test_re_adding_a_member_is_400(client, seeded, load_repository):
    load_id = group(client).json()["loads"][0]["load_id"]

    response = client.post(f"/api/v1/loads/{load_id}/orders", json={"order_id": "ORD_1"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Order is already part of this load"
    assert load_repository.loads[load_id].order_ids == ["ORD_1", "ORD_2"]


def test_remove_order_not_in_load_is_400(client, seeded):
    load_id = group(client).json()["loads"][0]["load_id"]

    response = client.delete(f"/api/v1/loads/{load_id}/orders/ORD_3")

    assert response.status_code == 400
    assert response.json()["detail"] == "Order is not part of this load"


def test_conflicts_endpoint(client, order_repository, load_repository):
    run(order_repository.add(make_order("ORD_1", special_instructions="Fragile door")))
    load = run(load_repository.create(["ORD_1"], 5, 0.003, LoadStatus.CONSOLIDATED))

    body = client.get(f"/api/v1/loads/{load.load_id}/conflicts").json()
    missing = client.get("/api/v1/loads/LOAD_MISSING/conflicts").json()

    assert body["has_conflicts"] is True
    assert body["conflicts"] == [
        "Load contains 1 orders with special instructions that may require attention"
    ]
    assert missing == {"load_id": "LOAD_MISSING", "conflicts": [], "has_conflicts": False}


def test_check_compatibility_does_not_modify(client, seeded, load_repository):
    load_id = group(client).json()["loads"][0]["load_id"]

    verdict = client.post(f"/api/v1/loads/{load_id}/check-compatibility", json={"order_id": "ORD_EVENING"})
    missing = client.post(f"/api/v1/loads/{load_id}/check-compatibility", json={"order_id": "ORD_NONE"})

    assert verdict.status_code == 200
    assert verdict.json()["is_compatible"] is False
    assert "time window" in verdict.json()["message"]
    assert missing.status_code == 404
    assert load_repository.loads[load_id].order_ids == ["ORD_1", "ORD_2"]


def test_finalization_failure_returns_500(order_repository, small_truck):
    class BrokenLoadRepository(InMemoryLoadRepository):
        async def create(self, *args, **kwargs):
            raise RuntimeError("load store unavailable")

    run(order_repository.add(make_order("ORD_1")))
    engine = LoadConsolidationEngine(order_repository, BrokenLoadRepository(), small_truck)
    app.dependency_overrides[get_consolidation_engine] = lambda: engine
    try:
        response = TestClient(app).post(
            "/api/v1/loads/group",
            json={"latitude": CENTER.latitude, "longitude": CENTER.longitude},
        )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json()["error"] == "Load consolidation failed"
    assert "committed loads: none" in response.json()["detail"]


def test_app_state_builds_one_engine(tmp_path):
    state = AppState()
    with pytest.raises(RuntimeError):
        state.get_engine()

    run(init_database(f"sqlite+aiosqlite:///{tmp_path / 'state.db'}"))
    try:
        state.initialize()
        assert state.get_engine() is state.get_engine()
        assert state.get_engine().default_options == state.default_options
    finally:
        state.shutdown()
        run(close_database())

    with pytest.raises(RuntimeError):
        state.get_engine()
