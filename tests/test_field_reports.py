"""Tests for depots, missed orders, training logs and product complaints."""

import pytest
from httpx import AsyncClient

from conftest import API, create_client


# ── Depots ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_depot_defaults_to_blank_inspection(agent_client: AsyncClient):
    resp = await agent_client.post(f"{API}/depots", json={"name": "East Depot", "lat": 6.5, "lng": 3.4})
    assert resp.status_code == 201
    inspection = resp.json()["depot"]["inspection"]
    assert inspection == {
        "done": False,
        "hsFile": False,
        "housekeeping": 3,
        "hazLicense": False,
        "stockCounted": False,
        "notes": None,
    }


@pytest.mark.asyncio
async def test_depot_inspection_partial_update(agent_client: AsyncClient):
    created = (await agent_client.post(
        f"{API}/depots",
        json={"name": "East Depot", "lat": 6.5, "lng": 3.4,
              "inspection": {"done": True, "housekeeping": 4, "notes": "Tidy"}},
    )).json()["depot"]

    resp = await agent_client.patch(
        f"{API}/depots/{created['id']}",
        json={"name": "East Depot 2", "inspection": {"stockCounted": True}},
    )
    assert resp.status_code == 200
    depot = resp.json()["depot"]
    assert depot["name"] == "East Depot 2"
    assert depot["inspection"]["done"] is True
    assert depot["inspection"]["housekeeping"] == 4
    assert depot["inspection"]["stockCounted"] is True
    assert depot["inspection"]["notes"] == "Tidy"


@pytest.mark.asyncio
async def test_depot_housekeeping_score_is_bounded(agent_client: AsyncClient):
    resp = await agent_client.post(
        f"{API}/depots",
        json={"name": "West Depot", "lat": 0, "lng": 0, "inspection": {"housekeeping": 9}},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_depot_list_get_delete(agent_client: AsyncClient):
    for name in ("North Depot", "Central Depot"):
        await agent_client.post(f"{API}/depots", json={"name": name, "lat": 1, "lng": 1})

    depots = (await agent_client.get(f"{API}/depots")).json()["depots"]
    assert [d["name"] for d in depots] == ["Central Depot", "North Depot"]

    depot_id = depots[0]["id"]
    assert (await agent_client.get(f"{API}/depots/{depot_id}")).status_code == 200
    assert (await agent_client.delete(f"{API}/depots/{depot_id}")).status_code == 200
    resp = await agent_client.get(f"{API}/depots/{depot_id}")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Depot not found"


# ── Missed orders ───────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_missed_orders_by_client_newest_first(agent_client: AsyncClient):
    shop = await create_client(agent_client)
    kiosk = await create_client(agent_client, name="Kiosk")

    for client_id, product, date in (
        (shop["id"], "Cement", "2024-03-01T10:00:00Z"),
        (shop["id"], "Rebar", "2024-03-05T10:00:00Z"),
        (kiosk["id"], "Paint", "2024-03-03T10:00:00Z"),
    ):
        resp = await agent_client.post(
            f"{API}/missed-orders",
            json={"clientId": client_id, "product": product, "reason": "Out of stock", "date": date},
        )
        assert resp.status_code == 201
        assert resp.json()["missedOrder"]["client"]["id"] == client_id

    orders = (await agent_client.get(f"{API}/missed-orders", params={"clientId": shop["id"]})).json()
    assert [o["product"] for o in orders["missedOrders"]] == ["Rebar", "Cement"]

    everything = (await agent_client.get(f"{API}/missed-orders")).json()["missedOrders"]
    assert [o["product"] for o in everything] == ["Rebar", "Paint", "Cement"]


@pytest.mark.asyncio
async def test_missed_order_for_unknown_client_is_404(agent_client: AsyncClient):
    resp = await agent_client.post(
        f"{API}/missed-orders", json={"clientId": 999, "product": "Cement", "reason": "Price"}
    )
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Client not found"


@pytest.mark.asyncio
async def test_missed_order_get_and_delete(agent_client: AsyncClient):
    shop = await create_client(agent_client)
    order = (await agent_client.post(
        f"{API}/missed-orders", json={"clientId": shop["id"], "product": "Cement", "reason": "Price"}
    )).json()["missedOrder"]
    assert order["date"] is not None

    assert (await agent_client.get(f"{API}/missed-orders/{order['id']}")).status_code == 200
    assert (await agent_client.delete(f"{API}/missed-orders/{order['id']}")).status_code == 200
    assert (await agent_client.get(f"{API}/missed-orders/{order['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_client_with_missed_orders_cannot_be_deleted(agent_client: AsyncClient):
    shop = await create_client(agent_client)
    await agent_client.post(
        f"{API}/missed-orders", json={"clientId": shop["id"], "product": "Cement", "reason": "Price"}
    )
    assert (await agent_client.delete(f"{API}/clients/{shop['id']}")).status_code == 409


# ── Training logs ───────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_training_log_for_agent(agent_client: AsyncClient):
    me = (await agent_client.get(f"{API}/auth/me")).json()["user"]

    resp = await agent_client.post(
        f"{API}/training-logs", json={"agentId": me["id"], "description": "Product induction"}
    )
    assert resp.status_code == 201
    log = resp.json()["trainingLog"]
    assert log["agent"]["email"] == "alice@example.com"

    logs = (await agent_client.get(f"{API}/training-logs", params={"agentId": me["id"]})).json()
    assert [entry["id"] for entry in logs["trainingLogs"]] == [log["id"]]

    assert (await agent_client.delete(f"{API}/training-logs/{log['id']}")).status_code == 200
    assert (await agent_client.get(f"{API}/training-logs/{log['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_training_log_for_unknown_agent_is_404(agent_client: AsyncClient):
    resp = await agent_client.post(
        f"{API}/training-logs", json={"agentId": 999, "description": "Safety briefing"}
    )
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Agent not found"


@pytest.mark.asyncio
async def test_training_log_requires_description(agent_client: AsyncClient):
    me = (await agent_client.get(f"{API}/auth/me")).json()["user"]
    resp = await agent_client.post(f"{API}/training-logs", json={"agentId": me["id"], "description": " "})
    assert resp.status_code == 400


# ── Product complaints ──────────────────────────────────────────────
@pytest.mark.asyncio
async def test_product_complaint_crud(agent_client: AsyncClient):
    shop = await create_client(agent_client)

    resp = await agent_client.post(
        f"{API}/product-complaints",
        json={"clientId": shop["id"], "product": "Cement", "comment": "Bags arrived torn"},
    )
    assert resp.status_code == 201
    complaint = resp.json()["productComplaint"]
    assert complaint["client"]["name"] == "Corner Shop"

    resp = await agent_client.patch(
        f"{API}/product-complaints/{complaint['id']}", json={"comment": "Bags torn, replaced"}
    )
    assert resp.status_code == 200
    assert resp.json()["productComplaint"]["comment"] == "Bags torn, replaced"
    assert resp.json()["productComplaint"]["product"] == "Cement"

    listed = (await agent_client.get(f"{API}/product-complaints", params={"clientId": shop["id"]})).json()
    assert len(listed["productComplaints"]) == 1

    # Referenced by a complaint, so the client stays
    assert (await agent_client.delete(f"{API}/clients/{shop['id']}")).status_code == 409

    assert (await agent_client.delete(f"{API}/product-complaints/{complaint['id']}")).status_code == 200
    assert (await agent_client.get(f"{API}/product-complaints/{complaint['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_product_complaint_for_unknown_client_is_404(agent_client: AsyncClient):
    resp = await agent_client.post(
        f"{API}/product-complaints", json={"clientId": 999, "product": "Cement", "comment": "Damp"}
    )
    assert resp.status_code == 404
