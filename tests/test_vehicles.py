"""Tests for vehicle CRUD endpoints."""

import pytest
from httpx import AsyncClient


def _vehicle(customer_id: int, **overrides):
    data = {
        "customer_id": customer_id,
        "make": "Honda",
        "model": "Civic",
        "year": 2020,
        "license_plate": "XYZ-987",
        "vin": "2HGFC2F59LH000001",
    }
    data.update(overrides)
    return data


@pytest.mark.asyncio
async def test_vehicle_lists_owner_names(async_client: AsyncClient, admin_headers, garage):
    resp = await async_client.get("/api/vehicles", headers=admin_headers)
    assert resp.status_code == 200
    [vehicle] = resp.json()
    assert vehicle["license_plate"] == "ABC-123"
    assert vehicle["customer_first_name"] == "Jane"
    assert vehicle["customer_last_name"] == "Doe"


@pytest.mark.asyncio
async def test_get_vehicle_by_id(async_client: AsyncClient, admin_headers, garage):
    vid = garage["vehicle"]["id"]
    resp = await async_client.get(f"/api/vehicles/{vid}", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["id"] == vid
    assert resp.json()["vin"] == "1HGCM82633A004352"


@pytest.mark.asyncio
async def test_get_vehicle_not_found(async_client: AsyncClient, admin_headers):
    resp = await async_client.get("/api/vehicles/424242", headers=admin_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_create_vehicle_requires_existing_customer(async_client: AsyncClient, admin_headers):
    resp = await async_client.post("/api/vehicles", json=_vehicle(9999), headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json() == {"message": "Customer not found"}


@pytest.mark.asyncio
@pytest.mark.parametrize("field,value", [("license_plate", "abc-123"), ("vin", "1hgcm82633a004352")])
async def test_duplicate_plate_or_vin_is_conflict_without_db_detail(
    async_client: AsyncClient, admin_headers, garage, field, value
):
    body = _vehicle(garage["customer"]["id"], **{field: value})
    resp = await async_client.post("/api/vehicles", json=body, headers=admin_headers)
    assert resp.status_code == 409
    assert resp.json() == {"message": "Vehicle with this license plate or VIN already exists"}


@pytest.mark.asyncio
@pytest.mark.parametrize("year", [1800, 2500])
async def test_year_out_of_range(async_client: AsyncClient, admin_headers, garage, year):
    body = _vehicle(garage["customer"]["id"], year=year)
    resp = await async_client.post("/api/vehicles", json=body, headers=admin_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_update_vehicle(async_client: AsyncClient, admin_headers, garage):
    vid = garage["vehicle"]["id"]
    resp = await async_client.put(
        f"/api/vehicles/{vid}", json={"model": "Camry", "year": 2019}, headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["model"] == "Camry"
    assert resp.json()["make"] == "Toyota"


@pytest.mark.asyncio
async def test_update_vehicle_keeps_own_plate(async_client: AsyncClient, admin_headers, garage):
    vid = garage["vehicle"]["id"]
    resp = await async_client.put(
        f"/api/vehicles/{vid}", json={"license_plate": "ABC-123"}, headers=admin_headers
    )
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_delete_vehicle(async_client: AsyncClient, admin_headers, garage):
    vid = garage["vehicle"]["id"]
    resp = await async_client.delete(f"/api/vehicles/{vid}", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["id"] == vid
    assert (await async_client.get(f"/api/vehicles/{vid}", headers=admin_headers)).status_code == 404


@pytest.mark.asyncio
async def test_delete_invoiced_vehicle_is_conflict(async_client: AsyncClient, admin_headers, garage):
    await async_client.post(
        "/api/invoices",
        json={
            "customer_id": garage["customer"]["id"],
            "vehicle_id": garage["vehicle"]["id"],
            "items": [{"service_id": garage["oil"]["id"], "quantity": 1}],
        },
        headers=admin_headers,
    )
    resp = await async_client.delete(f"/api/vehicles/{garage['vehicle']['id']}", headers=admin_headers)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_referenced_vehicle_cannot_change_owner(async_client: AsyncClient, admin_headers, garage):
    other = await async_client.post(
        "/api/customers",
        json={"first_name": "Sam", "last_name": "Lee", "email": "sam@example.com"},
        headers=admin_headers,
    )
    vid = garage["vehicle"]["id"]
    await async_client.post(
        "/api/feedback",
        json={"customer_id": garage["customer"]["id"], "vehicle_id": vid, "rating": 5},
        headers=admin_headers,
    )

    resp = await async_client.put(
        f"/api/vehicles/{vid}", json={"customer_id": other.json()["id"]}, headers=admin_headers
    )
    assert resp.status_code == 409
    detail = await async_client.get(f"/api/vehicles/{vid}", headers=admin_headers)
    assert detail.json()["customer_id"] == garage["customer"]["id"]

    # Other edits on the same vehicle still go through
    same_owner = await async_client.put(
        f"/api/vehicles/{vid}",
        json={"customer_id": garage["customer"]["id"], "model": "Yaris"},
        headers=admin_headers,
    )
    assert same_owner.status_code == 200


@pytest.mark.asyncio
async def test_unreferenced_vehicle_can_change_owner(async_client: AsyncClient, admin_headers, garage):
    other = await async_client.post(
        "/api/customers",
        json={"first_name": "Sam", "last_name": "Lee", "email": "sam@example.com"},
        headers=admin_headers,
    )
    resp = await async_client.put(
        f"/api/vehicles/{garage['vehicle']['id']}",
        json={"customer_id": other.json()["id"]},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["customer_last_name"] == "Lee"


@pytest.mark.asyncio
async def test_vin_can_be_cleared(async_client: AsyncClient, admin_headers, garage):
    resp = await async_client.put(
        f"/api/vehicles/{garage['vehicle']['id']}", json={"vin": None, "make": None}, headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["vin"] is None
    assert resp.json()["make"] == "Toyota"
