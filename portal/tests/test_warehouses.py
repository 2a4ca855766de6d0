import asyncio
import json

import pytest

from bazarx.models.user import UserRole
from bazarx.schemas.warehouse import DeliveryHours, DeliverySettings, Warehouse
from bazarx.services.warehouse_service import (
    WarehouseValidationError,
    add_pincode,
    normalize_for_edit,
    remove_pincode,
    summarize,
    toggle_day,
    validate_warehouse,
    warehouse_service,
)

WAREHOUSES = "/api/warehouses"


def _warehouse(**settings):
    return Warehouse(
        name="North Hub",
        address="Sector 18, Noida",
        location={"lat": 28.57, "lng": 77.32},
        deliverySettings=DeliverySettings(**settings),
    )


def _errors(warehouse):
    with pytest.raises(WarehouseValidationError) as excinfo:
        validate_warehouse(warehouse)
    return excinfo.value.errors


# ---------- Validation ----------

def test_defaults_are_valid():
    assert validate_warehouse(_warehouse()).name == "North Hub"


def test_name_and_address_required():
    errors = _errors(Warehouse(name="  "))
    assert errors["name"] == "Please select a location on the map and enter a warehouse name."


def test_disabled_delivery_needs_message():
    errors = _errors(_warehouse(isDeliveryEnabled=False))
    assert list(errors) == ["disabledMessage"]
    validate_warehouse(_warehouse(isDeliveryEnabled=False, disabledMessage="Closed for Diwali"))


def test_custom_schedule_needs_pincodes():
    errors = _errors(_warehouse(is24x7Delivery=False))
    assert list(errors) == ["deliveryPincodes"]


def test_custom_schedule_checks_days_and_hours():
    errors = _errors(_warehouse(
        is24x7Delivery=False,
        deliveryPincodes=["110001", "11A"],
        deliveryDays=["Funday"],
        deliveryHours=DeliveryHours(start="9am", end="18:00"),
    ))
    assert errors == {
        "deliveryPincodes": "Invalid pincodes: 11A",
        "deliveryDays": "Unknown days: Funday",
        "deliveryHours": "Delivery hours must be in HH:MM format",
    }
    assert "deliveryDays" in _errors(_warehouse(
        is24x7Delivery=False, deliveryPincodes=["110001"], deliveryDays=[],
    ))


def test_global_store_ignores_schedule_fields():
    validate_warehouse(_warehouse(is24x7Delivery=True, deliveryDays=[], deliveryHours=DeliveryHours(start="x")))


# ---------- Pincodes and days ----------

def test_add_pincode_only_accepts_new_six_digit_codes():
    settings = DeliverySettings(deliveryPincodes=["110001"])
    assert add_pincode(settings, " 110002 ").deliveryPincodes == ["110001", "110002"]
    assert add_pincode(settings, "110001") is settings
    assert add_pincode(settings, "1100") is settings
    assert add_pincode(settings, "") is settings
    assert settings.deliveryPincodes == ["110001"]


def test_remove_pincode():
    settings = DeliverySettings(deliveryPincodes=["110001", "110002"])
    assert remove_pincode(settings, "110001").deliveryPincodes == ["110002"]
    assert remove_pincode(settings, "999999").deliveryPincodes == ["110001", "110002"]


def test_toggle_day_keeps_week_order():
    settings = DeliverySettings(deliveryDays=["Friday", "Monday"])
    assert toggle_day(settings, "Wednesday").deliveryDays == ["Monday", "Wednesday", "Friday"]
    assert toggle_day(settings, "Monday").deliveryDays == ["Friday"]
    assert toggle_day(settings, "Someday") is settings


def test_default_days_are_monday_to_saturday():
    assert DeliverySettings().deliveryDays == ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


# ---------- Normalize and summarize ----------

def test_normalize_fills_missing_settings():
    warehouse = normalize_for_edit({
        "_id": "w1",
        "name": "East",
        "address": "Kolkata",
        "deliverySettings": {"is24x7Delivery": False, "deliveryPincodes": None, "deliveryHours": {"start": None}},
    })
    assert warehouse.id == "w1"
    ds = warehouse.deliverySettings
    assert ds.is24x7Delivery is False
    assert ds.deliveryPincodes == []
    assert ds.deliveryHours.start == "09:00"


def test_normalize_drops_null_top_level_fields():
    warehouse = normalize_for_edit({
        "_id": "w1", "name": "A", "address": "x",
        "contactPhone": None, "email": None, "capacity": None, "location": None,
    })
    assert (warehouse.contactPhone, warehouse.email, warehouse.capacity) == ("", "", 0)
    assert warehouse.location.lat is None


@pytest.mark.parametrize("settings, delivery, schedule", [
    ({}, "All pincodes (Global)", "24/7 Global Store"),
    ({"is24x7Delivery": False, "deliveryPincodes": ["1", "2"]}, "2 pincodes", "Custom Hours"),
    ({"is24x7Delivery": False}, "No pincodes set", "Custom Hours"),
    ({"isDeliveryEnabled": False}, "All pincodes (Global)", "Disabled"),
])
def test_summarize(settings, delivery, schedule):
    summary = summarize(_warehouse(**settings))
    assert (summary.delivery, summary.schedule) == (delivery, schedule)


# ---------- Service ----------

def test_create_posts_with_user_id(upstream):
    upstream.json("POST", WAREHOUSES, {"_id": "w9", "name": "North Hub", "address": "Sector 18, Noida"})
    saved = asyncio.run(warehouse_service.submit(upstream.client(), _warehouse(), "u1"))
    body = json.loads(upstream.calls[0].content)
    assert body["userId"] == "u1"
    assert "_id" not in body
    assert body["deliverySettings"]["is24x7Delivery"] is True
    assert saved.id == "w9"


def test_create_without_user_is_rejected(upstream):
    with pytest.raises(WarehouseValidationError):
        asyncio.run(warehouse_service.submit(upstream.client(), _warehouse(), None))
    assert upstream.calls == []


def test_update_puts_without_read_only_fields(upstream):
    upstream.json("PUT", f"{WAREHOUSES}/w1", {"success": True})
    warehouse = _warehouse().model_copy(update={"id": "w1", "status": "active"})
    saved = asyncio.run(warehouse_service.submit(upstream.client(), warehouse, "u1"))
    body = json.loads(upstream.calls[0].content)
    assert "status" not in body and "_id" not in body
    assert "userId" not in body or body["userId"] is None
    assert saved is warehouse


def test_list_accepts_wrapped_payload(upstream):
    upstream.json("GET", WAREHOUSES, {"warehouses": [{"_id": "w1", "name": "A", "address": "B"}]})
    result = asyncio.run(warehouse_service.list_warehouses(upstream.client()))
    assert [w.id for w in result] == ["w1"]


def test_list_skips_malformed_records(upstream):
    upstream.json("GET", WAREHOUSES, [
        {"_id": "w1", "name": "A", "address": "x", "contactPhone": None, "capacity": None},
        {"_id": "w2", "name": "B", "capacity": "lots"},
    ])
    result = asyncio.run(warehouse_service.list_warehouses(upstream.client()))
    assert [w.id for w in result] == ["w1"]


def test_list_over_http_with_null_fields(client, upstream, session_headers):
    upstream.json("GET", WAREHOUSES, [{"_id": "w1", "name": "A", "address": "x", "contactPhone": None, "capacity": None}])
    response = client.get("/api/v1/admin/warehouses", headers=session_headers("admin"))
    assert response.status_code == 200
    assert response.json()["summaries"][0]["name"] == "A"


# ---------- HTTP ----------

def test_list_over_http_reports_capabilities(client, upstream, session_headers):
    upstream.json("GET", WAREHOUSES, [{"_id": "w1", "name": "A", "address": "B"}])
    data = client.get(
        "/api/v1/admin/warehouses",
        headers=session_headers(UserRole.ORDER_WAREHOUSE_MANAGEMENT.value),
    ).json()
    assert data["can_create"] is False
    assert data["restricted"] is True
    assert data["summaries"][0]["schedule"] == "24/7 Global Store"


def test_only_admin_creates(client, upstream, session_headers):
    body = _warehouse().model_dump(mode="json", by_alias=True)
    response = client.post(
        "/api/v1/admin/warehouses",
        headers=session_headers(UserRole.ORDER_WAREHOUSE_MANAGEMENT.value),
        json=body,
    )
    assert response.status_code == 403
    assert response.json()["detail"] == "Only administrators can create warehouses"
    assert upstream.calls == []


def test_admin_creates(client, upstream, session_headers):
    upstream.json("POST", WAREHOUSES, {"_id": "w2", "name": "North Hub", "address": "Sector 18, Noida"})
    body = _warehouse().model_dump(mode="json", by_alias=True)
    response = client.post("/api/v1/admin/warehouses", headers=session_headers("admin", user_id="a1"), json=body)
    assert response.status_code == 201
    assert response.json()["_id"] == "w2"
    assert json.loads(upstream.calls[0].content)["userId"] == "a1"


def test_invalid_form_is_422(client, upstream, session_headers):
    response = client.post(
        "/api/v1/admin/warehouses/validate",
        headers=session_headers("admin"),
        json={"name": "X", "address": "Y", "deliverySettings": {"isDeliveryEnabled": False}},
    )
    assert response.status_code == 422
    assert "disabledMessage" in response.json()["detail"]["errors"]


def test_pincode_and_day_endpoints(client, session_headers):
    headers = session_headers(UserRole.ORDER_WAREHOUSE_MANAGEMENT.value)
    added = client.post("/api/v1/admin/warehouses/pincodes", headers=headers, json={
        "settings": {"deliveryPincodes": ["110001"]}, "pincode": "110002",
    }).json()
    assert added["deliveryPincodes"] == ["110001", "110002"]

    removed = client.post("/api/v1/admin/warehouses/pincodes", headers=headers, json={
        "settings": added, "pincode": "110001", "action": "remove",
    }).json()
    assert removed["deliveryPincodes"] == ["110002"]

    toggled = client.post("/api/v1/admin/warehouses/days", headers=headers, json={
        "settings": {"deliveryDays": ["Monday"]}, "day": "Sunday",
    }).json()
    assert toggled["deliveryDays"] == ["Monday", "Sunday"]
