"""
Warehouse Form Service

Delivery settings are edited and validated here; the rules are evaluated at
checkout by the upstream API.
"""
import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from bazarx.schemas.warehouse import (
    WEEK_DAYS,
    DeliverySettings,
    Warehouse,
    WarehouseSummary,
)
from bazarx.services.backend_client import BackendClient, BackendError
from bazarx.services.validation import FormValidationError

logger = logging.getLogger(__name__)

PINCODE_RE = re.compile(r"^\d{6}$")
TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

# Read-only on the upstream record; never sent back
READ_ONLY_FIELDS = ("status",)


class WarehouseValidationError(FormValidationError):
    pass


def validate_warehouse(warehouse: Warehouse) -> Warehouse:
    """
    Check a warehouse form before it is submitted

    Raises:
        WarehouseValidationError: with one message per failing field
    """
    errors: Dict[str, str] = {}
    if not warehouse.name.strip() or not warehouse.address.strip():
        errors["name"] = "Please select a location on the map and enter a warehouse name."

    ds = warehouse.deliverySettings
    if not ds.isDeliveryEnabled and not ds.disabledMessage.strip():
        errors["disabledMessage"] = "Please enter the message shown while delivery is disabled"
    if ds.isDeliveryEnabled and not ds.is24x7Delivery and not ds.deliveryPincodes:
        errors["deliveryPincodes"] = "Add at least one delivery pincode"
    bad_pincodes = [p for p in ds.deliveryPincodes if not PINCODE_RE.match(p)]
    if bad_pincodes:
        errors["deliveryPincodes"] = f"Invalid pincodes: {', '.join(bad_pincodes)}"
    if not ds.is24x7Delivery:
        unknown = [d for d in ds.deliveryDays if d not in WEEK_DAYS]
        if unknown:
            errors["deliveryDays"] = f"Unknown days: {', '.join(unknown)}"
        elif not ds.deliveryDays:
            errors["deliveryDays"] = "Select at least one delivery day"
        hours = ds.deliveryHours
        if not TIME_RE.match(hours.start) or not TIME_RE.match(hours.end):
            errors["deliveryHours"] = "Delivery hours must be in HH:MM format"

    if errors:
        raise WarehouseValidationError(errors)
    return warehouse


def add_pincode(settings: DeliverySettings, pincode: str) -> DeliverySettings:
    """Append a pincode; anything but a new 6-digit code leaves the settings unchanged."""
    code = (pincode or "").strip()
    if not PINCODE_RE.match(code) or code in settings.deliveryPincodes:
        return settings
    return settings.model_copy(update={"deliveryPincodes": [*settings.deliveryPincodes, code]})


def remove_pincode(settings: DeliverySettings, pincode: str) -> DeliverySettings:
    code = (pincode or "").strip()
    return settings.model_copy(update={"deliveryPincodes": [p for p in settings.deliveryPincodes if p != code]})


def toggle_day(settings: DeliverySettings, day: str) -> DeliverySettings:
    """Flip one week day; days stay in week order and unknown days are ignored."""
    if day not in WEEK_DAYS:
        return settings
    selected = set(settings.deliveryDays)
    selected.symmetric_difference_update({day})
    return settings.model_copy(update={"deliveryDays": [d for d in WEEK_DAYS if d in selected]})


def normalize_for_edit(raw: Dict[str, Any]) -> Warehouse:
    """Load an upstream record into the form, filling missing delivery settings with defaults."""
    data = {k: v for k, v in raw.items() if v is not None}
    settings = data.get("deliverySettings") or {}
    hours = {k: v for k, v in (settings.get("deliveryHours") or {}).items() if v is not None}
    data["deliverySettings"] = {
        **{k: v for k, v in settings.items() if v is not None and k != "deliveryHours"},
        "deliveryHours": hours,
    }
    return Warehouse.model_validate(data)


def summarize(warehouse: Warehouse) -> WarehouseSummary:
    """Coverage and schedule labels for the warehouse list."""
    ds = warehouse.deliverySettings
    if ds.is24x7Delivery:
        delivery = "All pincodes (Global)"
    elif ds.deliveryPincodes:
        delivery = f"{len(ds.deliveryPincodes)} pincodes"
    else:
        delivery = "No pincodes set"

    if not ds.isDeliveryEnabled:
        schedule = "Disabled"
    elif ds.is24x7Delivery:
        schedule = "24/7 Global Store"
    else:
        schedule = "Custom Hours"
    return WarehouseSummary(
        id=warehouse.id,
        name=warehouse.name,
        address=warehouse.address,
        delivery=delivery,
        schedule=schedule,
    )


class WarehouseService:

    async def list_warehouses(self, client: BackendClient) -> List[Warehouse]:
        data = await client.get("/warehouses")
        if isinstance(data, dict):
            data = data.get("warehouses", [])
        if not isinstance(data, list):
            raise BackendError("Could not load warehouses.")
        warehouses = []
        for raw in data:
            if not isinstance(raw, dict):
                continue
            try:
                warehouses.append(normalize_for_edit(raw))
            except ValidationError as exc:
                logger.warning("Skipping malformed warehouse %s: %s", raw.get("_id"), exc)
        return warehouses

    async def submit(self, client: BackendClient, warehouse: Warehouse, user_id: Optional[str]) -> Warehouse:
        """
        Create or update a warehouse

        Args:
            client: upstream client carrying the session token
            warehouse: form contents; an ``_id`` means update
            user_id: session user id, attached on create

        Returns:
            The warehouse as stored upstream
        """
        validate_warehouse(warehouse)
        body = warehouse.model_dump(mode="json", by_alias=True, exclude={"id", *READ_ONLY_FIELDS})
        if warehouse.id:
            data = await client.put(f"/warehouses/{warehouse.id}", body)
            logger.info("Warehouse %s updated", warehouse.id)
        else:
            if not user_id:
                raise WarehouseValidationError({"userId": "Please log in again"})
            body["userId"] = user_id
            data = await client.post("/warehouses", body)
            logger.info("Warehouse created by user %s", user_id)
        if isinstance(data, dict) and ("_id" in data or "name" in data):
            return normalize_for_edit(data)
        return warehouse

    async def delete(self, client: BackendClient, warehouse_id: str) -> None:
        await client.delete(f"/warehouses/{warehouse_id}")
        logger.info("Warehouse %s deleted", warehouse_id)


# Singleton
warehouse_service = WarehouseService()
