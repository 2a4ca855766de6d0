"""
Warehouse Management API
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from bazarx.config.permissions import can_create_warehouse, is_warehouse_restricted
from bazarx.dependencies import get_user_client, require_section, upstream_http_error
from bazarx.models.user import SessionUser
from bazarx.schemas.auth import MessageResponse
from bazarx.schemas.warehouse import (
    DayToggle,
    DeliverySettings,
    PincodeEdit,
    Warehouse,
    WarehouseList,
)
from bazarx.services.backend_client import BackendClient, BackendError
from bazarx.services.validation import as_http_error
from bazarx.services.warehouse_service import (
    WarehouseValidationError,
    add_pincode,
    remove_pincode,
    summarize,
    toggle_day,
    validate_warehouse,
    warehouse_service,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=WarehouseList)
async def list_warehouses(
    current_user: SessionUser = Depends(require_section("warehouse")),
    client: BackendClient = Depends(get_user_client),
):
    """
    Warehouses visible to the session

    Warehouse and inventory roles receive only their assigned warehouses;
    the upstream API does the scoping.
    """
    try:
        warehouses = await warehouse_service.list_warehouses(client)
    except BackendError as exc:
        raise upstream_http_error(exc)
    return WarehouseList(
        warehouses=warehouses,
        summaries=[summarize(w) for w in warehouses],
        can_create=can_create_warehouse(current_user.role),
        restricted=is_warehouse_restricted(current_user.role),
    )


@router.post("", response_model=Warehouse, status_code=status.HTTP_201_CREATED)
async def create_warehouse(
    warehouse: Warehouse,
    current_user: SessionUser = Depends(require_section("warehouse")),
    client: BackendClient = Depends(get_user_client),
):
    if not can_create_warehouse(current_user.role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only administrators can create warehouses",
        )
    try:
        return await warehouse_service.submit(client, warehouse.model_copy(update={"id": None}), current_user.id)
    except WarehouseValidationError as exc:
        raise as_http_error(exc)
    except BackendError as exc:
        raise upstream_http_error(exc)


@router.put("/{warehouse_id}", response_model=Warehouse)
async def update_warehouse(
    warehouse_id: str,
    warehouse: Warehouse,
    current_user: SessionUser = Depends(require_section("warehouse")),
    client: BackendClient = Depends(get_user_client),
):
    try:
        return await warehouse_service.submit(client, warehouse.model_copy(update={"id": warehouse_id}), current_user.id)
    except WarehouseValidationError as exc:
        raise as_http_error(exc)
    except BackendError as exc:
        raise upstream_http_error(exc)


@router.delete("/{warehouse_id}", response_model=MessageResponse)
async def delete_warehouse(
    warehouse_id: str,
    current_user: SessionUser = Depends(require_section("warehouse")),
    client: BackendClient = Depends(get_user_client),
):
    try:
        await warehouse_service.delete(client, warehouse_id)
    except BackendError as exc:
        raise upstream_http_error(exc)
    return MessageResponse(message="Warehouse deleted")


@router.post("/validate", response_model=MessageResponse)
async def validate_warehouse_form(
    warehouse: Warehouse,
    current_user: SessionUser = Depends(require_section("warehouse")),
):
    """Run the form checks without saving."""
    try:
        validate_warehouse(warehouse)
    except WarehouseValidationError as exc:
        raise as_http_error(exc)
    return MessageResponse(message="Warehouse is valid")


@router.post("/pincodes", response_model=DeliverySettings)
async def edit_pincodes(
    edit: PincodeEdit,
    current_user: SessionUser = Depends(require_section("warehouse")),
):
    """Add or remove one delivery pincode; invalid or duplicate codes change nothing."""
    if edit.action == "remove":
        return remove_pincode(edit.settings, edit.pincode)
    return add_pincode(edit.settings, edit.pincode)


@router.post("/days", response_model=DeliverySettings)
async def toggle_delivery_day(
    toggle: DayToggle,
    current_user: SessionUser = Depends(require_section("warehouse")),
):
    return toggle_day(toggle.settings, toggle.day)
