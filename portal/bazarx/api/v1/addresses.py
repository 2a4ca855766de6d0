"""
Address Book API
"""
from fastapi import APIRouter, Depends, HTTPException, status

from bazarx.config import settings
from bazarx.dependencies import get_user_client, require_customer, upstream_http_error
from bazarx.models.user import SessionUser
from bazarx.schemas.address import (
    AddressFieldUpdate,
    AddressForm,
    AddressList,
    GeocodedAddress,
    GeocodeRequest,
    PlaceSearchRequest,
)
from bazarx.services.address_service import AddressNotFound, AddressValidationError, address_service
from bazarx.services.backend_client import BackendClient, BackendError
from bazarx.services.geocoding_service import GeocodingService, get_geocoding_service
from bazarx.services.validation import as_http_error

router = APIRouter()


@router.get("", response_model=AddressList)
async def list_addresses(
    current_user: SessionUser = Depends(require_customer),
    client: BackendClient = Depends(get_user_client),
):
    try:
        return AddressList(addresses=await address_service.list_addresses(client))
    except BackendError as exc:
        raise upstream_http_error(exc)


@router.post("", response_model=AddressList, status_code=status.HTTP_201_CREATED)
async def create_address(
    form: AddressForm,
    current_user: SessionUser = Depends(require_customer),
    client: BackendClient = Depends(get_user_client),
):
    """Validate, save, and return the refreshed address list."""
    try:
        return AddressList(addresses=await address_service.create_address(client, form))
    except AddressValidationError as exc:
        raise as_http_error(exc)
    except BackendError as exc:
        raise upstream_http_error(exc)


@router.put("/reset-default", response_model=AddressList)
async def reset_default_address(
    current_user: SessionUser = Depends(require_customer),
    client: BackendClient = Depends(get_user_client),
):
    try:
        return AddressList(addresses=await address_service.reset_default(client))
    except BackendError as exc:
        raise upstream_http_error(exc)


@router.put("/{address_id}", response_model=AddressList)
async def update_address(
    address_id: str,
    form: AddressForm,
    current_user: SessionUser = Depends(require_customer),
    client: BackendClient = Depends(get_user_client),
):
    try:
        return AddressList(addresses=await address_service.update_address(client, address_id, form))
    except AddressValidationError as exc:
        raise as_http_error(exc)
    except BackendError as exc:
        raise upstream_http_error(exc)


@router.patch("/{address_id}", response_model=AddressList)
async def update_address_field(
    address_id: str,
    update: AddressFieldUpdate,
    current_user: SessionUser = Depends(require_customer),
    client: BackendClient = Depends(get_user_client),
):
    """Edit the label or delivery instructions from the address menu."""
    try:
        return AddressList(addresses=await address_service.update_field(client, address_id, update.field, update.value))
    except AddressValidationError as exc:
        raise as_http_error(exc)
    except BackendError as exc:
        raise upstream_http_error(exc)


@router.put("/{address_id}/default", response_model=AddressList)
async def set_default_address(
    address_id: str,
    current_user: SessionUser = Depends(require_customer),
    client: BackendClient = Depends(get_user_client),
):
    try:
        return AddressList(addresses=await address_service.set_default(client, address_id))
    except AddressNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Address not found") from exc
    except BackendError as exc:
        raise upstream_http_error(exc)


@router.delete("/{address_id}", response_model=AddressList)
async def delete_address(
    address_id: str,
    current_user: SessionUser = Depends(require_customer),
    client: BackendClient = Depends(get_user_client),
):
    try:
        return AddressList(addresses=await address_service.delete_address(client, address_id))
    except BackendError as exc:
        raise upstream_http_error(exc)


@router.get("/map-defaults")
async def get_map_defaults(current_user: SessionUser = Depends(require_customer)):
    """Initial map position when the browser cannot provide one."""
    lat, lng = settings.DEFAULT_MAP_CENTER
    return {"lat": lat, "lng": lng, "country": settings.DEFAULT_COUNTRY}


@router.post("/geocode", response_model=GeocodedAddress)
async def reverse_geocode(
    position: GeocodeRequest,
    current_user: SessionUser = Depends(require_customer),
    geocoder: GeocodingService = Depends(get_geocoding_service),
):
    """
    Address fields for a map position

    Marker drag, map click, current location and autocomplete selection all
    land here. Lookup failures return blank fields.
    """
    return await geocoder.reverse_geocode(position.lat, position.lng)


@router.post("/search", response_model=GeocodedAddress)
async def search_place(
    search: PlaceSearchRequest,
    current_user: SessionUser = Depends(require_customer),
    geocoder: GeocodingService = Depends(get_geocoding_service),
):
    return await geocoder.forward_geocode(search.query)
