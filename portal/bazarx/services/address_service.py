"""
Address Book Service

Every mutation is followed by a full re-fetch; the list returned to the
browser is always the server's list.
"""
import logging
import re
import time
from typing import Any, Dict, List, Union

from bazarx.config import settings
from bazarx.schemas.address import Address, AddressForm
from bazarx.services.backend_client import BackendAuthError, BackendClient, BackendError
from bazarx.services.validation import FormValidationError

logger = logging.getLogger(__name__)

PINCODE_RE = re.compile(r"^\d{6}$")

# Menu field name -> upstream key
EDITABLE_FIELDS = {
    "label": "addressLabel",
    "instruction": "additionalInstructions",
}

_TEXT_FIELDS = (
    "building", "floor", "area", "landmark", "city", "state", "country",
    "pincode", "phone", "name", "addressLabel", "additionalInstructions",
)


class AddressValidationError(FormValidationError):
    pass


class AddressNotFound(Exception):
    def __init__(self, address_id):
        super().__init__(f"Address {address_id} not found")
        self.address_id = address_id


def _is_complete(entry: Any) -> bool:
    """Entries missing an id or a usable location are hidden from the list."""
    return bool(
        isinstance(entry, dict)
        and entry.get("id")
        and (entry.get("building") or entry.get("area"))
        and entry.get("city")
        and entry.get("state")
        and entry.get("pincode")
    )


def validate_address(form: AddressForm) -> AddressForm:
    """
    Trim the form and check the required fields

    Args:
        form: address as entered

    Returns:
        Normalized copy of the form (country defaults to DEFAULT_COUNTRY)

    Raises:
        AddressValidationError: with one message per failing field
    """
    changes: Dict[str, Any] = {}
    for name in _TEXT_FIELDS:
        value = getattr(form, name)
        if isinstance(value, str):
            changes[name] = value.strip()
    if not changes.get("country"):
        changes["country"] = settings.DEFAULT_COUNTRY
    cleaned = form.model_copy(update=changes)

    errors: Dict[str, str] = {}
    if not cleaned.building and not cleaned.area:
        errors["building"] = "Please enter a building or an area"
    if not cleaned.city:
        errors["city"] = "City is required"
    if not cleaned.state:
        errors["state"] = "State is required"
    if not PINCODE_RE.match(cleaned.pincode):
        errors["pincode"] = "Please enter a valid 6-digit pincode"
    if errors:
        raise AddressValidationError(errors)
    return cleaned


class AddressService:

    async def list_addresses(self, client: BackendClient) -> List[Address]:
        data = await client.get("/user/addresses")
        entries = data.get("addresses") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            logger.warning("Unexpected address payload: %r", type(entries).__name__)
            raise BackendError("Invalid address data received")
        kept = [Address.model_validate(e) for e in entries if _is_complete(e)]
        if len(kept) != len(entries):
            logger.debug("Dropped %d incomplete addresses", len(entries) - len(kept))
        return kept

    async def create_address(self, client: BackendClient, form: AddressForm) -> List[Address]:
        cleaned = validate_address(form)
        body = cleaned.model_dump(mode="json", exclude_none=True)
        now = int(time.time() * 1000)
        body.update({"isActive": True, "createdAt": now, "updatedAt": now})
        await client.post("/user/addresses", body)
        return await self.list_addresses(client)

    async def update_address(
        self, client: BackendClient, address_id: Union[int, str], form: AddressForm
    ) -> List[Address]:
        cleaned = validate_address(form)
        body = cleaned.model_dump(mode="json", exclude_none=True)
        body.update({"id": address_id, "updatedAt": int(time.time() * 1000)})
        await client.put(f"/user/addresses/{address_id}", body)
        return await self.list_addresses(client)

    async def delete_address(self, client: BackendClient, address_id: Union[int, str]) -> List[Address]:
        await client.delete(f"/user/addresses/{address_id}")
        return await self.list_addresses(client)

    async def reset_default(self, client: BackendClient) -> List[Address]:
        await client.put("/user/addresses/reset-default", {})
        return await self.list_addresses(client)

    async def set_default(self, client: BackendClient, address_id: Union[int, str]) -> List[Address]:
        """
        Make one address the default

        The local list is patched first so exactly the target carries the flag,
        then the full address is PUT with ``isDefault`` and the list is fetched
        again whatever the outcome. The re-fetched list wins; if that fetch
        fails too, the patched list is returned.

        Raises:
            AddressNotFound: the id is not in the current list
            BackendError: the PUT failed (raised after the re-fetch)
        """
        current = await self.list_addresses(client)
        target = next((a for a in current if str(a.id) == str(address_id)), None)
        if target is None:
            raise AddressNotFound(address_id)

        optimistic = [a.model_copy(update={"isDefault": a.id == target.id}) for a in current]

        body = target.model_dump(mode="json", exclude_none=True)
        body.update({"isDefault": True, "updatedAt": int(time.time() * 1000)})
        failure = None
        try:
            await client.put(f"/user/addresses/{target.id}", body)
        except BackendError as exc:
            failure = exc

        try:
            reconciled = await self.list_addresses(client)
        except BackendAuthError:
            raise
        except BackendError as exc:
            logger.warning("Re-fetch after set-default failed: %s", exc)
            reconciled = optimistic

        if failure is not None:
            raise failure
        return reconciled

    async def update_field(
        self, client: BackendClient, address_id: Union[int, str], field: str, value: str
    ) -> List[Address]:
        """Edit the label or the delivery instructions only."""
        key = EDITABLE_FIELDS.get(field)
        if key is None:
            raise AddressValidationError({"field": f"Unknown address field: {field}"})
        await client.put(f"/user/addresses/{address_id}", {key: value.strip()})
        return await self.list_addresses(client)


# Singleton
address_service = AddressService()
