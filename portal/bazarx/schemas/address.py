"""
Address Schemas
"""
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class AddressType(str, Enum):
    HOME = "Home"
    OFFICE = "Office"
    HOTEL = "Hotel"
    OTHER = "Other"


class AddressForm(BaseModel):
    """Address as entered in the add/edit modal"""
    model_config = ConfigDict(extra="ignore")

    type: AddressType = AddressType.HOME
    building: str = ""
    floor: Optional[str] = None
    area: str = ""
    landmark: Optional[str] = None
    city: str = ""
    state: str = ""
    country: str = ""
    pincode: str = ""
    phone: Optional[str] = None
    name: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None
    isDefault: Optional[bool] = None
    addressLabel: Optional[str] = None
    additionalInstructions: Optional[str] = None


class Address(AddressForm):
    """Saved address as returned by the upstream API"""
    model_config = ConfigDict(extra="allow")

    id: Union[int, str]
    isActive: Optional[bool] = None
    createdAt: Optional[int] = None
    updatedAt: Optional[int] = None


class AddressList(BaseModel):
    addresses: List[Address]


class AddressFieldUpdate(BaseModel):
    """Focused edit of one sub-field from the address menu"""
    field: str = Field(..., pattern="^(label|instruction)$")
    value: str = ""


class GeocodeRequest(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class PlaceSearchRequest(BaseModel):
    query: str = Field(..., min_length=1)


class GeocodedAddress(BaseModel):
    """Reverse-geocoding result; any field may be blank"""
    area: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    pincode: str = ""
    formatted_address: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None
