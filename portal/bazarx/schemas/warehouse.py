"""
Warehouse Schemas
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

WEEK_DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
DEFAULT_DELIVERY_DAYS = list(WEEK_DAYS[:6])


class DeliveryHours(BaseModel):
    start: str = "09:00"
    end: str = "18:00"


class DeliverySettings(BaseModel):
    """Delivery rules of a warehouse; stored and shown, evaluated upstream"""
    isDeliveryEnabled: bool = True
    disabledMessage: str = ""
    is24x7Delivery: bool = True
    deliveryPincodes: List[str] = Field(default_factory=list)
    deliveryHours: DeliveryHours = Field(default_factory=DeliveryHours)
    deliveryDays: List[str] = Field(default_factory=lambda: list(DEFAULT_DELIVERY_DAYS))


class GeoPoint(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None


class Warehouse(BaseModel):
    """Warehouse form / upstream record"""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id")
    name: str = ""
    address: str = ""
    location: GeoPoint = Field(default_factory=GeoPoint)
    contactPhone: str = ""
    email: str = ""
    capacity: int = 0
    status: Optional[str] = None
    userId: Optional[str] = None
    deliverySettings: DeliverySettings = Field(default_factory=DeliverySettings)


class PincodeEdit(BaseModel):
    settings: DeliverySettings
    pincode: str
    action: str = Field("add", pattern="^(add|remove)$")


class DayToggle(BaseModel):
    settings: DeliverySettings
    day: str


class WarehouseSummary(BaseModel):
    id: Optional[str] = None
    name: str
    address: str
    delivery: str
    schedule: str


class WarehouseList(BaseModel):
    warehouses: List[Warehouse]
    summaries: List[WarehouseSummary]
    can_create: bool
    restricted: bool
