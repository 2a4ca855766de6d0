"""
Dashboard Schemas

``DashboardPayload`` is what the upstream aggregator returns; which fields are
present depends on the role. Everything else here is the rendered view tree.
"""
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DayTotal(BaseModel):
    """One bucket of a day-bucketed series"""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field("", alias="_id")
    total: Optional[float] = None

    @field_validator("id", mode="before")
    @classmethod
    def _blank_id(cls, value):
        return "" if value is None else str(value)


SERIES_FIELDS = (
    "recentOrders", "topProducts", "assignedWarehouses", "lowStockProducts",
    "recentProducts", "recentSubscribers", "subscriptionsByDay", "recentContacts",
    "contactsByDay", "revenueByDay", "ordersByDay",
)


class DashboardPayload(BaseModel):
    """Role-shaped aggregator payload; every field optional"""
    model_config = ConfigDict(extra="allow")

    role: Optional[str] = None
    # Admin
    cards: Optional[Dict[str, Any]] = None
    recentOrders: Optional[List[Dict[str, Any]]] = None
    topProducts: Optional[List[Dict[str, Any]]] = None
    orderStats: Optional[Dict[str, Any]] = None
    # Warehouse / Inventory
    assignedWarehouses: Optional[List[Dict[str, Any]]] = None
    lowStockProducts: Optional[List[Dict[str, Any]]] = None
    recentProducts: Optional[List[Dict[str, Any]]] = None
    # Marketing
    recentSubscribers: Optional[List[Dict[str, Any]]] = None
    subscriptionsByDay: Optional[List[DayTotal]] = None
    # Support
    userStats: Optional[Dict[str, Any]] = None
    contactStats: Optional[Dict[str, Any]] = None
    recentContacts: Optional[List[Dict[str, Any]]] = None
    contactsByDay: Optional[List[DayTotal]] = None
    # Finance
    revenueByDay: Optional[List[DayTotal]] = None
    ordersByDay: Optional[List[DayTotal]] = None

    @field_validator(*SERIES_FIELDS, mode="before")
    @classmethod
    def _drop_blank_rows(cls, value):
        # null or scalar rows carry nothing to render
        if isinstance(value, list):
            return [entry for entry in value if isinstance(entry, dict)]
        return value


# ---------- View tree ----------

class StatTile(BaseModel):
    kind: Literal["stat"] = "stat"
    label: str
    value: str
    icon: str
    color: str
    caption: Optional[str] = None


class SparkBar(BaseModel):
    label: str
    value: float
    height_pct: float
    title: str


class SparklineView(BaseModel):
    kind: Literal["sparkline"] = "sparkline"
    color: str
    bars: List[SparkBar]


class ProgressRow(BaseModel):
    label: str
    value: str
    width_pct: float


class BarListView(BaseModel):
    kind: Literal["bars"] = "bars"
    rows: List[ProgressRow]


class TableView(BaseModel):
    kind: Literal["table"] = "table"
    columns: List[str]
    rows: List[List[str]]
    empty_message: Optional[str] = None


class ListEntry(BaseModel):
    title: str
    subtitle: str = ""
    value: str = ""


class ListView(BaseModel):
    kind: Literal["list"] = "list"
    items: List[ListEntry]


class ChipsView(BaseModel):
    kind: Literal["chips"] = "chips"
    chips: List[ListEntry]


class EmptyState(BaseModel):
    kind: Literal["empty"] = "empty"
    message: str


class StatGroup(BaseModel):
    kind: Literal["stats"] = "stats"
    tiles: List[StatTile]


CardBody = Union[TableView, ListView, ChipsView, SparklineView, BarListView, EmptyState, StatGroup]


class SectionCard(BaseModel):
    kind: Literal["card"] = "card"
    title: str
    body: List[CardBody]


class GridRow(BaseModel):
    """A responsive grid row; ``columns`` is the widest breakpoint's column count"""
    columns: int
    items: List[Union[StatTile, SectionCard]]


class Banner(BaseModel):
    title: str
    subtitle: str
    gradient: str


class DashboardView(BaseModel):
    role: str
    branch: str
    banner: Banner
    rows: List[GridRow]


class ErrorPanel(BaseModel):
    title: str = "Unable to load dashboard"
    message: str


class DashboardPage(BaseModel):
    state: Literal["ready", "error"]
    view: Optional[DashboardView] = None
    error: Optional[ErrorPanel] = None


# ---------- Skeletons ----------

class SkeletonBlock(BaseModel):
    """One placeholder element: stat, stats, table, list, chips, sparkline or bars"""
    kind: str
    rows: int = 0
    cols: int = 0
    heights: List[int] = Field(default_factory=list)


class SkeletonCard(BaseModel):
    title: Optional[str] = None
    blocks: List[SkeletonBlock]


class SkeletonRow(BaseModel):
    columns: int
    items: List[Union[SkeletonBlock, SkeletonCard]]


class SkeletonView(BaseModel):
    branch: str
    gradient: str
    rows: List[SkeletonRow]
