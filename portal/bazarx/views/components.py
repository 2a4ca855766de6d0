"""
Building blocks shared by the dashboard branches
"""
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from bazarx.schemas.dashboard import (
    BarListView,
    ChipsView,
    DayTotal,
    EmptyState,
    GridRow,
    ListEntry,
    ListView,
    ProgressRow,
    SectionCard,
    SparkBar,
    SparklineView,
    StatTile,
    TableView,
)
from bazarx.utils import formatting

# Bars never shrink below this height so zero days stay visible
MIN_BAR_HEIGHT_PCT = 4


def field(obj: Optional[Dict[str, Any]], *path: str) -> Any:
    """Walk nested dicts; any missing hop yields None."""
    current: Any = obj
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def stat(label: str, value: str, icon: str, color: str, caption: Optional[str] = None) -> StatTile:
    return StatTile(label=label, value=value, icon=icon, color=color, caption=caption)


def count_stat(source: Optional[Dict[str, Any]], key: str, label: str, icon: str, color: str) -> StatTile:
    return stat(label, formatting.number(field(source, key)), icon, color)


def money_stat(source: Optional[Dict[str, Any]], key: str, label: str, icon: str, color: str) -> StatTile:
    return stat(label, formatting.currency(field(source, key)), icon, color)


def row(columns: int, *items) -> GridRow:
    return GridRow(columns=columns, items=list(items))


def card(title: str, *body) -> SectionCard:
    return SectionCard(title=title, body=list(body))


def series_points(series: Optional[Iterable[DayTotal]]) -> List[DayTotal]:
    return list(series or [])


def build_sparkline(
    points: Sequence[Dict[str, Any]],
    color: str = "emerald",
    formatter: Callable[[Any], str] = formatting.number,
) -> SparklineView:
    """
    Proportional bars scaled to the largest value of the series

    Args:
        points: sequence of ``{"label": str, "value": number}``
        color: bar colour token
        formatter: renders a value for the bar's tooltip

    Returns:
        SparklineView whose tallest bar is 100% high and whose shortest bar is
        never below MIN_BAR_HEIGHT_PCT
    """
    values = [formatting.as_number(p.get("value")) for p in points]
    peak = max([1, *values])
    bars = []
    for point, value in zip(points, values):
        label = str(point.get("label") or "")
        bars.append(SparkBar(
            label=label,
            value=value,
            height_pct=max(MIN_BAR_HEIGHT_PCT, value / peak * 100),
            title=f"{label} {formatter(value)}".strip(),
        ))
    return SparklineView(color=color, bars=bars)


def day_sparkline(series, color: str, formatter: Callable[[Any], str] = formatting.number) -> SparklineView:
    return build_sparkline(
        [{"label": d.id, "value": d.total} for d in series_points(series)],
        color=color,
        formatter=formatter,
    )


def sparkline_or_empty(series, color: str, empty_message: str,
                       formatter: Callable[[Any], str] = formatting.number):
    if not series_points(series):
        return EmptyState(message=empty_message)
    return day_sparkline(series, color, formatter)


def revenue_bars(series) -> BarListView:
    """Horizontal bars for the finance revenue breakdown, scaled to the best day."""
    points = series_points(series)
    peak = max([1, *(d.total or 0 for d in points)])
    return BarListView(rows=[
        ProgressRow(
            label=formatting.short_date(d.id) or d.id,
            value=formatting.currency(d.total),
            width_pct=min(100, (d.total or 0) / peak * 100),
        )
        for d in points
    ])


def table(columns: List[str], rows: List[List[Any]], empty_message: Optional[str] = None) -> TableView:
    return TableView(
        columns=columns,
        rows=[["" if cell is None else str(cell) for cell in r] for r in rows],
        empty_message=empty_message if not rows else None,
    )


def product_list(products: Optional[List[Dict[str, Any]]]) -> ListView:
    return ListView(items=[
        ListEntry(
            title=p.get("name") or p.get("productName") or "Product",
            subtitle=f"{formatting.number(p.get('sales'))} sales",
            value=formatting.currency(p.get("revenue")),
        )
        for p in products or []
    ])


def warehouse_chips(warehouses: Optional[List[Dict[str, Any]]]) -> ChipsView:
    return ChipsView(chips=[
        ListEntry(title=w.get("name") or "", subtitle=w.get("address") or "")
        for w in warehouses or []
    ])


def empty(message: str) -> EmptyState:
    return EmptyState(message=message)
