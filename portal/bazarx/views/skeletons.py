"""
Loading placeholders

A skeleton repeats the row layout of the role's dashboard with grey blocks,
so nothing shifts when the real view replaces it.
"""
from typing import Optional

from bazarx.schemas.dashboard import SkeletonBlock, SkeletonCard, SkeletonRow, SkeletonView
from bazarx.views.dashboard import BANNER_GRADIENTS, DashboardBranch, branch_for_role

# Fixed bar pattern; placeholders must render identically every time
SPARK_HEIGHTS = (40, 65, 30, 80, 55, 70, 45)


def _tiles(n: int) -> SkeletonRow:
    return SkeletonRow(columns=n, items=[SkeletonBlock(kind="stat") for _ in range(n)])


def _card(title: Optional[str], *blocks: SkeletonBlock) -> SkeletonCard:
    return SkeletonCard(title=title, blocks=list(blocks))


def _table(rows: int, cols: int) -> SkeletonBlock:
    return SkeletonBlock(kind="table", rows=rows, cols=cols)


def _list(rows: int) -> SkeletonBlock:
    return SkeletonBlock(kind="list", rows=rows)


def _chips(rows: int) -> SkeletonBlock:
    return SkeletonBlock(kind="chips", rows=rows)


def _sparkline() -> SkeletonBlock:
    return SkeletonBlock(kind="sparkline", heights=list(SPARK_HEIGHTS))


def _bars(rows: int) -> SkeletonBlock:
    return SkeletonBlock(kind="bars", rows=rows)


def _stat_group(n: int) -> SkeletonBlock:
    return SkeletonBlock(kind="stats", cols=n)


def _cards(*cards: SkeletonCard) -> SkeletonRow:
    return SkeletonRow(columns=len(cards), items=list(cards))


_LAYOUTS = {
    DashboardBranch.ADMIN: lambda: [
        _tiles(4),
        _cards(_card("Recent Orders", _table(5, 4)), _card("Top Products", _list(5))),
        _cards(_card("Revenue (7d)", _sparkline()), _card("Orders (7d)", _sparkline())),
    ],
    DashboardBranch.WAREHOUSE: lambda: [
        _tiles(4),
        _tiles(3),
        _tiles(6),
        _cards(_card("Assigned Warehouses", _chips(4))),
        _cards(_card("Recent Orders", _table(5, 5)), _card("Top Products", _list(5))),
        _cards(_card("Orders Trend (7d)", _sparkline()), _card("Revenue Trend (7d)", _sparkline())),
    ],
    DashboardBranch.INVENTORY: lambda: [
        _tiles(4),
        _tiles(3),
        _cards(_card("Assigned Warehouses", _chips(3))),
        _cards(_card("Low Stock Products", _list(4)), _card("Recent Products", _list(4))),
    ],
    DashboardBranch.MARKETING: lambda: [
        _tiles(4),
        _tiles(5),
        _cards(_card("Subscriptions (7d)", _sparkline())),
        _cards(_card("Recent Subscribers", _table(3, 4))),
    ],
    DashboardBranch.SUPPORT: lambda: [
        _tiles(4),
        _tiles(4),
        _tiles(3),
        _cards(_card("Recent Enquiries", _table(4, 4)), _card("Contact Trends (7d)", _sparkline())),
    ],
    DashboardBranch.FINANCE: lambda: [
        _tiles(6),
        _cards(
            _card("Revenue Breakdown (Last 7 days)", _bars(7)),
            _card("Order Analytics", _sparkline(), _stat_group(2)),
        ),
        _tiles(4),
    ],
}

_missing = set(DashboardBranch) - set(_LAYOUTS)
if _missing:
    raise RuntimeError(f"No skeleton layout for: {sorted(b.value for b in _missing)}")


def render_skeleton(role: Optional[str]) -> SkeletonView:
    """Placeholder view for a role; unknown roles get the admin layout."""
    branch = branch_for_role(role)
    return SkeletonView(
        branch=branch.value,
        gradient=BANNER_GRADIENTS[branch],
        rows=_LAYOUTS[branch](),
    )
