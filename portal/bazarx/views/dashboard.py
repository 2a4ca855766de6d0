"""
Role-dispatched dashboard renderer

Each admin role has one branch: a pure function from the aggregator payload
to a DashboardView. The payload is trusted as delivered; the only numbers
computed here are display ratios.
"""
import enum
import logging
from typing import Callable, Dict, Optional

from bazarx.models.user import UserRole
from bazarx.schemas.dashboard import (
    Banner,
    DashboardPayload,
    DashboardView,
    ListEntry,
    ListView,
    StatGroup,
)
from bazarx.utils import formatting
from bazarx.views.components import (
    card,
    count_stat,
    day_sparkline,
    empty,
    field,
    money_stat,
    product_list,
    revenue_bars,
    row,
    series_points,
    sparkline_or_empty,
    stat,
    table,
    warehouse_chips,
)

logger = logging.getLogger(__name__)


class DashboardBranch(str, enum.Enum):
    """One rendering branch per admin role"""
    ADMIN = UserRole.ADMIN.value
    WAREHOUSE = UserRole.ORDER_WAREHOUSE_MANAGEMENT.value
    INVENTORY = UserRole.PRODUCT_INVENTORY_MANAGEMENT.value
    MARKETING = UserRole.MARKETING_CONTENT_MANAGER.value
    SUPPORT = UserRole.CUSTOMER_SUPPORT_EXECUTIVE.value
    FINANCE = UserRole.REPORT_FINANCE_ANALYST.value


BANNER_GRADIENTS = {
    DashboardBranch.ADMIN: "spectra-elm",
    DashboardBranch.WAREHOUSE: "indigo-blue",
    DashboardBranch.INVENTORY: "emerald-teal",
    DashboardBranch.MARKETING: "fuchsia-purple",
    DashboardBranch.SUPPORT: "sky-cyan",
    DashboardBranch.FINANCE: "amber-yellow",
}


def branch_for_role(role: Optional[str]) -> DashboardBranch:
    """Unrecognized roles render the admin branch."""
    try:
        return DashboardBranch(role)
    except ValueError:
        return DashboardBranch.ADMIN


def _banner(branch: DashboardBranch, name: Optional[str], default_name: str, subtitle: str) -> Banner:
    return Banner(
        title=f"Welcome back, {name or default_name}!",
        subtitle=subtitle,
        gradient=BANNER_GRADIENTS[branch],
    )


def _order_rows(orders, with_warehouse: bool = False):
    rows = []
    for o in orders or []:
        cells = [
            o.get("orderId"),
            field(o, "customerInfo", "name"),
            formatting.currency(field(o, "pricing", "total")),
            o.get("status"),
        ]
        if with_warehouse:
            cells.append(field(o, "warehouseInfo", "warehouseName"))
        rows.append(cells)
    return rows


# ---------- Branches ----------

def render_admin(payload: DashboardPayload, name: Optional[str]) -> DashboardView:
    cards = payload.cards
    return DashboardView(
        role=payload.role or DashboardBranch.ADMIN.value,
        branch=DashboardBranch.ADMIN.value,
        banner=_banner(DashboardBranch.ADMIN, name, "Admin", "Here's your store overview."),
        rows=[
            row(4,
                count_stat(cards, "totalUsers", "Total Users", "users", "blue"),
                count_stat(payload.orderStats, "total", "Total Orders", "shopping-cart", "green"),
                count_stat(cards, "totalProducts", "Total Products", "package", "purple"),
                money_stat(cards, "totalRevenue", "Total Revenue", "indian-rupee", "yellow")),
            row(2,
                card("Recent Orders", table(
                    ["Order ID", "Customer", "Amount", "Status"],
                    _order_rows(payload.recentOrders),
                    empty_message="No recent orders",
                )),
                card("Top Products", product_list(payload.topProducts))),
            row(2,
                card("Revenue (7d)", sparkline_or_empty(
                    payload.revenueByDay, "amber", "No data available", formatting.currency)),
                card("Orders (7d)", sparkline_or_empty(
                    payload.ordersByDay, "indigo", "No data available"))),
        ],
    )


def render_warehouse(payload: DashboardPayload, name: Optional[str]) -> DashboardView:
    cards = payload.cards
    stats = payload.orderStats
    warehouses = payload.assignedWarehouses or []
    rows = [
        row(4,
            count_stat(cards, "totalOrders", "Total Orders", "shopping-cart", "blue"),
            count_stat(cards, "todayOrders", "Today's Orders", "trending-up", "green"),
            count_stat(cards, "monthOrders", "This Month", "bar-chart", "purple"),
            count_stat(cards, "pendingOrders", "Pending Orders", "refresh", "orange")),
        row(3,
            money_stat(cards, "totalRevenue", "Total Revenue", "indian-rupee", "emerald"),
            money_stat(cards, "avgOrderValue", "Avg Order Value", "trending-up", "amber"),
            stat("Warehouses", formatting.number(len(warehouses)), "building", "indigo")),
        row(6,
            count_stat(stats, "new", "New", "package", "blue"),
            count_stat(stats, "processing", "Processing", "refresh", "yellow"),
            count_stat(stats, "shipped", "Shipped", "truck", "purple"),
            count_stat(stats, "delivered", "Delivered", "check-circle", "green"),
            count_stat(stats, "cancelled", "Cancelled", "x", "red"),
            count_stat(stats, "refunded", "Refunded", "refresh", "gray")),
    ]
    if warehouses:
        rows.append(row(1, card("Assigned Warehouses", warehouse_chips(warehouses))))
    rows += [
        row(2,
            card("Recent Orders", table(
                ["Order ID", "Customer", "Amount", "Status", "Warehouse"],
                _order_rows(payload.recentOrders, with_warehouse=True),
                empty_message="No recent orders",
            )),
            card("Top Products", product_list(payload.topProducts))),
        row(2,
            card("Orders Trend (7d)", sparkline_or_empty(
                payload.ordersByDay, "indigo", "No data available")),
            card("Revenue Trend (7d)", sparkline_or_empty(
                payload.revenueByDay, "emerald", "No data available", formatting.currency))),
    ]
    return DashboardView(
        role=payload.role or DashboardBranch.WAREHOUSE.value,
        branch=DashboardBranch.WAREHOUSE.value,
        banner=_banner(DashboardBranch.WAREHOUSE, name, "Manager",
                       "Here's your warehouse and order overview."),
        rows=rows,
    )


def _stock_list(products, with_date: bool = False) -> ListView:
    items = []
    for p in products:
        warehouse = field(p, "warehouse", "name") or "—"
        if with_date:
            subtitle = f"{warehouse} • {formatting.short_date(p.get('createdAt'))}"
        else:
            subtitle = f"Warehouse: {warehouse}"
        items.append(ListEntry(
            title=p.get("name") or "Product",
            subtitle=subtitle,
            value=f"Stock: {formatting.number(p.get('stock'))}",
        ))
    return ListView(items=items)


def render_inventory(payload: DashboardPayload, name: Optional[str]) -> DashboardView:
    cards = payload.cards
    warehouses = payload.assignedWarehouses or []
    low_stock = payload.lowStockProducts or []
    recent = payload.recentProducts or []
    rows = [
        row(4,
            count_stat(cards, "totalProducts", "Total Products", "package", "emerald"),
            count_stat(cards, "lowStock", "Low Stock", "refresh", "red"),
            count_stat(cards, "outOfStock", "Out of Stock", "x", "red"),
            count_stat(cards, "productsThisMonth", "This Month", "trending-up", "blue")),
        row(3,
            count_stat(cards, "brands", "Brands", "tag", "purple"),
            count_stat(cards, "categories", "Categories", "grid", "indigo"),
            money_stat(cards, "totalStockValue", "Stock Value", "indian-rupee", "amber")),
    ]
    if warehouses:
        rows.append(row(1, card("Assigned Warehouses", warehouse_chips(warehouses))))
    rows.append(row(
        2,
        card("Low Stock Products",
             _stock_list(low_stock) if low_stock else empty("No low stock products")),
        card("Recent Products",
             _stock_list(recent, with_date=True) if recent else empty("No recent products")),
    ))
    return DashboardView(
        role=payload.role or DashboardBranch.INVENTORY.value,
        branch=DashboardBranch.INVENTORY.value,
        banner=_banner(DashboardBranch.INVENTORY, name, "Manager",
                       "Here's your inventory and product overview."),
        rows=rows,
    )


def render_marketing(payload: DashboardPayload, name: Optional[str]) -> DashboardView:
    cards = payload.cards
    subscribers = [
        [
            s.get("email"),
            s.get("source") or "Direct",
            formatting.short_date(s.get("subscribedAt")),
            "Active" if s.get("isSubscribed", True) else "Unsubscribed",
        ]
        for s in payload.recentSubscribers or []
    ]
    return DashboardView(
        role=payload.role or DashboardBranch.MARKETING.value,
        branch=DashboardBranch.MARKETING.value,
        banner=_banner(DashboardBranch.MARKETING, name, "Manager",
                       "Here's your marketing and content overview."),
        rows=[
            row(4,
                count_stat(cards, "subscribers", "Active Subscribers", "users", "emerald"),
                count_stat(cards, "todaySubscribers", "Today's Subscribers", "trending-up", "green"),
                count_stat(cards, "monthSubscribers", "This Month", "bar-chart", "blue"),
                count_stat(cards, "totalSubscribers", "Total Subscribers", "users", "purple")),
            row(5,
                count_stat(cards, "banners", "Total Banners", "image", "pink"),
                count_stat(cards, "activeBanners", "Active Banners", "eye", "pink"),
                count_stat(cards, "blogs", "Total Blogs", "bar-chart", "indigo"),
                count_stat(cards, "publishedBlogs", "Published Blogs", "check-circle", "indigo"),
                count_stat(cards, "notices", "Notices", "bell", "amber")),
            row(1,
                card("Subscriptions (7d)", sparkline_or_empty(
                    payload.subscriptionsByDay, "fuchsia", "No subscription data available"))),
            row(1,
                card("Recent Subscribers", table(
                    ["Email", "Source", "Subscribed", "Status"],
                    subscribers,
                    empty_message="No recent subscribers",
                ))),
        ],
    )


def render_support(payload: DashboardPayload, name: Optional[str]) -> DashboardView:
    # Counters may arrive in cards or in the dedicated stats objects
    source = {**(payload.userStats or {}), **(payload.contactStats or {}), **(payload.cards or {})}
    contacts = [
        [c.get("name"), c.get("email"), c.get("subject"), c.get("status")]
        for c in payload.recentContacts or []
    ]
    return DashboardView(
        role=payload.role or DashboardBranch.SUPPORT.value,
        branch=DashboardBranch.SUPPORT.value,
        banner=_banner(DashboardBranch.SUPPORT, name, "Support",
                       "Here's your customer support overview."),
        rows=[
            row(4,
                count_stat(source, "totalUsers", "Total Users", "users", "blue"),
                count_stat(source, "activeUsers", "Active Users", "check-circle", "green"),
                count_stat(source, "newUsersToday", "New Users Today", "trending-up", "emerald"),
                count_stat(source, "newUsersMonth", "New Users Month", "bar-chart", "purple")),
            row(4,
                count_stat(source, "totalContacts", "Total Contacts", "mail", "indigo"),
                count_stat(source, "pendingContacts", "Pending Contacts", "refresh", "orange"),
                count_stat(source, "todayContacts", "Today's Contacts", "trending-up", "cyan"),
                count_stat(source, "monthContacts", "Month's Contacts", "bar-chart", "sky")),
            row(3,
                count_stat(source, "totalOrders", "Total Orders", "shopping-cart", "gray"),
                count_stat(source, "totalReviews", "Total Reviews", "eye", "amber"),
                count_stat(source, "pendingReviews", "Pending Reviews", "refresh", "red")),
            row(2,
                card("Recent Enquiries", table(
                    ["Name", "Email", "Subject", "Status"],
                    contacts,
                    empty_message="No recent enquiries",
                )),
                card("Contact Trends (7d)", sparkline_or_empty(
                    payload.contactsByDay, "sky", "No contact data available"))),
        ],
    )


def revenue_growth(series) -> float:
    """Change between the last two days, relative to the earlier one (floored at 1)."""
    points = series_points(series)
    if len(points) < 2:
        return 0.0
    last, prev = points[-1].total or 0, points[-2].total or 0
    return (last - prev) / max(1, prev) * 100


def average_daily(series) -> int:
    points = series_points(series)
    if not points:
        return 0
    return round(sum(d.total or 0 for d in points) / len(points))


def peak_day(series) -> float:
    return max((d.total or 0 for d in series_points(series)), default=0)


def render_finance(payload: DashboardPayload, name: Optional[str]) -> DashboardView:
    cards = payload.cards
    stats = payload.orderStats
    revenue = series_points(payload.revenueByDay)
    orders = series_points(payload.ordersByDay)

    if orders:
        analytics = [
            day_sparkline(orders, "indigo"),
            StatGroup(tiles=[
                stat("Peak Day", formatting.number(peak_day(orders)), "shopping-cart", "indigo"),
                stat("Avg Daily", formatting.number(average_daily(orders)), "bar-chart", "blue"),
            ]),
        ]
    else:
        analytics = [empty("No order data available")]

    return DashboardView(
        role=payload.role or DashboardBranch.FINANCE.value,
        branch=DashboardBranch.FINANCE.value,
        banner=_banner(DashboardBranch.FINANCE, name, "Analyst",
                       "Here's your revenue and finance overview."),
        rows=[
            row(6,
                money_stat(cards, "totalRevenue", "Total Revenue", "indian-rupee", "amber"),
                money_stat(cards, "revenueToday", "Today's Revenue", "trending-up", "green"),
                money_stat(cards, "revenueThisMonth", "This Month", "bar-chart", "indigo"),
                money_stat(cards, "avgOrderValue", "Avg Order Value", "trending-up", "purple"),
                count_stat(cards, "totalOrders", "Total Orders", "shopping-cart", "blue"),
                count_stat(cards, "taxes", "Tax Configurations", "percent", "rose")),
            row(2,
                card("Revenue Breakdown (Last 7 days)",
                     revenue_bars(revenue) if revenue else empty("No revenue data available")),
                card("Order Analytics", *analytics)),
            row(4,
                stat("Revenue Growth", formatting.percent(revenue_growth(revenue)), "trending-up", "green"),
                stat("Order Status", formatting.number(field(stats, "delivered")), "check-circle", "blue",
                     caption="Delivered"),
                stat("Cancellation Rate",
                     formatting.percent(formatting.rate(field(stats, "cancelled"), field(stats, "total"))),
                     "x", "red"),
                stat("Success Rate",
                     formatting.percent(formatting.rate(field(stats, "delivered"), field(stats, "total"))),
                     "check-circle", "green")),
        ],
    )


Renderer = Callable[[DashboardPayload, Optional[str]], DashboardView]

_RENDERERS: Dict[DashboardBranch, Renderer] = {
    DashboardBranch.ADMIN: render_admin,
    DashboardBranch.WAREHOUSE: render_warehouse,
    DashboardBranch.INVENTORY: render_inventory,
    DashboardBranch.MARKETING: render_marketing,
    DashboardBranch.SUPPORT: render_support,
    DashboardBranch.FINANCE: render_finance,
}

_unhandled = set(DashboardBranch) - set(_RENDERERS)
if _unhandled:
    raise RuntimeError(f"No dashboard renderer for: {sorted(b.value for b in _unhandled)}")


def render_dashboard(role: Optional[str], payload: Optional[DashboardPayload], name: Optional[str] = None) -> DashboardView:
    """
    Render the dashboard for a role

    Args:
        role: session role; unknown roles fall back to the admin branch
        payload: aggregator payload (None is treated as empty)
        name: display name for the welcome banner

    Returns:
        DashboardView
    """
    branch = branch_for_role(role)
    if branch.value != role:
        logger.debug("Role %r has no dashboard branch, using admin", role)
    return _RENDERERS[branch](payload or DashboardPayload(), name)
