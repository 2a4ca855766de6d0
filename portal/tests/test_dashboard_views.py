import pytest

from bazarx.models.user import ADMIN_ROLES, UserRole
from bazarx.schemas.dashboard import (
    DashboardPayload,
    EmptyState,
    SectionCard,
    SparklineView,
    StatGroup,
    StatTile,
    TableView,
)
from bazarx.utils import formatting
from bazarx.views.components import MIN_BAR_HEIGHT_PCT, build_sparkline
from bazarx.views.dashboard import (
    DashboardBranch,
    average_daily,
    branch_for_role,
    render_dashboard,
    revenue_growth,
)
from bazarx.views.skeletons import SPARK_HEIGHTS, render_skeleton


def _tiles(view):
    return {item.label: item for row in view.rows for item in row.items if isinstance(item, StatTile)}


def _cards(view):
    return {item.title: item for row in view.rows for item in row.items if isinstance(item, SectionCard)}


# ---------- Formatting ----------

def test_as_number_tolerates_junk():
    assert formatting.as_number(None) == 0
    assert formatting.as_number(True) == 0
    assert formatting.as_number("12.5") == 12.5
    assert formatting.as_number("n/a") == 0


def test_rate_substitutes_one_for_zero_total():
    assert formatting.rate(5, 20) == 25
    assert formatting.rate(0, 0) == 0
    assert formatting.rate(3, 0) == 300


def test_percent_has_one_decimal():
    assert formatting.percent(12.34) == "12.3%"
    assert formatting.percent(0) == "0.0%"


def test_currency_uses_rupee():
    assert formatting.currency(1500).startswith("₹")
    assert formatting.currency(None) == formatting.currency(0)


# ---------- Sparkline ----------

def test_sparkline_scales_to_peak_with_floor():
    spark = build_sparkline([
        {"label": "Mon", "value": 0},
        {"label": "Tue", "value": 50},
        {"label": "Wed", "value": 200},
    ])
    heights = [bar.height_pct for bar in spark.bars]
    assert heights == [MIN_BAR_HEIGHT_PCT, 25, 100]
    assert spark.bars[1].title.startswith("Tue")


def test_sparkline_zero_fifty_hundred():
    spark = build_sparkline([{"label": str(v), "value": v} for v in (0, 50, 100)])
    assert [bar.height_pct for bar in spark.bars] == [MIN_BAR_HEIGHT_PCT, 50, 100]


def test_sparkline_all_zero_uses_floor():
    spark = build_sparkline([{"label": "a", "value": 0}, {"label": "b", "value": None}])
    assert [bar.height_pct for bar in spark.bars] == [MIN_BAR_HEIGHT_PCT, MIN_BAR_HEIGHT_PCT]


def test_sparkline_small_values_scale_against_one():
    spark = build_sparkline([{"label": "a", "value": 0.5}])
    assert spark.bars[0].height_pct == 50


# ---------- Dispatch ----------

def test_every_admin_role_has_a_branch():
    assert {b.value for b in DashboardBranch} == set(ADMIN_ROLES)


@pytest.mark.parametrize("role", [None, "", "user", "something_else"])
def test_unknown_roles_render_admin_branch(role):
    assert branch_for_role(role) is DashboardBranch.ADMIN
    assert render_dashboard(role, DashboardPayload()).branch == "admin"


@pytest.mark.parametrize("role", list(ADMIN_ROLES))
def test_empty_payload_never_raises(role):
    view = render_dashboard(role, None)
    assert view.branch == role
    assert view.rows
    for tile in _tiles(view).values():
        assert tile.value


def test_admin_branch():
    payload = DashboardPayload(
        cards={"totalUsers": 12, "totalProducts": 40, "totalRevenue": 1500},
        orderStats={"total": 7},
        recentOrders=[{
            "orderId": "ORD-1",
            "customerInfo": {"name": "Ravi"},
            "pricing": {"total": 250},
            "status": "new",
        }],
        topProducts=[{"name": "Rice", "sales": 3, "revenue": 150}],
        revenueByDay=[{"_id": "2024-05-01", "total": 100}, {"_id": "2024-05-02", "total": 400}],
        ordersByDay=[],
    )
    view = render_dashboard("admin", payload, name="Meera")
    assert view.banner.title == "Welcome back, Meera!"
    assert view.banner.gradient == "spectra-elm"
    tiles = _tiles(view)
    assert tiles["Total Users"].value == "12"
    assert tiles["Total Orders"].value == "7"
    assert tiles["Total Revenue"].value == formatting.currency(1500)

    cards = _cards(view)
    orders = cards["Recent Orders"].body[0]
    assert isinstance(orders, TableView)
    assert orders.columns == ["Order ID", "Customer", "Amount", "Status"]
    assert orders.rows == [["ORD-1", "Ravi", formatting.currency(250), "new"]]
    assert orders.empty_message is None
    assert cards["Top Products"].body[0].items[0].subtitle == "3 sales"

    revenue = cards["Revenue (7d)"].body[0]
    assert isinstance(revenue, SparklineView)
    assert [b.height_pct for b in revenue.bars] == [25, 100]
    assert isinstance(cards["Orders (7d)"].body[0], EmptyState)


def test_admin_banner_default_name():
    assert render_dashboard("admin", None).banner.title == "Welcome back, Admin!"


def test_warehouse_branch_assigned_warehouses_only_when_present():
    role = UserRole.ORDER_WAREHOUSE_MANAGEMENT.value
    without = render_dashboard(role, DashboardPayload(cards={"totalOrders": 3}))
    assert "Assigned Warehouses" not in _cards(without)
    assert _tiles(without)["Warehouses"].value == "0"

    payload = DashboardPayload(
        assignedWarehouses=[{"name": "North Hub", "address": "Delhi"}],
        recentOrders=[{"orderId": "A1", "warehouseInfo": {"warehouseName": "North Hub"}}],
        orderStats={"delivered": 4, "refunded": 1},
    )
    view = render_dashboard(role, payload)
    cards = _cards(view)
    assert cards["Assigned Warehouses"].body[0].chips[0].title == "North Hub"
    table = cards["Recent Orders"].body[0]
    assert table.columns[-1] == "Warehouse"
    assert table.rows[0][-1] == "North Hub"
    assert _tiles(view)["Delivered"].value == "4"
    assert cards["Orders Trend (7d)"].body[0].message == "No data available"


def test_inventory_branch_lists():
    payload = DashboardPayload(
        cards={"totalStockValue": 9000, "lowStock": 2},
        lowStockProducts=[{"name": "Oil", "stock": 2, "warehouse": {"name": "East"}}],
        recentProducts=[],
    )
    view = render_dashboard(UserRole.PRODUCT_INVENTORY_MANAGEMENT.value, payload)
    cards = _cards(view)
    low = cards["Low Stock Products"].body[0].items[0]
    assert (low.title, low.subtitle, low.value) == ("Oil", "Warehouse: East", "Stock: 2")
    assert cards["Recent Products"].body[0].message == "No recent products"
    assert _tiles(view)["Stock Value"].value == formatting.currency(9000)


def test_marketing_branch():
    payload = DashboardPayload(recentSubscribers=[
        {"email": "a@b.in", "source": None, "subscribedAt": None, "isSubscribed": False},
    ])
    view = render_dashboard(UserRole.MARKETING_CONTENT_MANAGER.value, payload)
    cards = _cards(view)
    table = cards["Recent Subscribers"].body[0]
    assert table.columns == ["Email", "Source", "Subscribed", "Status"]
    assert table.rows == [["a@b.in", "Direct", "", "Unsubscribed"]]
    assert cards["Subscriptions (7d)"].body[0].message == "No subscription data available"


def test_support_branch_reads_stats_objects():
    payload = DashboardPayload(
        userStats={"activeUsers": 8},
        contactStats={"pendingContacts": 2},
        cards={"totalUsers": 10},
        recentContacts=[{"name": "Ravi", "email": "r@x.in", "subject": "Late", "status": "new"}],
    )
    view = render_dashboard(UserRole.CUSTOMER_SUPPORT_EXECUTIVE.value, payload)
    tiles = _tiles(view)
    assert tiles["Total Users"].value == "10"
    assert tiles["Active Users"].value == "8"
    assert tiles["Pending Contacts"].value == "2"
    assert _cards(view)["Recent Enquiries"].body[0].rows[0] == ["Ravi", "r@x.in", "Late", "new"]


def test_finance_ratios():
    payload = DashboardPayload(
        orderStats={"total": 8, "delivered": 6, "cancelled": 1},
        revenueByDay=[{"_id": "2024-05-01", "total": 200}, {"_id": "2024-05-02", "total": 300}],
        ordersByDay=[{"_id": "2024-05-01", "total": 3}, {"_id": "2024-05-02", "total": 5}],
    )
    view = render_dashboard(UserRole.REPORT_FINANCE_ANALYST.value, payload)
    tiles = _tiles(view)
    assert tiles["Revenue Growth"].value == "50.0%"
    assert tiles["Cancellation Rate"].value == "12.5%"
    assert tiles["Success Rate"].value == "75.0%"
    assert tiles["Order Status"].value == "6"

    analytics = _cards(view)["Order Analytics"].body
    assert isinstance(analytics[0], SparklineView)
    assert isinstance(analytics[1], StatGroup)
    assert [(t.label, t.value) for t in analytics[1].tiles] == [("Peak Day", "5"), ("Avg Daily", "4")]
    bars = _cards(view)["Revenue Breakdown (Last 7 days)"].body[0]
    assert [r.width_pct for r in bars.rows] == pytest.approx([200 / 3, 100])


def test_finance_zero_totals():
    view = render_dashboard(UserRole.REPORT_FINANCE_ANALYST.value, DashboardPayload())
    tiles = _tiles(view)
    assert tiles["Revenue Growth"].value == "0.0%"
    assert tiles["Cancellation Rate"].value == "0.0%"
    cards = _cards(view)
    assert cards["Order Analytics"].body[0].message == "No order data available"
    assert cards["Revenue Breakdown (Last 7 days)"].body[0].message == "No revenue data available"


def test_revenue_growth_floors_denominator():
    series = DashboardPayload(revenueByDay=[{"_id": "a", "total": 0}, {"_id": "b", "total": 5}]).revenueByDay
    assert revenue_growth(series) == 500
    assert revenue_growth(series[:1]) == 0
    assert average_daily(series) == 2


NULL_ROWS_PAYLOAD = {
    "cards": {"totalUsers": None},
    "orderStats": None,
    "recentOrders": [None, {"orderId": "o1", "user": None, "amount": None}],
    "topProducts": [None],
    "assignedWarehouses": [None, {"name": "North"}],
    "lowStockProducts": [None, "junk"],
    "recentProducts": [None],
    "recentSubscribers": [None],
    "recentContacts": [None],
    "subscriptionsByDay": [None, {"_id": None, "total": None}],
    "contactsByDay": [{"_id": "2024-05-01", "total": None}],
    "revenueByDay": [{"_id": "2024-05-01", "total": None}, None, {"_id": "2024-05-02", "total": 120}],
    "ordersByDay": [{"_id": "2024-05-01", "total": None}, {"_id": "2024-05-02", "total": 6}],
}


@pytest.mark.parametrize("role", list(ADMIN_ROLES))
def test_null_totals_and_rows_render_as_zero(role):
    payload = DashboardPayload.model_validate(NULL_ROWS_PAYLOAD)
    assert payload.recentOrders == [{"orderId": "o1", "user": None, "amount": None}]
    assert payload.lowStockProducts == []
    assert payload.subscriptionsByDay[0].id == ""
    view = render_dashboard(role, payload)
    assert view.branch == role
    for tile in _tiles(view).values():
        assert tile.value


def test_null_series_totals_count_as_zero():
    payload = DashboardPayload.model_validate(NULL_ROWS_PAYLOAD)
    assert average_daily(payload.ordersByDay) == 3
    assert revenue_growth(payload.revenueByDay) == 12000
    view = render_dashboard(UserRole.REPORT_FINANCE_ANALYST.value, payload)
    analytics = _cards(view)["Order Analytics"].body
    assert [bar.value for bar in analytics[0].bars] == [0, 6]
    assert analytics[1].tiles[0].value == "6"

# ---------- Skeletons ----------

@pytest.mark.parametrize("role", list(ADMIN_ROLES))
def test_skeleton_mirrors_dashboard_layout(role):
    payload = DashboardPayload(assignedWarehouses=[{"name": "W"}])
    view = render_dashboard(role, payload)
    skeleton = render_skeleton(role)
    assert skeleton.branch == view.branch
    assert skeleton.gradient == view.banner.gradient
    assert [r.columns for r in skeleton.rows] == [r.columns for r in view.rows]
    assert [len(r.items) for r in skeleton.rows] == [len(r.items) for r in view.rows]
    for s_row, v_row in zip(skeleton.rows, view.rows):
        for s_item, v_item in zip(s_row.items, v_row.items):
            if isinstance(v_item, StatTile):
                assert s_item.kind == "stat"
            else:
                assert s_item.title == v_item.title


def test_skeleton_is_deterministic_and_defaults_to_admin():
    assert render_skeleton("nobody") == render_skeleton("admin")
    assert render_skeleton("admin") == render_skeleton("admin")
    spark = render_skeleton("admin").rows[2].items[0].blocks[0]
    assert spark.heights == list(SPARK_HEIGHTS)


def test_finance_skeleton_reserves_analytics_tiles():
    view = render_dashboard(UserRole.REPORT_FINANCE_ANALYST.value, DashboardPayload(
        ordersByDay=[{"_id": "2024-05-01", "total": 2}],
    ))
    analytics = _cards(view)["Order Analytics"].body
    card = next(item for item in render_skeleton(UserRole.REPORT_FINANCE_ANALYST.value).rows[1].items
                if item.title == "Order Analytics")
    assert [block.kind for block in card.blocks] == [item.kind for item in analytics]
    assert card.blocks[1].cols == len(analytics[1].tiles)
