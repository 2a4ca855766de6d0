"""
Permission registry: the single source of truth for admin sections, their routes,
the navigation menu and the per-role grants.
"""
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from bazarx.models.user import ADMIN_ROLES, UserRole

ADMIN_HOME = "/admin"

ALL_SECTIONS = {
    "home":             {"label": "Home",             "href": "/admin"},
    "users":            {"label": "Users",            "href": "/admin/users"},
    "reports":          {"label": "Reports",          "href": "/admin/reports"},
    "notices":          {"label": "Notice",           "href": "/admin/notices"},
    "brands":           {"label": "Brand",            "href": "/admin/brands"},
    "warehouse":        {"label": "Warehouses",       "href": "/admin/warehouse"},
    "categories":       {"label": "Categories",       "href": "/admin/categories"},
    "products":         {"label": "Products",         "href": "/admin/products"},
    "promocodes":       {"label": "Promocodes",       "href": "/admin/promocodes"},
    "taxes":            {"label": "Taxes",            "href": "/admin/taxes"},
    "delivery":         {"label": "Delivery Settings", "href": "/admin/delivery"},
    "orders":           {"label": "All Orders",       "href": "/admin/orders"},
    "banners":          {"label": "Banners",          "href": "/admin/banners"},
    "blog":             {"label": "Blog",             "href": "/admin/blog"},
    "newsletter":       {"label": "Newsletter",       "href": "/admin/newsletter"},
    "enquiry":          {"label": "Enquiry",          "href": "/admin/enquiry"},
    "reviews":          {"label": "Rating & Reviews", "href": "/admin/reviews"},
    "invoice-settings": {"label": "Invoice Settings", "href": "/admin/invoice-settings"},
    "contacts":         {"label": "Contacts",         "href": "/admin/contacts"},
}

# Ordered sidebar: (group title, [(item name, href, section)])
NAV_MENU: List[Tuple[str, List[Tuple[str, str, str]]]] = [
    ("Admin Dashboard", [
        ("Home", "/admin", "home"),
        ("Users", "/admin/users", "users"),
        ("Reports", "/admin/reports", "reports"),
        ("Notice", "/admin/notices", "notices"),
    ]),
    ("PRODUCTS", [
        ("Brand", "/admin/brands", "brands"),
        ("Warehouses", "/admin/warehouse", "warehouse"),
        ("Categories", "/admin/categories", "categories"),
        ("Products", "/admin/products", "products"),
        ("Promocodes", "/admin/promocodes", "promocodes"),
        ("Taxes", "/admin/taxes", "taxes"),
        ("Delivery Settings", "/admin/delivery", "delivery"),
    ]),
    ("ORDERS", [
        ("All Orders", "/admin/orders", "orders"),
        ("New Orders", "/admin/orders/new", "orders"),
        ("Processing Orders", "/admin/orders/processing", "orders"),
        ("Shipped Orders", "/admin/orders/shipped", "orders"),
        ("Delivered Orders", "/admin/orders/delivered", "orders"),
        ("Cancelled Orders", "/admin/orders/cancelled", "orders"),
        ("Refunded Orders", "/admin/orders/refunded", "orders"),
    ]),
    ("OTHER", [
        ("Banners", "/admin/banners", "banners"),
        ("Blog", "/admin/blog", "blog"),
        ("Newsletter", "/admin/newsletter", "newsletter"),
        ("Enquiry", "/admin/enquiry", "enquiry"),
        ("Rating & Reviews", "/admin/reviews", "reviews"),
        ("Invoice Settings", "/admin/invoice-settings", "invoice-settings"),
    ]),
]

FULL_ACCESS_ROLES = [UserRole.ADMIN.value]

# Grants: role -> set of section keys (admin holds everything)
ROLE_SECTIONS: Dict[str, FrozenSet[str]] = {
    UserRole.ADMIN.value: frozenset(ALL_SECTIONS),
    UserRole.MARKETING_CONTENT_MANAGER.value: frozenset({
        "home", "banners", "promocodes", "blog", "newsletter", "notices",
    }),
    UserRole.CUSTOMER_SUPPORT_EXECUTIVE.value: frozenset({
        "home", "users", "enquiry", "reviews", "orders", "contacts",
    }),
    UserRole.REPORT_FINANCE_ANALYST.value: frozenset({
        "home", "reports", "invoice-settings", "taxes", "delivery",
    }),
    UserRole.ORDER_WAREHOUSE_MANAGEMENT.value: frozenset({
        "home", "orders", "warehouse",
    }),
    UserRole.PRODUCT_INVENTORY_MANAGEMENT.value: frozenset({
        "home", "products", "brands", "categories",
    }),
}

ROLE_DISPLAY_NAMES = {
    UserRole.ADMIN.value: "Administrator",
    UserRole.MARKETING_CONTENT_MANAGER.value: "Marketing Manager",
    UserRole.CUSTOMER_SUPPORT_EXECUTIVE.value: "Support Executive",
    UserRole.REPORT_FINANCE_ANALYST.value: "Finance Analyst",
    UserRole.ORDER_WAREHOUSE_MANAGEMENT.value: "Warehouse Manager",
    UserRole.PRODUCT_INVENTORY_MANAGEMENT.value: "Inventory Manager",
}

# Long names used on the password reset page
ROLE_LONG_NAMES = {
    UserRole.ADMIN.value: "Admin",
    UserRole.PRODUCT_INVENTORY_MANAGEMENT.value: "Product & Inventory Management",
    UserRole.ORDER_WAREHOUSE_MANAGEMENT.value: "Order & Warehouse Management",
    UserRole.MARKETING_CONTENT_MANAGER.value: "Marketing & Content Manager",
    UserRole.CUSTOMER_SUPPORT_EXECUTIVE.value: "Customer Support Executive",
    UserRole.REPORT_FINANCE_ANALYST.value: "Report & Finance Analyst",
}


def _role_value(role) -> str:
    return role.value if hasattr(role, "value") else (role or "")


def is_admin_role(role) -> bool:
    """True for any of the six admin-side roles."""
    return _role_value(role) in ADMIN_ROLES


def sections_for_role(role) -> Tuple[str, ...]:
    """Sections granted to ``role`` in ALL_SECTIONS order. Unknown roles get none."""
    granted = ROLE_SECTIONS.get(_role_value(role), frozenset())
    return tuple(key for key in ALL_SECTIONS if key in granted)


def has_access_to_section(role, section: Optional[str]) -> bool:
    if not section:
        return False
    return section in ROLE_SECTIONS.get(_role_value(role), frozenset())


def route_prefixes_for_role(role) -> Set[str]:
    """Route prefixes reachable by ``role``, including menu sub-routes."""
    sections = set(sections_for_role(role))
    prefixes = {ALL_SECTIONS[key]["href"] for key in sections}
    for _, items in NAV_MENU:
        prefixes.update(href for _, href, section in items if section in sections)
    return prefixes


def section_for_route(path: str) -> Optional[str]:
    """Map an admin route onto its section.

    ``/admin`` itself only matches exactly; every other section matches its
    href and anything below it. Unknown routes map to None.
    """
    path = "/" + path.strip("/")
    if path == ADMIN_HOME:
        return "home"

    best = None
    best_len = 0
    for key, info in ALL_SECTIONS.items():
        href = info["href"]
        if href == ADMIN_HOME:
            continue
        if (path == href or path.startswith(href + "/")) and len(href) > best_len:
            best, best_len = key, len(href)
    return best


def can_access_route(role, path: str) -> bool:
    if not is_admin_role(role):
        return False
    return has_access_to_section(role, section_for_route(path))


def navigation_for_role(role) -> List[dict]:
    """Sidebar groups filtered to ``role``; empty groups are dropped."""
    menu = []
    for title, items in NAV_MENU:
        visible = [
            {"name": name, "href": href, "section": section}
            for name, href, section in items
            if has_access_to_section(role, section)
        ]
        if visible:
            menu.append({"title": title, "items": visible})
    return menu


def role_display_name(role) -> str:
    return ROLE_DISPLAY_NAMES.get(_role_value(role), "User")


def can_create_warehouse(role) -> bool:
    return _role_value(role) in FULL_ACCESS_ROLES


def is_warehouse_restricted(role) -> bool:
    """Warehouse and inventory roles only see their assigned warehouses."""
    return _role_value(role) in (
        UserRole.PRODUCT_INVENTORY_MANAGEMENT.value,
        UserRole.ORDER_WAREHOUSE_MANAGEMENT.value,
    )


def can_edit_own_content(role, user_id: str, created_by: Optional[str]) -> bool:
    if _role_value(role) in FULL_ACCESS_ROLES:
        return True
    return bool(created_by) and created_by == user_id
