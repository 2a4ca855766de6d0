"""
Session user and role enumeration for RBAC
"""
from dataclasses import dataclass, field
from typing import Optional
import enum


class UserRole(str, enum.Enum):
    """User roles for RBAC"""
    ADMIN = "admin"
    ORDER_WAREHOUSE_MANAGEMENT = "order_warehouse_management"
    PRODUCT_INVENTORY_MANAGEMENT = "product_inventory_management"
    MARKETING_CONTENT_MANAGER = "marketing_content_manager"
    CUSTOMER_SUPPORT_EXECUTIVE = "customer_support_executive"
    REPORT_FINANCE_ANALYST = "report_finance_analyst"
    CUSTOMER = "user"


ADMIN_ROLES = (
    UserRole.ADMIN.value,
    UserRole.PRODUCT_INVENTORY_MANAGEMENT.value,
    UserRole.ORDER_WAREHOUSE_MANAGEMENT.value,
    UserRole.MARKETING_CONTENT_MANAGER.value,
    UserRole.CUSTOMER_SUPPORT_EXECUTIVE.value,
    UserRole.REPORT_FINANCE_ANALYST.value,
)


@dataclass
class SessionUser:
    """The user carried by a portal session.

    ``token`` is the upstream bearer token; it never leaves the portal.
    """
    id: str
    name: str
    email: str
    role: str
    token: str
    sid: str = ""
    phone: Optional[str] = None
    # Session expiry, epoch seconds
    expires_at: Optional[float] = None
    extra: dict = field(default_factory=dict)

    def __repr__(self):
        return f"<SessionUser {self.email} ({self.role})>"

    def has_role(self, *roles: str) -> bool:
        """Check if user has any of the specified roles"""
        return self.role in roles

    def is_admin(self) -> bool:
        """Check if user holds any of the admin-side roles"""
        return self.role in ADMIN_ROLES

    def is_superuser(self) -> bool:
        """Check if user is the full-access admin"""
        return self.role == UserRole.ADMIN.value

    def public_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "phone": self.phone,
            **self.extra,
        }
