"""Caller identity and the access rules orders are guarded by.

Authentication happens upstream; what arrives here is who is calling and in
which role.
"""

from dataclasses import dataclass

from ordering.errors import AccessDenied

ADMIN = "admin"
CUSTOMER = "user"


@dataclass(frozen=True)
class Caller:
    user_id: str
    role: str = CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN

    def require_admin(self) -> None:
        if not self.is_admin:
            raise AccessDenied("Administrator access required")

    def can_access(self, order) -> bool:
        """Owners and administrators may read or cancel an order."""
        return self.is_admin or str(order.customer_id) == str(self.user_id)

    def require_access(self, order) -> None:
        if not self.can_access(order):
            raise AccessDenied()
