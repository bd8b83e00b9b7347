"""Role-based access policy.

Two layers decide whether a request may proceed: the allow-list a route
declares for itself, then the resource × action matrix below. The matrix is
plain data wrapped in :class:`AccessPolicy` so it can be swapped per app (or
per test) through the ``get_access_policy`` dependency.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping

from shopdesk.models.user import UserRole


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class Resource(str, Enum):
    PRODUCTS = "products"
    ORDERS = "orders"
    STOCK = "stock"
    SALARIES = "salaries"
    CHARGES = "charges"
    ADS_COSTS = "ads_costs"
    ADMINS = "admins"
    SCAN_ORDERS = "scan_orders"
    DASHBOARD = "dashboard"


ROLE_HIERARCHY: dict[UserRole, int] = {
    UserRole.CONFIRMER: 1,
    UserRole.SHOP_AGENT: 2,
    UserRole.WAREHOUSE_AGENT: 3,
    UserRole.ADMIN: 4,
    UserRole.SUPER_ADMIN: 5,
}

_SA = UserRole.SUPER_ADMIN
_A = UserRole.ADMIN
_SHOP = UserRole.SHOP_AGENT
_WH = UserRole.WAREHOUSE_AGENT

ADMINS_ONLY = frozenset({_SA, _A})


def _all_actions(roles: Iterable[UserRole]) -> dict[Action, frozenset[UserRole]]:
    allowed = frozenset(roles)
    return {action: allowed for action in Action}


DEFAULT_RESOURCE_PERMISSIONS: dict[Resource, dict[Action, frozenset[UserRole]]] = {
    Resource.PRODUCTS: {
        Action.CREATE: ADMINS_ONLY,
        Action.READ: frozenset({_SA, _A, _SHOP}),
        Action.UPDATE: ADMINS_ONLY,
        Action.DELETE: frozenset({_SA}),
    },
    Resource.ORDERS: {
        Action.CREATE: frozenset({_SA, _A, _SHOP}),
        Action.READ: frozenset({_SA, _A, _SHOP, _WH}),
        Action.UPDATE: frozenset({_SA, _A, _WH}),
        Action.DELETE: frozenset({_SA}),
    },
    Resource.STOCK: {
        Action.CREATE: ADMINS_ONLY,
        Action.READ: ADMINS_ONLY,
        Action.UPDATE: ADMINS_ONLY,
        Action.DELETE: frozenset({_SA}),
    },
    Resource.SALARIES: _all_actions(ADMINS_ONLY),
    Resource.CHARGES: _all_actions(ADMINS_ONLY),
    Resource.ADS_COSTS: _all_actions(ADMINS_ONLY),
    Resource.ADMINS: _all_actions({_SA}),
    Resource.SCAN_ORDERS: {
        Action.CREATE: frozenset({_SA, _A, _WH}),
        Action.READ: frozenset({_SA, _A, _WH}),
    },
    Resource.DASHBOARD: {
        Action.READ: ADMINS_ONLY,
    },
}


@dataclass(frozen=True)
class AccessPolicy:
    permissions: Mapping[Resource, Mapping[Action, frozenset[UserRole]]] = field(
        default_factory=lambda: DEFAULT_RESOURCE_PERMISSIONS
    )

    def allowed_roles(self, resource: Resource, action: Action) -> frozenset[UserRole]:
        return frozenset(self.permissions.get(resource, {}).get(action, frozenset()))

    def can_perform_action(self, role: UserRole, resource: Resource, action: Action) -> bool:
        return role in self.allowed_roles(resource, action)


default_policy = AccessPolicy()


def has_minimum_role(role: UserRole, minimum: UserRole) -> bool:
    return ROLE_HIERARCHY.get(role, 0) >= ROLE_HIERARCHY[minimum]


def can_access_route(role: UserRole, allowed: Iterable[UserRole] | None) -> bool:
    if allowed is None:
        return True
    return role in frozenset(allowed)
