"""Role allow-lists and the resource/action policy."""

import pytest

from shopdesk.core.permissions import (
    ADMINS_ONLY,
    AccessPolicy,
    Action,
    Resource,
    can_access_route,
    default_policy,
    has_minimum_role,
)
from shopdesk.models.user import UserRole


class TestPolicyMatrix:
    def test_only_super_admin_deletes_products(self):
        assert default_policy.allowed_roles(Resource.PRODUCTS, Action.DELETE) == frozenset({UserRole.SUPER_ADMIN})

    def test_shop_agent_reads_products_but_cannot_edit(self):
        assert default_policy.can_perform_action(UserRole.SHOP_AGENT, Resource.PRODUCTS, Action.READ)
        assert not default_policy.can_perform_action(UserRole.SHOP_AGENT, Resource.PRODUCTS, Action.UPDATE)

    def test_warehouse_agent_updates_orders_but_cannot_create(self):
        assert default_policy.can_perform_action(UserRole.WAREHOUSE_AGENT, Resource.ORDERS, Action.UPDATE)
        assert not default_policy.can_perform_action(UserRole.WAREHOUSE_AGENT, Resource.ORDERS, Action.CREATE)

    def test_confirmer_has_no_default_grants(self):
        for resource in Resource:
            for action in Action:
                assert not default_policy.can_perform_action(UserRole.CONFIRMER, resource, action)

    def test_unknown_action_is_denied(self):
        assert default_policy.allowed_roles(Resource.DASHBOARD, Action.DELETE) == frozenset()

    def test_custom_policy_overrides_defaults(self):
        policy = AccessPolicy(permissions={Resource.DASHBOARD: {Action.READ: frozenset({UserRole.CONFIRMER})}})

        assert policy.can_perform_action(UserRole.CONFIRMER, Resource.DASHBOARD, Action.READ)
        assert not policy.can_perform_action(UserRole.ADMIN, Resource.DASHBOARD, Action.READ)

    def test_route_allow_list(self):
        assert can_access_route(UserRole.CONFIRMER, None)
        assert can_access_route(UserRole.ADMIN, ADMINS_ONLY)
        assert not can_access_route(UserRole.SHOP_AGENT, ADMINS_ONLY)

    def test_role_hierarchy(self):
        assert has_minimum_role(UserRole.SUPER_ADMIN, UserRole.ADMIN)
        assert not has_minimum_role(UserRole.SHOP_AGENT, UserRole.WAREHOUSE_AGENT)


class TestEndpointAccess:
    @pytest.mark.parametrize(
        "path",
        ["/api/products", "/api/stock", "/api/orders", "/api/salaries", "/api/dashboard/stats", "/api/admins"],
    )
    def test_anonymous_requests_get_401(self, client, path):
        assert client.get(path).status_code == 401

    @pytest.mark.parametrize(
        "role, path, expected",
        [
            (UserRole.SHOP_AGENT, "/api/products", 200),
            (UserRole.WAREHOUSE_AGENT, "/api/products", 403),
            (UserRole.SHOP_AGENT, "/api/stock", 403),
            (UserRole.ADMIN, "/api/stock", 200),
            (UserRole.WAREHOUSE_AGENT, "/api/orders", 200),
            (UserRole.CONFIRMER, "/api/orders", 403),
            (UserRole.WAREHOUSE_AGENT, "/api/scan-orders", 200),
            (UserRole.SHOP_AGENT, "/api/scan-orders", 403),
            (UserRole.ADMIN, "/api/charges", 200),
            (UserRole.SHOP_AGENT, "/api/ads-costs", 403),
            (UserRole.ADMIN, "/api/admins", 403),
            (UserRole.SUPER_ADMIN, "/api/admins", 200),
            (UserRole.WAREHOUSE_AGENT, "/api/dashboard/stats", 403),
        ],
    )
    def test_role_matrix(self, client, make_user, headers, role, path, expected):
        user = make_user(role)

        assert client.get(path, headers=headers(user)).status_code == expected

    def test_forbidden_response_shape(self, client, make_user, headers):
        user = make_user(UserRole.SHOP_AGENT)

        response = client.get("/api/stock", headers=headers(user))

        assert response.json() == {"error": "You do not have permission to access this resource"}

    def test_policy_denial_names_the_action(self, client, make_user, headers):
        user = make_user(UserRole.WAREHOUSE_AGENT)

        response = client.post("/api/orders", json={}, headers=headers(user))

        assert response.status_code == 403
        assert response.json()["error"] == "You do not have permission to create orders"
