"""User management by the super admin."""

from shopdesk.models.user import UserRole


class TestAdmins:
    def test_create_admin(self, client, super_admin, headers):
        response = client.post(
            "/api/admins",
            json={"phone": "07 11 22 33 44", "password": "secret123", "name": "Hind", "role": "WAREHOUSE_AGENT"},
            headers=headers(super_admin),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["phone"] == "0711223344"
        assert body["role"] == "WAREHOUSE_AGENT"
        assert body["isActive"] is True

        login = client.post("/api/auth/login", json={"phone": "0711223344", "password": "secret123"})
        assert login.status_code == 200

    def test_duplicate_phone_is_a_conflict(self, client, super_admin, admin, headers):
        response = client.post(
            "/api/admins",
            json={"phone": admin.phone, "password": "secret123", "name": "Copy"},
            headers=headers(super_admin),
        )

        assert response.status_code == 409

    def test_phone_is_required(self, client, super_admin, headers):
        response = client.post(
            "/api/admins",
            json={"email": "someone@example.com", "password": "secret123", "name": "No Phone"},
            headers=headers(super_admin),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Phone is required"

    def test_list_hides_shop_agents_and_inactive_by_default(self, client, super_admin, admin, shop_agent, make_user, headers):
        make_user(UserRole.ADMIN, is_active=False)

        body = client.get("/api/admins", headers=headers(super_admin)).json()
        ids = {user["id"] for user in body["users"]}
        assert ids == {super_admin.id, admin.id}

        with_agents = client.get(
            "/api/admins",
            params={"includeShopAgents": "true", "includeInactive": "true"},
            headers=headers(super_admin),
        ).json()
        assert with_agents["total"] == 4

        by_role = client.get("/api/admins", params={"role": "SHOP_AGENT"}, headers=headers(super_admin)).json()
        assert [user["id"] for user in by_role["users"]] == [shop_agent.id]

    def test_update_user(self, client, super_admin, admin, headers):
        response = client.put(
            f"/api/admins/{admin.id}",
            json={"name": "Amina K.", "role": "WAREHOUSE_AGENT"},
            headers=headers(super_admin),
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Amina K."
        assert response.json()["role"] == "WAREHOUSE_AGENT"

    def test_cannot_deactivate_or_demote_self(self, client, super_admin, headers):
        deactivate = client.put(f"/api/admins/{super_admin.id}", json={"isActive": False}, headers=headers(super_admin))
        demote = client.put(f"/api/admins/{super_admin.id}", json={"role": "ADMIN"}, headers=headers(super_admin))

        assert deactivate.status_code == 400
        assert demote.status_code == 400

    def test_delete_soft_deactivates(self, client, super_admin, admin, headers):
        response = client.delete(f"/api/admins/{admin.id}", headers=headers(super_admin))

        assert response.status_code == 200
        assert client.get("/api/auth/me", headers=headers(admin)).status_code == 401
        detail = client.get(f"/api/admins/{admin.id}", headers=headers(super_admin)).json()
        assert detail["isActive"] is False

    def test_cannot_delete_self(self, client, super_admin, headers):
        response = client.delete(f"/api/admins/{super_admin.id}", headers=headers(super_admin))

        assert response.status_code == 400
        assert response.json()["error"] == "You cannot delete your own account"

    def test_missing_user_is_404(self, client, super_admin, headers):
        assert client.get("/api/admins/999", headers=headers(super_admin)).status_code == 404
