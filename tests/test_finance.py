"""Salaries, charges and advertising costs."""

from decimal import Decimal

from shopdesk.api.routes.ads_costs import cost_per_result
from shopdesk.api.routes.salaries import net_salary


class TestSalaries:
    def test_net_salary(self):
        assert net_salary(Decimal("3000"), Decimal("250.50"), Decimal("100")) == Decimal("3150.50")

    def test_create_computes_total(self, client, admin, headers):
        response = client.post(
            "/api/salaries",
            json={
                "employeeName": "Karim",
                "baseAmount": "3000",
                "bonus": "500",
                "deductions": "200",
                "month": 9,
                "year": 2026,
            },
            headers=headers(admin),
        )

        assert response.status_code == 201
        assert Decimal(response.json()["totalAmount"]) == Decimal("3300.00")

    def test_update_recomputes_total(self, client, admin, headers):
        created = client.post(
            "/api/salaries",
            json={"employeeName": "Karim", "baseAmount": "3000", "month": 9, "year": 2026},
            headers=headers(admin),
        ).json()

        response = client.put(f"/api/salaries/{created['id']}", json={"bonus": "150"}, headers=headers(admin))

        assert Decimal(response.json()["totalAmount"]) == Decimal("3150.00")

    def test_list_splits_paid_and_pending(self, client, admin, headers):
        for name, paid_at in (("Karim", "2026-09-30T10:00:00"), ("Nadia", None)):
            client.post(
                "/api/salaries",
                json={"employeeName": name, "baseAmount": "1000", "month": 9, "year": 2026, "paidAt": paid_at},
                headers=headers(admin),
            )
        client.post(
            "/api/salaries",
            json={"employeeName": "Old", "baseAmount": "999", "month": 8, "year": 2026},
            headers=headers(admin),
        )

        body = client.get("/api/salaries", params={"month": 9, "year": 2026}, headers=headers(admin)).json()

        assert body["total"] == 2
        assert Decimal(body["stats"]["totalPaid"]) == Decimal("1000.00")
        assert Decimal(body["stats"]["totalPending"]) == Decimal("1000.00")
        assert body["stats"]["paidCount"] == 1
        assert body["stats"]["pendingCount"] == 1

    def test_invalid_month_is_rejected(self, client, admin, headers):
        response = client.post(
            "/api/salaries",
            json={"employeeName": "Karim", "baseAmount": "1000", "month": 13, "year": 2026},
            headers=headers(admin),
        )

        assert response.status_code == 400

    def test_delete_and_missing(self, client, admin, headers):
        created = client.post(
            "/api/salaries",
            json={"employeeName": "Karim", "baseAmount": "1000", "month": 9, "year": 2026},
            headers=headers(admin),
        ).json()

        assert client.delete(f"/api/salaries/{created['id']}", headers=headers(admin)).status_code == 200
        response = client.get(f"/api/salaries/{created['id']}", headers=headers(admin))
        assert response.status_code == 404
        assert response.json()["error"] == "Salary not found"


class TestCharges:
    def test_other_requires_custom_type(self, client, admin, headers):
        response = client.post(
            "/api/charges",
            json={"type": "OTHER", "amount": "120", "chargeDate": "2026-10-01"},
            headers=headers(admin),
        )

        assert response.status_code == 400

    def test_create_and_summarise_by_type(self, client, admin, headers):
        for payload in (
            {"type": "RENT", "amount": "4000", "chargeDate": "2026-10-01"},
            {"type": "RENT", "amount": "4000", "chargeDate": "2026-09-01"},
            {"type": "OTHER", "customType": "Packaging", "amount": "150.25", "chargeDate": "2026-10-05"},
        ):
            assert client.post("/api/charges", json=payload, headers=headers(admin)).status_code == 201

        body = client.get("/api/charges", params={"fromDate": "2026-10-01"}, headers=headers(admin)).json()

        assert body["total"] == 2
        assert Decimal(body["totalAmount"]) == Decimal("4150.25")
        totals = {row["type"]: (Decimal(row["total"]), row["count"]) for row in body["byType"]}
        assert totals == {"RENT": (Decimal("4000.00"), 1), "OTHER": (Decimal("150.25"), 1)}

    def test_update_to_other_without_custom_type_is_rejected(self, client, admin, headers):
        created = client.post(
            "/api/charges",
            json={"type": "RENT", "amount": "4000", "chargeDate": "2026-10-01"},
            headers=headers(admin),
        ).json()

        response = client.put(f"/api/charges/{created['id']}", json={"type": "OTHER"}, headers=headers(admin))

        assert response.status_code == 400
        assert response.json()["error"] == "customType is required when type is OTHER"


class TestAdsCosts:
    def test_cost_per_result(self):
        assert cost_per_result(Decimal("100"), 3) == Decimal("33.33")
        assert cost_per_result(Decimal("100"), 0) == Decimal("0.00")

    def test_create_with_zero_results(self, client, admin, headers):
        response = client.post(
            "/api/ads-costs",
            json={"campaignName": "Ramadan promo", "platform": "FACEBOOK", "cost": "250", "campaignDate": "2026-10-01"},
            headers=headers(admin),
        )

        assert response.status_code == 201
        assert response.json()["results"] == 0
        assert Decimal(response.json()["costPerResult"]) == Decimal("0.00")

    def test_update_recomputes_cost_per_result(self, client, admin, headers):
        created = client.post(
            "/api/ads-costs",
            json={"campaignName": "Launch", "platform": "TIKTOK", "cost": "300", "campaignDate": "2026-10-01"},
            headers=headers(admin),
        ).json()

        response = client.put(f"/api/ads-costs/{created['id']}", json={"results": 12}, headers=headers(admin))

        assert Decimal(response.json()["costPerResult"]) == Decimal("25.00")

    def test_list_summary(self, client, admin, headers):
        for platform, cost, results in (("FACEBOOK", "100", 10), ("FACEBOOK", "50", 5), ("GOOGLE", "90", 0)):
            client.post(
                "/api/ads-costs",
                json={
                    "campaignName": f"{platform} campaign",
                    "platform": platform,
                    "cost": cost,
                    "results": results,
                    "campaignDate": "2026-10-01",
                },
                headers=headers(admin),
            )

        summary = client.get("/api/ads-costs", headers=headers(admin)).json()["summary"]

        assert Decimal(summary["totalCost"]) == Decimal("240.00")
        assert summary["totalResults"] == 15
        assert Decimal(summary["avgCostPerResult"]) == Decimal("16.00")
        facebook = next(row for row in summary["byPlatform"] if row["platform"] == "FACEBOOK")
        assert facebook["campaigns"] == 2
