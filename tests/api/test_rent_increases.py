"""
Tests for rent increase endpoints.
"""

from decimal import Decimal


def schedule(client, lease_id, **overrides):
    body = {
        "leaseId": lease_id,
        "newAmount": 1650,
        "effectiveDate": "2026-03-01",
        "noticeDate": "2026-01-15",
    }
    body.update(overrides)
    return client.post("/rent-increases", json=body)


class TestSchedule:

    def test_schedule_returns_201(self, client, lease):
        response = schedule(client, lease.id)
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "SCHEDULED"
        assert Decimal(data["previous_amount"]) == Decimal("1500")

    def test_missing_lease_returns_400(self, client):
        response = client.post("/rent-increases", json={
            "newAmount": 1650, "effectiveDate": "2026-03-01",
        })
        assert response.status_code == 400


class TestPendingAndApply:

    def test_pending_lists_due_increases(self, client, lease):
        schedule(client, lease.id)
        schedule(client, lease.id, effectiveDate="2026-09-01")
        data = client.get("/rent-increases/pending?asOfDate=2026-03-02").json()
        assert len(data) == 1

    def test_apply_pending_once(self, client, lease):
        schedule(client, lease.id)

        first = client.post(
            "/rent-increases/apply-pending",
            json={"asOfDate": "2026-03-02"},
            headers={"X-Actor": "manager"},
        ).json()
        second = client.post(
            "/rent-increases/apply-pending", json={"asOfDate": "2026-03-02"}
        ).json()

        assert first["applied"] == 1
        assert first["results"][0]["tenant_name"] == lease.tenant_name
        assert second["applied"] == 0
        assert second["errors"] == []


class TestCancel:

    def test_cancel(self, client, lease):
        increase_id = schedule(client, lease.id).json()["id"]
        response = client.post(f"/rent-increases/{increase_id}/cancel")
        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"

    def test_cancel_twice_returns_400(self, client, lease):
        increase_id = schedule(client, lease.id).json()["id"]
        client.post(f"/rent-increases/{increase_id}/cancel")
        response = client.post(f"/rent-increases/{increase_id}/cancel")
        assert response.status_code == 400

    def test_cancel_unknown_returns_404(self, client):
        assert client.post("/rent-increases/999/cancel").status_code == 404
