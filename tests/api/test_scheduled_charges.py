"""
Tests for scheduled charge endpoints.
"""

from decimal import Decimal


def create_schedule(client, lease_id, **overrides):
    body = {
        "leaseId": lease_id,
        "amount": 1500,
        "description": "Rent",
        "dayOfMonth": 1,
        "startDate": "2026-01-01",
    }
    body.update(overrides)
    return client.post("/scheduled-charges", json=body)


class TestCreate:

    def test_create_returns_201(self, client, lease):
        response = create_schedule(client, lease.id)
        assert response.status_code == 201
        assert response.json()["account_code"] == "4000"

    def test_bad_day_returns_400(self, client, lease):
        response = create_schedule(client, lease.id, dayOfMonth=0)
        assert response.status_code == 400

    def test_end_schedule(self, client, lease):
        schedule_id = create_schedule(client, lease.id).json()["id"]
        response = client.post(
            f"/scheduled-charges/{schedule_id}/end", json={"endDate": "2026-06-30"}
        )
        assert response.status_code == 200
        assert response.json()["end_date"] == "2026-06-30"

    def test_end_unknown_schedule_returns_404(self, client):
        response = client.post(
            "/scheduled-charges/999/end", json={"endDate": "2026-06-30"}
        )
        assert response.status_code == 404


class TestPendingAndPostDue:

    def test_pending(self, client, lease):
        create_schedule(client, lease.id)
        data = client.get("/scheduled-charges/pending?asOfDate=2026-03-02").json()
        assert data["count"] == 1
        assert Decimal(data["total_amount"]) == Decimal("1500")

    def test_post_due_twice(self, client, lease):
        create_schedule(client, lease.id)

        first = client.post(
            "/scheduled-charges/post-due", json={"asOfDate": "2026-03-02"}
        ).json()
        second = client.post(
            "/scheduled-charges/post-due", json={"asOfDate": "2026-03-02"}
        ).json()

        assert first["summary"] == {"total": 1, "posted": 1, "skipped": 0, "errors": 0}
        assert second["summary"] == {"total": 1, "posted": 0, "skipped": 1, "errors": 0}
        assert first["results"][0]["status"] == "POSTED"
        assert second["results"][0]["status"] == "SKIPPED"

        balance = client.get(f"/ledger/leases/{lease.id}/balance").json()
        assert Decimal(balance["balance"]) == Decimal("1500")

        pending = client.get("/scheduled-charges/pending?asOfDate=2026-03-02")
        assert pending.json()["count"] == 0

    def test_post_due_without_body(self, client):
        response = client.post("/scheduled-charges/post-due")
        assert response.status_code == 200
        assert response.json()["summary"]["total"] == 0
