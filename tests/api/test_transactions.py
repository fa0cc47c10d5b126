"""
Tests for payment, charge, expense and deposit endpoints.

These test the HTTP layer: status codes, response format and
error handling. Business rules are tested in tests/services.
"""

from decimal import Decimal


class TestCharges:

    def test_charge_returns_201(self, client, lease):
        response = client.post("/charges", json={
            "leaseId": lease.id,
            "amount": 1500,
            "accountCode": "4000",
            "description": "March rent",
            "entryDate": "2026-03-01",
        })
        assert response.status_code == 201
        data = response.json()
        assert len(data["entries"]) == 2
        assert Decimal(data["total_amount"]) == Decimal("1500")
        assert data["entries"][0]["entry_date"] == "2026-03-01"

    def test_snake_case_accepted(self, client, lease):
        response = client.post("/charges", json={
            "lease_id": lease.id,
            "amount": 25,
            "account_code": "4010",
        })
        assert response.status_code == 201

    def test_missing_lease_returns_400(self, client):
        response = client.post("/charges", json={
            "amount": 100, "accountCode": "4000",
        })
        assert response.status_code == 400
        assert response.json() == {
            "error": "VALIDATION_ERROR",
            "detail": "Lease ID is required",
        }

    def test_missing_account_code_rejected(self, client, lease):
        response = client.post("/charges", json={"leaseId": lease.id, "amount": 100})
        assert response.status_code == 422

    def test_unknown_lease_returns_404(self, client):
        response = client.post("/charges", json={
            "leaseId": 999, "amount": 100, "accountCode": "4000",
        })
        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"


class TestPayments:

    def test_payment_records_actor(self, client, lease):
        response = client.post(
            "/payments",
            json={"leaseId": lease.id, "amount": 200, "paymentDate": "2026-03-02"},
            headers={"X-Actor": "alice"},
        )
        assert response.status_code == 201
        entries = response.json()["entries"]
        assert {e["posted_by"] for e in entries} == {"alice"}
        assert {(e["account_code"], e["debit_credit"]) for e in entries} == {
            ("1000", "DR"), ("1200", "CR"),
        }

    def test_default_actor(self, client, lease):
        response = client.post("/payments", json={"leaseId": lease.id, "amount": 1})
        assert response.json()["entries"][0]["posted_by"] == "system"

    def test_negative_amount_returns_400(self, client, lease):
        response = client.post("/payments", json={"leaseId": lease.id, "amount": -5})
        assert response.status_code == 400
        assert response.json()["detail"] == "Amount must be greater than zero"
        assert client.get("/ledger").json() == []


class TestExpenses:

    def test_expense_returns_201(self, client):
        response = client.post("/expenses", json={
            "accountCode": "5010",
            "amount": 120.50,
            "description": "Water bill",
        })
        assert response.status_code == 201

    def test_income_account_rejected(self, client):
        response = client.post("/expenses", json={
            "accountCode": "4000",
            "amount": 10,
            "description": "Wrong",
        })
        assert response.status_code == 400


class TestDeposits:

    def test_receive_and_return(self, client, lease):
        received = client.post("/deposits/receive", json={
            "leaseId": lease.id, "amount": 1000,
        })
        assert received.status_code == 201

        returned = client.post("/deposits/return", json={
            "leaseId": lease.id,
            "refundAmount": 800,
            "deductions": [{"amount": 200, "description": "Cleaning"}],
        })
        assert returned.status_code == 201
        assert len(returned.json()["entries"]) == 4

        held = client.get("/ledger/accounts/2200/balance").json()
        assert Decimal(held["balance"]) == Decimal("0")

    def test_return_more_than_held(self, client, lease):
        response = client.post("/deposits/return", json={
            "leaseId": lease.id, "refundAmount": 50,
        })
        assert response.status_code == 400

    def test_return_with_long_deduction_description(self, client, lease):
        client.post("/deposits/receive", json={
            "leaseId": lease.id, "amount": 1000,
        })
        response = client.post("/deposits/return", json={
            "leaseId": lease.id,
            "refundAmount": 500,
            "deductions": [{"amount": 100, "description": "x" * 490}],
        })
        assert response.status_code == 201
        assert all(len(e["description"]) <= 500 for e in response.json()["entries"])
