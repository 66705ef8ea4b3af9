"""
API tests for transaction endpoints.

Tests cover:
- Recording transactions with derived fields
- Query filters
- Single transaction lookup
- Error responses (400, 422)
- Health and root endpoints
"""

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient


# =============================================================================
# HELPER FIXTURES
# =============================================================================


@pytest.fixture
def recorded(client: TestClient) -> list[dict]:
    """Record an income, two expenses and a buy; return the response bodies."""
    payloads = [
        {"txn_type": "income", "asset": "USD", "account": "Bank", "quantity": "1000",
         "price_local": "1", "date": "2024-01-01", "fx_to_vnd": "25000", "tag": "Salary"},
        {"txn_type": "expense", "asset": "USD", "account": "Bank", "quantity": "40",
         "price_local": "1", "date": "2024-01-05", "fx_to_vnd": "25000", "tag": "Food"},
        {"txn_type": "expense", "asset": "USD", "account": "CreditCard", "quantity": "15",
         "price_local": "1", "date": "2024-01-06", "fx_to_vnd": "25000", "tag": "Food"},
        {"txn_type": "buy", "asset": "btc", "account": "Exchange", "quantity": "0.01",
         "price_local": "42000", "date": "2024-01-10", "fx_to_vnd": "25000"},
    ]
    return [client.post("/transactions", json=p).json() for p in payloads]


# =============================================================================
# CREATE TRANSACTION TESTS
# =============================================================================


class TestCreateTransactionAPI:
    """Tests for POST /transactions."""

    def test_create_expense_derives_cash_flow(self, client: TestClient):
        """
        GIVEN a valid expense of 12.50 USD
        WHEN I POST /transactions
        THEN response is 201 with negative delta and cash flow in both currencies
        """
        response = client.post("/transactions", json={
            "txn_type": "expense",
            "asset": "usd",
            "account": "Bank",
            "quantity": "12.50",
            "price_local": "1",
            "date": "2024-01-02",
            "fx_to_vnd": "25000",
            "tag": "Food",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["txn_id"]
        assert data["txn_type"] == "expense"
        assert data["asset"] == "USD"
        assert Decimal(data["delta_qty"]) == Decimal("-12.50")
        assert Decimal(data["cash_flow_usd"]) == Decimal("-12.50")
        assert Decimal(data["cash_flow_vnd"]) == Decimal("-312500")

    def test_create_vnd_income(self, client: TestClient):
        response = client.post("/transactions", json={
            "txn_type": "income",
            "asset": "VND",
            "account": "Cash",
            "quantity": "2500000",
            "price_local": "1",
            "date": "2024-01-02",
            "local_currency": "vnd",
            "fx_to_usd": "0.00004",
        })

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["cash_flow_usd"]) == Decimal("100")
        assert Decimal(data["cash_flow_vnd"]) == Decimal("2500000")

    def test_credit_card_expense_has_no_cash_flow(self, client: TestClient, recorded):
        card = recorded[2]

        assert Decimal(card["delta_qty"]) == Decimal("-15")
        assert Decimal(card["cash_flow_usd"]) == Decimal("0")

    def test_missing_fx_rate_returns_400(self, client: TestClient):
        """
        GIVEN a VND transaction without fx_to_usd
        WHEN I POST /transactions
        THEN response is 400 with a VALIDATION_ERROR body
        """
        response = client.post("/transactions", json={
            "txn_type": "income",
            "asset": "VND",
            "account": "Cash",
            "quantity": "100000",
            "price_local": "1",
            "date": "2024-01-02",
            "local_currency": "VND",
        })

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    @pytest.mark.parametrize("field,value", [
        ("quantity", "0"),
        ("quantity", "-5"),
        ("price_local", "-1"),
        ("txn_type", "gift"),
    ])
    def test_schema_violation_returns_422(self, client: TestClient, field, value):
        payload = {
            "txn_type": "expense",
            "asset": "USD",
            "account": "Bank",
            "quantity": "10",
            "price_local": "1",
            "date": "2024-01-02",
            "fx_to_vnd": "25000",
        }
        payload[field] = value

        response = client.post("/transactions", json=payload)

        assert response.status_code == 422

    def test_missing_date_returns_422(self, client: TestClient):
        """
        GIVEN an expense without a date
        WHEN I POST /transactions
        THEN response is 422 and nothing is recorded
        """
        response = client.post("/transactions", json={
            "txn_type": "expense",
            "asset": "USD",
            "account": "Bank",
            "quantity": "10",
            "price_local": "1",
            "fx_to_vnd": "25000",
        })

        assert response.status_code == 422
        assert client.get("/transactions").json()["count"] == 0

    @pytest.mark.parametrize("txn_type", ["stake", "unstake"])
    def test_stake_rows_rejected(self, client: TestClient, txn_type):
        """
        GIVEN a raw stake or unstake row
        WHEN I POST /transactions
        THEN response is 400 VALIDATION_ERROR and positions stay readable
        """
        response = client.post("/transactions", json={
            "txn_type": txn_type,
            "asset": "USDT",
            "account": "Wallet",
            "quantity": "100",
            "price_local": "1",
            "date": "2024-01-02",
            "fx_to_vnd": "25000",
        })

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"
        assert client.get("/transactions").json()["count"] == 0
        assert client.get("/investments").status_code == 200


# =============================================================================
# QUERY TRANSACTION TESTS
# =============================================================================


class TestQueryTransactionsAPI:
    """Tests for GET /transactions."""

    def test_list_all_in_date_order(self, client: TestClient, recorded):
        response = client.get("/transactions")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 4
        assert [t["date"] for t in data["transactions"]] == [
            "2024-01-01", "2024-01-05", "2024-01-06", "2024-01-10",
        ]

    def test_filter_by_type_and_account(self, client: TestClient, recorded):
        response = client.get(
            "/transactions",
            params={"txn_type": "expense", "account": "Bank"},
        )

        data = response.json()
        assert data["count"] == 1
        assert Decimal(data["transactions"][0]["quantity"]) == Decimal("40")

    def test_filter_by_date_range_and_asset(self, client: TestClient, recorded):
        response = client.get(
            "/transactions",
            params={"start": "2024-01-06", "end": "2024-01-31", "asset": "btc"},
        )

        data = response.json()
        assert data["count"] == 1
        assert data["transactions"][0]["asset"] == "BTC"

    def test_get_by_id(self, client: TestClient, recorded):
        txn_id = recorded[0]["txn_id"]

        response = client.get(f"/transactions/{txn_id}")

        assert response.status_code == 200
        assert response.json()["tag"] == "Salary"

    def test_unknown_id_returns_error_body(self, client: TestClient):
        response = client.get("/transactions/does-not-exist")

        assert response.status_code == 400
        assert response.json()["error"] == "NOT_FOUND"
        assert "does-not-exist" in response.json()["message"]


# =============================================================================
# SERVICE ENDPOINT TESTS
# =============================================================================


class TestServiceEndpoints:
    """Tests for /health and /."""

    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_root(self, client: TestClient):
        data = client.get("/").json()

        assert data["docs"] == "/docs"
        assert data["version"]
