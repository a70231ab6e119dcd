# src/tests/integration/test_api_holdings.py

import pytest
from fastapi.testclient import TestClient
from src.api.main import app # Import the FastAPI app instance
from decimal import Decimal

@pytest.fixture(scope="module")
def client():
    """Provides a TestClient for the FastAPI application."""
    with TestClient(app) as c:
        yield c

# Sample raw rows as delivered by the transaction store
def get_sample_transaction(code="BY", qty=100, net_rate=10.0, date_str="2023-01-02", seq=1, security_name="Astral Ltd.", account_id="8800046"):
    return {
        "accountId": account_id,
        "securityName": security_name,
        "securityCode": "ASTRAL",
        "date": date_str,
        "rawTypeCode": code,
        "quantity": qty,
        "rate": net_rate,
        "netRate": net_rate,
        "netAmount": -qty * net_rate if code == "BY" else qty * net_rate,
        "sequenceId": seq
    }

def get_sample_bonus(qty=20, ex_date="15-01-2023", account_id=None):
    return {"companyName": "ASTRAL LIMITED", "exDate": ex_date, "bonusShare": qty, "accountId": account_id}

@pytest.fixture
def sample_transactions():
    return [
        get_sample_transaction(),
        get_sample_transaction(qty=50, net_rate=12.0, date_str="2023-01-05", seq=2),
        get_sample_transaction(code="SL", qty=120, net_rate=15.0, date_str="2023-02-10", seq=3),
        get_sample_transaction(code="DIO", qty=0, net_rate=0, date_str="2023-03-01", seq=4),
    ]

def test_root_redirects_to_docs(client):
    response = client.get("/", follow_redirects=False)
    assert response.status_code in (302, 307)
    assert response.headers["location"] == "/docs"

def test_history_endpoint(client, sample_transactions):
    payload = {
        "accountId": "8800046",
        "securityName": "Astral Ltd.",
        "transactions": sample_transactions,
        "bonuses": [get_sample_bonus()]
    }
    response = client.post("/api/v1/holdings/history", json=payload)
    assert response.status_code == 200
    data = response.json()

    assert data["accountId"] == "8800046"
    assert data["securityCode"] == "ASTRAL"
    entries = data["entries"]
    assert [e["type"] for e in entries] == ["BY", "BY", "BONUS", "SL", "DIO"]
    assert entries[0]["date"] == "2023-01-02"
    assert entries[2]["isBonus"] is True
    assert Decimal(entries[2]["holding"]) == Decimal("170")
    assert Decimal(entries[3]["realizedPl"]) == Decimal("560")
    assert Decimal(entries[3]["holding"]) == Decimal("50")
    assert entries[4]["realizedPl"] is None
    assert Decimal(entries[4]["holding"]) == Decimal("50")

    summary = data["summary"]
    assert Decimal(summary["currentHolding"]) == Decimal("50")
    assert Decimal(summary["costBasis"]) == Decimal("360")
    assert Decimal(summary["totalBonusQty"]) == Decimal("20")
    assert Decimal(summary["profit"]) == Decimal("560")
    assert data["erroredRecords"] == []
    assert data["erroredGroups"] == []

def test_history_endpoint_reports_bad_rows(client, sample_transactions):
    bad_row = get_sample_transaction(date_str="not-a-date", seq=9)
    payload = {
        "accountId": "8800046",
        "securityName": "Astral Ltd.",
        "transactions": sample_transactions + [bad_row],
        "bonuses": [{"companyName": "ASTRAL LIMITED", "bonusShare": 5}]
    }
    response = client.post("/api/v1/holdings/history", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert [e["recordId"] for e in data["erroredRecords"]] == ["transactions[4]"]
    # Undated bonus lands on the sentinel date, ahead of every trade
    assert data["entries"][0]["type"] == "BONUS"
    assert data["entries"][0]["date"] == "1900-01-01"

def test_history_endpoint_as_of(client, sample_transactions):
    payload = {
        "accountId": 8800046,
        "securityName": "Astral Ltd.",
        "asOfDate": "10-01-2023",
        "transactions": sample_transactions,
        "bonuses": [get_sample_bonus()]
    }
    response = client.post("/api/v1/holdings/history", json=payload)
    assert response.status_code == 200
    assert len(response.json()["entries"]) == 2

def test_summary_endpoint_keeps_other_securities_when_a_row_overflows(client, sample_transactions):
    overflowing = get_sample_transaction(qty=0, net_rate=0, seq=9, security_name="Infosys Ltd")
    overflowing.update({"quantity": "1e-999999", "netAmount": "1e999999"})
    payload = {"accountId": "8800046", "transactions": sample_transactions + [overflowing]}
    response = client.post("/api/v1/holdings/summary", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert [h["securityName"] for h in data["holdings"]] == ["Astral Ltd."]
    assert [e["recordId"] for e in data["erroredRecords"]] == ["transactions[4]"]

def test_summary_endpoint_views(client, sample_transactions):
    transactions = sample_transactions + [
        get_sample_transaction(qty=10, net_rate=1500.0, seq=5, security_name="Infosys Ltd"),
        get_sample_transaction(code="SL", qty=10, net_rate=1600.0, date_str="2023-03-03", seq=6, security_name="Infosys Ltd"),
        get_sample_transaction(qty=1000, net_rate=1.0, seq=7, security_name="CASH"),
    ]
    for view, expected in (("ACTIVE", ["Astral Ltd."]), ("ALL_TRADED", ["Astral Ltd.", "Infosys Ltd"])):
        payload = {"accountId": "8800046", "view": view, "transactions": transactions, "bonuses": [get_sample_bonus()]}
        response = client.post("/api/v1/holdings/summary", json=payload)
        assert response.status_code == 200
        assert [h["securityName"] for h in response.json()["holdings"]] == expected

def test_summary_endpoint_rejects_unknown_view(client):
    response = client.post("/api/v1/holdings/summary", json={"accountId": "8800046", "view": "SOMETIMES"})
    assert response.status_code == 422

def test_summary_endpoint_requires_account(client, sample_transactions):
    response = client.post("/api/v1/holdings/summary", json={"transactions": sample_transactions})
    assert response.status_code == 422

def test_weighted_average_cost_endpoint(client, sample_transactions):
    payload = {"accountId": "8800046", "transactions": sample_transactions}
    response = client.post("/api/v1/holdings/weighted-average-cost", json=payload)
    assert response.status_code == 200
    costs = response.json()["costs"]
    assert len(costs) == 1
    assert Decimal(costs[0]["holding"]) == Decimal("30")
    assert Decimal(costs[0]["weightedAvgPrice"]) == Decimal("12")

def test_holders_endpoint(client, sample_transactions):
    transactions = sample_transactions + [get_sample_transaction(qty=5, seq=8, account_id="9900001")]
    payload = {"securityName": "ASTRAL LIMITED", "transactions": transactions, "bonuses": [get_sample_bonus()]}
    response = client.post("/api/v1/holdings/holders", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert [h["accountId"] for h in data["holders"]] == ["8800046", "9900001"]
    assert Decimal(data["totalHolding"]) == Decimal("75")

def test_bonus_match_endpoint(client):
    payload = {
        "companyName": "Astral Ltd.",
        "accountId": "8800046",
        "bonuses": [
            get_sample_bonus(),
            get_sample_bonus(account_id="9900001"),
            {"companyName": "Infosys Ltd", "exDate": "2023-01-01", "bonusShare": 1}
        ]
    }
    response = client.post("/api/v1/bonuses/match", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert data["normalizedCompanyName"] == "ASTRAL LTD"
    assert len(data["matchingBonuses"]) == 1
    assert Decimal(data["matchingBonuses"][0]["bonusShareQuantity"]) == Decimal("20")
