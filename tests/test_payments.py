# tests/test_payments.py
import pytest
from fastapi.testclient import TestClient


def _create_payment(client: TestClient, headers, **fields):
    payload = {"title": "Phone", "type": "mobile", "billing_day": 10, "amount": 500, "currency": "rub"}
    payload.update(fields)
    r = client.post("/payments/", json=payload, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()


def test_create_loan_with_computed_fields(client: TestClient, auth_headers):
    loan = _create_payment(
        client,
        auth_headers,
        title="Car loan",
        type="loan",
        day_of_month=15,
        principal_total=120000,
        interest_rate_apy=12,
        term_months=12,
        start_date="2024-01-15",
        account_currency="rub",
    )
    assert loan["annuity_payment"] == pytest.approx(10661.85, abs=0.05)
    assert loan["outstanding_balance"] is not None
    assert loan["next_due_date"].endswith("-15")
    assert loan["account_currency"] == "RUB"


def test_subscription_passes_renewal_through(client: TestClient, auth_headers):
    sub = _create_payment(client, auth_headers, title="Music", type="subscription", renewal_date="2030-05-01")
    assert sub["next_due_date"] == "2030-05-01"
    assert sub["days_left"] > 0
    assert sub["annuity_payment"] is None


def test_list_filters(client: TestClient, auth_headers):
    _create_payment(client, auth_headers)
    _create_payment(client, auth_headers, title="Gas", type="utilities", is_active=False)

    r = client.get("/payments/", headers=auth_headers)
    assert len(r.json()) == 2

    r = client.get("/payments/", params={"type": "utilities"}, headers=auth_headers)
    assert [p["title"] for p in r.json()] == ["Gas"]

    r = client.get("/payments/", params={"active": "true"}, headers=auth_headers)
    assert [p["title"] for p in r.json()] == ["Phone"]

    assert client.get("/payments/", params={"type": "rent"}, headers=auth_headers).status_code == 422


def test_patch_recomputes_annuity(client: TestClient, auth_headers):
    loan = _create_payment(
        client, auth_headers, type="mortgage", day_of_month=1,
        principal_total=1200, interest_rate_apy=0, term_months=12,
    )
    assert loan["annuity_payment"] == 100.0

    r = client.patch(f"/payments/{loan['payment_id']}", json={"term_months": 24}, headers=auth_headers)
    assert r.status_code == 200, r.text
    assert r.json()["annuity_payment"] == 50.0

    r = client.get(f"/payments/{loan['payment_id']}", headers=auth_headers)
    assert r.json()["term_months"] == 24


def test_patch_validation(client: TestClient, auth_headers):
    payment = _create_payment(client, auth_headers)
    url = f"/payments/{payment['payment_id']}"

    assert client.patch(url, json={"title": None}, headers=auth_headers).status_code == 400
    assert client.patch(url, json={"type": None}, headers=auth_headers).status_code == 400
    assert client.patch(url, json={"billing_day": 32}, headers=auth_headers).status_code == 422
    assert client.patch(url, json={"renewal_date": "1/5/2030"}, headers=auth_headers).status_code == 422

    r = client.patch(url, json={}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["title"] == "Phone"


def test_create_validation(client: TestClient, auth_headers):
    r = client.post("/payments/", json={"title": "x", "type": "mobile", "billing_day": 0}, headers=auth_headers)
    assert r.status_code == 422
    r = client.post("/payments/", json={"title": "x", "type": "mobile", "amount": -1}, headers=auth_headers)
    assert r.status_code == 422
    r = client.post("/payments/", json={"title": " ", "type": "mobile"}, headers=auth_headers)
    assert r.status_code == 400


def test_delete_payment(client: TestClient, auth_headers, another_user):
    _, other_headers = another_user
    payment = _create_payment(client, auth_headers)
    url = f"/payments/{payment['payment_id']}"

    assert client.get(url, headers=other_headers).status_code == 404
    r = client.delete(url, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["message"] == "Payment deleted"
    assert client.get(url, headers=auth_headers).status_code == 404


def test_payment_history_newest_first(client: TestClient, auth_headers, another_user):
    _, other_headers = another_user
    payment = _create_payment(client, auth_headers)
    other = _create_payment(client, auth_headers, title="Internet")
    for day, payment_id in (("2024-01-10", payment["payment_id"]), ("2024-02-10", payment["payment_id"]),
                            ("2024-02-11", other["payment_id"])):
        r = client.post(
            "/transactions/",
            json={"transaction_date": day, "amount_account": 500, "payment_id": payment_id},
            headers=auth_headers,
        )
        assert r.status_code == 200, r.text

    r = client.get(f"/payments/{payment['payment_id']}/history", headers=auth_headers)
    assert r.status_code == 200
    assert [t["transaction_date"] for t in r.json()] == ["2024-02-10", "2024-01-10"]

    assert client.get(f"/payments/{payment['payment_id']}/history", headers=other_headers).status_code == 404
