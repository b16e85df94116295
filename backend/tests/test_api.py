import pytest
from fastapi.testclient import TestClient

from onboarding.core.deps import get_db
from onboarding.main import app

HEADERS = {"X-Actor-Id": "user-123"}

MERCHANT = {
    "entity_type": 1,
    "legal_name": "Acme Widgets LLC",
    "address1": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "zip": "62701",
    "country": "US",
    "phone": "2175550100",
    "email": "ops@acmewidgets.com",
    "tc_version": "2024.1",
    "currency": "USD",
    "mcc": "5999",
}


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def merchant_id(client):
    r = client.post("/merchants", json=MERCHANT, headers=HEADERS)
    assert r.status_code == 201, r.text
    return r.json()["id"]


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "database": "connected", "audit_log": "ready"}


def test_create_requires_actor(client):
    r = client.post("/merchants", json=MERCHANT)
    assert r.status_code == 422


def test_create_and_get_merchant(client, merchant_id):
    r = client.get(f"/merchants/{merchant_id}")
    assert r.status_code == 200
    body = r.json()
    assert body["legal_name"] == "Acme Widgets LLC"
    assert body["status"] == 0

    onboarding = client.get(f"/merchants/{merchant_id}/onboarding").json()
    assert onboarding["current_step"] == 1
    assert onboarding["is_completed"] is False


def test_duplicate_email_is_conflict(client, merchant_id):
    r = client.post("/merchants", json=MERCHANT, headers=HEADERS)
    assert r.status_code == 409


def test_unknown_merchant_is_not_found(client):
    r = client.get("/merchants/missing")
    assert r.status_code == 404
    assert r.json()["detail"] == "Merchant not found: missing"


def test_bank_account_numbers_are_masked(client, merchant_id):
    r = client.post(
        f"/merchants/{merchant_id}/bank-accounts",
        json={"account_method": 1, "account_number": "000123456789", "routing_number": "021000021", "currency": "USD"},
        headers=HEADERS,
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["is_primary"] is True
    assert body["account_number"] == "********6789"
    assert body["routing_number"] == "*******21"

    listed = client.get(f"/merchants/{merchant_id}/bank-accounts").json()
    assert [a["account_number"] for a in listed] == ["********6789"]


def test_member_ssn_is_masked_and_ownership_checked(client, merchant_id):
    member = {
        "first_name": "Jane",
        "last_name": "Doe",
        "ssn": "123456789",
        "date_of_birth": "1980-05-17",
        "ownership_percentage": 5000,
        "email": "jane@acmewidgets.com",
        "phone": "2175550101",
        "address1": "2 Oak Ave",
        "city": "Springfield",
        "state": "IL",
        "zip": "62702",
        "country": "US",
    }
    r = client.post(f"/merchants/{merchant_id}/members", json=member, headers=HEADERS)
    assert r.status_code == 201, r.text
    assert r.json()["ssn"] == "*****6789"

    r = client.post(
        f"/merchants/{merchant_id}/members", json={**member, "ownership_percentage": 10001}, headers=HEADERS
    )
    assert r.status_code == 422


def test_invalid_section_is_rejected(client, merchant_id):
    r = client.post(f"/merchants/{merchant_id}/onboarding/sections", json={"section": "is_completed"}, headers=HEADERS)
    assert r.status_code == 422


def test_audit_log_and_actor_summary(client, merchant_id):
    client.patch(f"/merchants/{merchant_id}", json={"dba_name": "Acme"}, headers=HEADERS)

    logs = client.get(f"/merchants/{merchant_id}/audit-log").json()
    assert [entry["action"] for entry in logs] == ["UPDATE", "INSERT"]
    assert all(entry["changed_by"] == "user-123" for entry in logs)
    assert logs[0]["ip_address"] == "testclient"

    r = client.get(
        "/merchants/audit/actors/user-123/summary",
        params={"start": "2000-01-01T00:00:00", "end": "2100-01-01T00:00:00"},
    )
    assert r.status_code == 200
    summary = r.json()
    assert summary["total_actions"] == 2
    assert summary["actions_by_table"] == {"merchants": {"INSERT": 1, "UPDATE": 1}}
    assert summary["merchants_modified"] == 1


def test_notes_crud(client, merchant_id):
    r = client.post(f"/merchants/{merchant_id}/notes", json={"note_text": "Call back Monday"}, headers=HEADERS)
    assert r.status_code == 201
    note_id = r.json()["id"]
    assert r.json()["created_by"] == "user-123"

    r = client.patch(f"/merchants/{merchant_id}/notes/{note_id}", json={"note_text": "Called"}, headers=HEADERS)
    assert r.json()["note_text"] == "Called"

    assert client.delete(f"/merchants/{merchant_id}/notes/{note_id}", headers=HEADERS).status_code == 204
    assert client.get(f"/merchants/{merchant_id}/notes").json() == []


def test_delete_merchant(client, merchant_id):
    assert client.delete(f"/merchants/{merchant_id}", headers=HEADERS).status_code == 204
    assert client.get(f"/merchants/{merchant_id}").status_code == 404
    logs = client.get(f"/merchants/{merchant_id}/audit-log").json()
    assert [entry["action"] for entry in logs] == ["DELETE"]


def test_blank_required_field_on_patch_is_422(client, merchant_id):
    r = client.patch(f"/merchants/{merchant_id}", json={"legal_name": None}, headers=HEADERS)
    assert r.status_code == 422
    assert r.json()["fields"] == ["legal_name"]
    assert client.get(f"/merchants/{merchant_id}").json()["legal_name"] == "Acme Widgets LLC"


def test_child_routes_are_scoped_to_the_path_merchant(client, merchant_id):
    r = client.post("/merchants", json={**MERCHANT, "email": "owner@otherco.com"}, headers=HEADERS)
    other_id = r.json()["id"]
    r = client.post(
        f"/merchants/{other_id}/bank-accounts",
        json={"account_method": 1, "account_number": "000123456789", "routing_number": "021000021", "currency": "USD"},
        headers=HEADERS,
    )
    account_id = r.json()["id"]
    note_id = client.post(f"/merchants/{other_id}/notes", json={"note_text": "Hi"}, headers=HEADERS).json()["id"]

    assert client.delete(f"/merchants/{merchant_id}/bank-accounts/{account_id}", headers=HEADERS).status_code == 404
    r = client.patch(
        f"/merchants/{merchant_id}/bank-accounts/{account_id}", json={"account_name": "x"}, headers=HEADERS
    )
    assert r.status_code == 404
    assert client.delete(f"/merchants/{merchant_id}/notes/{note_id}", headers=HEADERS).status_code == 404

    assert [a["id"] for a in client.get(f"/merchants/{other_id}/bank-accounts").json()] == [account_id]
    assert [n["id"] for n in client.get(f"/merchants/{other_id}/notes").json()] == [note_id]
