import json

import pytest
from conftest import app_store, machine_payload


def test_admin_creates_machine(app, client, admin_headers):
    resp = client.post("/api/machines", json=machine_payload(), headers=admin_headers)

    assert resp.status_code == 201
    body = resp.json()
    assert body["id"] == 1
    assert body["decapingMethod"] == "poussage"
    assert body["currentState"] == "running"
    assert body["isActive"] is True
    assert json.loads(body["specifications"]) == {"power": "850 HP"}

    with app_store(app) as store:
        [activity] = store.activities.list()
        assert activity.type == "machine_created"
        assert activity.related_entity_id == 1
        assert activity.related_entity_type == "machine"
        assert activity.user_id == 1


def test_current_state_defaults_to_running(client, admin_headers):
    payload = machine_payload()
    del payload["currentState"]

    resp = client.post("/api/machines", json=payload, headers=admin_headers)
    assert resp.status_code == 201
    assert resp.json()["currentState"] == "running"


def test_supervisor_cannot_create_machine(app, client, supervisor_headers):
    resp = client.post("/api/machines", json=machine_payload(name="X"), headers=supervisor_headers)

    assert resp.status_code == 403
    assert resp.json()["category"] == "authorization_error"
    with app_store(app) as store:
        assert store.machines.count() == 0


def test_supervisor_denial_wins_over_body_validation(client, supervisor_headers):
    resp = client.post("/api/machines", json={"name": "X"}, headers=supervisor_headers)

    assert resp.status_code == 403


def test_invalid_machine_body_reports_fields(client, admin_headers):
    resp = client.post(
        "/api/machines",
        json=machine_payload(type="crane", decapingMethod="blasting"),
        headers=admin_headers,
    )

    assert resp.status_code == 422
    fields = {e["field"] for e in resp.json()["errors"]}
    assert {"type", "decapingMethod"} <= fields


def test_get_and_list_machines(client, admin_headers, supervisor_headers):
    client.post("/api/machines", json=machine_payload(), headers=admin_headers)
    client.post(
        "/api/machines",
        json=machine_payload(name="Excavatrice PH1", type="ph1", decapingMethod="casement"),
        headers=admin_headers,
    )

    assert len(client.get("/api/machines", headers=supervisor_headers).json()) == 2

    casement = client.get("/api/machines", params={"method": "casement"}, headers=supervisor_headers)
    assert [m["name"] for m in casement.json()] == ["Excavatrice PH1"]

    resp = client.get("/api/machines/1", headers=supervisor_headers)
    assert resp.status_code == 200
    assert resp.json()["name"] == "Bulldozer D11-2"


def test_unknown_method_filter_is_a_validation_error(client, admin_headers):
    resp = client.get("/api/machines", params={"method": "blasting"}, headers=admin_headers)

    assert resp.status_code == 422
    assert resp.json()["errors"][0]["field"] == "method"


def test_missing_machine_is_not_found(client, admin_headers):
    assert client.get("/api/machines/99", headers=admin_headers).status_code == 404

    resp = client.patch("/api/machines/99", json={"currentState": "stopped"}, headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["category"] == "not_found"


def test_patch_overwrites_only_given_fields(app, client, admin_headers):
    client.post("/api/machines", json=machine_payload(), headers=admin_headers)

    resp = client.patch("/api/machines/1", json={"currentState": "stopped"}, headers=admin_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["currentState"] == "stopped"
    assert body["name"] == "Bulldozer D11-2"
    assert body["type"] == "d11"

    with app_store(app) as store:
        assert [a.type for a in store.activities.list()] == ["machine_updated", "machine_created"]


def test_patch_rejects_unknown_fields_and_nulls(app, client, admin_headers):
    client.post("/api/machines", json=machine_payload(), headers=admin_headers)

    unknown = client.patch("/api/machines/1", json={"colour": "yellow"}, headers=admin_headers)
    assert unknown.status_code == 422
    assert unknown.json()["errors"][0]["field"] == "colour"

    null_name = client.patch("/api/machines/1", json={"name": None}, headers=admin_headers)
    assert null_name.status_code == 422
    assert null_name.json()["errors"][0]["field"] == "name"

    with app_store(app) as store:
        assert store.machines.get(1).name == "Bulldozer D11-2"
        assert store.activities.count() == 1


def test_supervisor_cannot_patch_machine(client, admin_headers, supervisor_headers):
    client.post("/api/machines", json=machine_payload(), headers=admin_headers)

    resp = client.patch("/api/machines/1", json={"currentState": "stopped"}, headers=supervisor_headers)
    assert resp.status_code == 403


HUGE_ID = 99999999999999999999


@pytest.mark.parametrize(
    "path", ["machines", "operations", "documents", "safety-incidents", "users"]
)
def test_out_of_range_id_is_not_found(client, admin_headers, path):
    resp = client.get(f"/api/{path}/{HUGE_ID}", headers=admin_headers)

    assert resp.status_code == 404
    assert resp.json()["category"] == "not_found"


def test_out_of_range_id_on_writes_is_not_found(client, admin_headers):
    machine = client.patch(f"/api/machines/{HUGE_ID}", json={"currentState": "stopped"}, headers=admin_headers)
    operation = client.patch(f"/api/operations/{HUGE_ID}", json={"panel": "P9"}, headers=admin_headers)
    user = client.delete(f"/api/users/{HUGE_ID}", headers=admin_headers)

    for resp in (machine, operation, user):
        assert resp.status_code == 404
    assert client.get(f"/api/users/{HUGE_ID}/activities", headers=admin_headers).status_code == 404
    assert client.get("/api/machines/-1", headers=admin_headers).status_code == 404
