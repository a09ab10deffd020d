from __future__ import annotations

from fastapi.testclient import TestClient

from hireflow.api.app import create_app


def test_status_lifecycle_via_api() -> None:
    client = TestClient(create_app())

    created = client.post("/api/statuses", json={"name": "phone_screen", "display_name": "Phone screen"})
    assert created.status_code == 201
    status_id = created.json()["id"]
    assert created.json()["sort_order"] == 5

    renamed = client.patch(f"/api/statuses/{status_id}", json={"display_name": "Phone interview"})
    assert renamed.json()["display_name"] == "Phone interview"

    reordered = client.post("/api/statuses/reorder", json={"orders": [{"id": status_id, "sort_order": 0}]})
    assert reordered.json()[0]["name"] == "phone_screen"

    assert client.delete(f"/api/statuses/{status_id}").status_code == 204
    assert client.delete(f"/api/statuses/{status_id}").status_code == 404


def test_taxonomy_rule_violations_are_conflicts() -> None:
    client = TestClient(create_app())
    statuses = {row["name"]: row["id"] for row in client.get("/api/statuses").json()}

    duplicate = client.post("/api/statuses", json={"name": "pending", "display_name": "Dup"})
    bad_name = client.post("/api/statuses", json={"name": "Bad Name", "display_name": "Bad"})
    default_delete = client.delete(f"/api/statuses/{statuses['pending']}")

    assert duplicate.status_code == 409
    assert bad_name.status_code == 409
    assert default_delete.status_code == 409
    assert "default" in default_delete.json()["detail"]


def test_inactive_statuses_are_filtered() -> None:
    client = TestClient(create_app())
    rejected = next(row for row in client.get("/api/statuses").json() if row["name"] == "rejected")

    client.patch(f"/api/statuses/{rejected['id']}", json={"is_active": False})

    active = [row["name"] for row in client.get("/api/statuses", params={"active_only": True}).json()]
    assert active == ["pending", "reviewed", "selected"]


def test_reconcile_endpoint_and_capabilities() -> None:
    client = TestClient(create_app())

    assert client.post("/api/maintenance/reconcile", json={"older_than_minutes": 10}).json() == {"reconciled": []}

    caps = client.get("/api/pipeline/capabilities").json()
    assert caps["supported_extensions"] == [".pdf", ".docx"]
    assert caps["max_upload_bytes"] == 10 * 1024 * 1024
