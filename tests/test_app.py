"""Test the HTTP binding."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from agentproxy.app import create_app
from agentproxy.executor import DRY_RUN_WARNING
from agentproxy.service import ProxyService

CONTEXT = {"actor": "agent-1", "tenant_id": "acme"}
DELETE_ACME = "DELETE FROM users WHERE tenant_id = 'acme'"


@pytest.fixture
def client(policy):
    with TestClient(create_app(ProxyService(policy, log=False))) as client:
        yield client


def test_preview(client):
    resp = client.post("/sql/preview", json={"sql": DELETE_ACME, "context": CONTEXT})
    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert body["operation"] == "delete"
    assert body["tables"] == ["users"]
    assert body["warnings"] == [DRY_RUN_WARNING]


def test_preview_rejected(client):
    resp = client.post("/sql/preview", json={"sql": "DELETE FROM users", "context": CONTEXT})
    assert resp.status_code == 400
    body = resp.json()
    assert body["ok"] is False
    assert body["code"] == "Q0201"
    assert "WHERE clause" in body["error"]


def test_operation_not_allowed(client):
    resp = client.post(
        "/sql/preview",
        json={"sql": "DELETE FROM orders WHERE tenant_id = 'x'", "context": CONTEXT},
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "Q0301"


def test_preview_then_commit_then_get(client):
    preview = client.post("/sql/preview", json={"sql": DELETE_ACME, "context": CONTEXT}).json()
    preview_id = preview["preview_id"]

    commit = client.post(
        "/sql/commit",
        json={"sql": DELETE_ACME, "context": CONTEXT, "preview_id": preview_id},
    )
    assert commit.status_code == 200
    assert commit.json()["preview_id"] == preview_id
    assert commit.json()["rows_affected"] == 0

    record = client.get(f"/queries/{preview_id}")
    assert record.status_code == 200
    assert record.json()["status"] == "committed"


def test_commit_twice_is_client_error(client):
    preview_id = client.post(
        "/sql/preview", json={"sql": DELETE_ACME, "context": CONTEXT}
    ).json()["preview_id"]
    body = {"sql": DELETE_ACME, "context": CONTEXT, "preview_id": preview_id}
    assert client.post("/sql/commit", json=body).status_code == 200
    resp = client.post("/sql/commit", json=body)
    assert resp.status_code == 400
    assert resp.json()["code"] == "Q0402"


def test_commit_unknown_preview(client):
    resp = client.post(
        "/sql/commit", json={"sql": DELETE_ACME, "context": CONTEXT, "preview_id": "nope"}
    )
    assert resp.status_code == 404


def test_get_unknown_query(client):
    resp = client.get("/queries/does-not-exist")
    assert resp.status_code == 404
    assert resp.json() == {
        "ok": False,
        "error": "Query not found: does-not-exist",
        "code": "Q0401",
    }


def test_policy(client):
    resp = client.get("/policy")
    assert resp.status_code == 200
    assert set(resp.json()["tables"]) == {"users", "orders", "payments"}


def test_schema_without_database(client):
    resp = client.get("/schema")
    assert resp.status_code == 503
    assert resp.json()["code"] == "Q0502"


def test_malformed_body(client):
    resp = client.post("/sql/preview", json={"sql": "SELECT 1"})
    assert resp.status_code == 422


def test_blank_sql(client):
    resp = client.post("/sql/preview", json={"sql": "   ", "context": CONTEXT})
    assert resp.status_code == 422
