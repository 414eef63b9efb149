"""Root conftest — shared fixtures and markers."""

from __future__ import annotations

import os

import pytest

from agentproxy.policy import parse_policy

POLICY_DOC = {
    "tables": {
        "users": {"allow_ops": ["select", "insert", "update", "delete"]},
        "orders": {"allow_ops": ["select"]},
        "payments": {
            "required_filters": [{"column": "created_at", "operator": ">="}],
            "deny_columns": ["card_number"],
        },
    },
}


def pytest_configure(config):
    config.addinivalue_line("markers", "postgres: requires running PostgreSQL container")


def pytest_collection_modifyitems(config, items):
    if os.environ.get("AGENTPROXY_TEST_POSTGRES"):
        return

    skip_pg = pytest.mark.skip(reason="Postgres not available (set AGENTPROXY_TEST_POSTGRES=1)")
    for item in items:
        if "postgres" in item.keywords:
            item.add_marker(skip_pg)


@pytest.fixture(autouse=True)
def isolated_querylog(tmp_path, monkeypatch):
    """Keep decision logs out of the real home directory."""
    log_root = tmp_path / "querylog"
    monkeypatch.setattr("agentproxy.querylog._LOG_ROOT", log_root)
    return log_root


@pytest.fixture
def policy():
    return parse_policy(POLICY_DOC)
