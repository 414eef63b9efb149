"""Test the validate CLI command end-to-end."""

import json

from click.testing import CliRunner

from agentproxy.cli import main


def _validate(policy_file: str, sql: str, *args: str, tenant: str = "acme"):
    runner = CliRunner()
    return runner.invoke(
        main, ["validate", sql, "--policy", policy_file, "--tenant", tenant, *args]
    )


def test_validate_tenant_scoped_delete(policy_file) -> None:
    result = _validate(policy_file, "DELETE FROM users WHERE tenant_id = 'acme'")
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data == {"ok": True, "operation": "delete", "tables": ["users"], "has_where": True}


def test_validate_delete_without_where_blocked(policy_file) -> None:
    result = _validate(policy_file, "DELETE FROM users")
    assert result.exit_code == 1
    data = json.loads(result.output)
    assert data["ok"] is False
    assert data["code"] == "Q0201"
    assert "WHERE clause" in data["error"]


def test_validate_operation_not_allowed(policy_file) -> None:
    result = _validate(policy_file, "DELETE FROM orders WHERE tenant_id = 'x'", tenant="x")
    assert result.exit_code == 1
    assert json.loads(result.output)["code"] == "Q0301"


def test_validate_multiple_statements_blocked(policy_file) -> None:
    result = _validate(policy_file, "SELECT 1; DROP TABLE x")
    assert result.exit_code == 1
    assert json.loads(result.output)["code"] == "Q0002"


def test_validate_tenant_bypass(policy_file) -> None:
    result = _validate(policy_file, "SELECT * FROM users", tenant="*")
    assert result.exit_code == 0


def test_validate_text_output(policy_file) -> None:
    result = _validate(
        policy_file, "UPDATE users SET name = 'x' WHERE tenant_id = 'acme'", "--format", "text"
    )
    assert result.exit_code == 0
    assert "ok: update on users" in result.output


def test_validate_text_rejection(policy_file) -> None:
    result = _validate(policy_file, "SELECT * FROM users", "--format", "text")
    assert result.exit_code == 1
    assert "error[Q0202]: Tenant filter missing" in result.output
    assert "= help:" in result.output


def test_validate_dialect(policy_file) -> None:
    result = _validate(
        policy_file, "SELECT * FROM `users` WHERE tenant_id = 'acme'", "--dialect", "mysql"
    )
    assert result.exit_code == 0


def test_validate_policy_from_env(policy_file) -> None:
    runner = CliRunner()
    result = runner.invoke(
        main,
        ["validate", "SELECT * FROM users WHERE tenant_id = 'acme'", "--tenant", "acme"],
        env={"AGENTPROXY_POLICY": policy_file},
    )
    assert result.exit_code == 0


def test_validate_broken_policy_file(tmp_path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text("tables:\n  orders:\n    allow_ops: [drop]\n")
    result = _validate(str(path), "SELECT 1")
    assert result.exit_code == 1
    assert "unknown operation 'drop'" in result.output


def test_validate_requires_tenant(policy_file) -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["validate", "SELECT 1", "--policy", policy_file])
    assert result.exit_code == 2
