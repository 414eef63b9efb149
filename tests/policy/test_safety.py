"""Test global safety rules."""

import pytest

from agentproxy.diagnostics import codes
from agentproxy.errors import AgentProxyError
from agentproxy.models import QueryContext
from agentproxy.policy import analyze, parse_policy, run_policy
from agentproxy.policy.safety import check_mutation_without_where, check_tenant_filter


class TestTokenizerCrash:
    def test_unclosed_string_is_rejected(self) -> None:
        with pytest.raises(AgentProxyError):
            run_policy(
                "SELECT 'unclosed",
                QueryContext(actor="a", tenant_id="*"),
                parse_policy({"tables": {}}),
            )


class TestMutationWithoutWhere:
    def test_blocks_delete_without_where(self) -> None:
        diag = check_mutation_without_where(analyze("DELETE FROM users"))
        assert diag is not None
        assert diag.code == codes.MISSING_WHERE
        assert "WHERE clause" in diag.message
        assert "DELETE" in diag.message

    def test_blocks_update_without_where(self) -> None:
        diag = check_mutation_without_where(analyze("UPDATE users SET active = false"))
        assert diag is not None
        assert "UPDATE" in diag.message
        assert diag.suggestions

    def test_allows_delete_with_where(self) -> None:
        assert check_mutation_without_where(analyze("DELETE FROM users WHERE id = 1")) is None

    def test_where_1_eq_1_counts_as_where(self) -> None:
        assert check_mutation_without_where(analyze("DELETE FROM users WHERE 1 = 1")) is None

    def test_ignores_reads_and_inserts(self) -> None:
        assert check_mutation_without_where(analyze("SELECT * FROM users")) is None
        assert check_mutation_without_where(analyze("INSERT INTO users (id) VALUES (1)")) is None


class TestTenantFilter:
    def _check(self, sql: str, tenant_id: str = "acme", column: str = "tenant_id"):
        return check_tenant_filter(analyze(sql), tenant_id=tenant_id, tenant_column=column)

    def test_missing_filter(self) -> None:
        diag = self._check("SELECT * FROM users")
        assert diag is not None
        assert diag.code == codes.MISSING_TENANT_FILTER
        assert "tenant_id" in diag.message

    def test_filter_present(self) -> None:
        assert self._check("SELECT * FROM users WHERE tenant_id = 'acme'") is None

    def test_filter_in_join_condition(self) -> None:
        sql = "SELECT * FROM users u JOIN orders o ON o.tenant_id = u.tenant_id"
        assert self._check(sql) is None

    def test_bypass(self) -> None:
        assert self._check("SELECT * FROM users", tenant_id="*") is None

    def test_no_tables(self) -> None:
        assert self._check("SELECT 1") is None

    def test_column_in_select_list_only(self) -> None:
        assert self._check("SELECT tenant_id FROM users") is not None

    def test_column_name_in_string_literal(self) -> None:
        assert self._check("SELECT * FROM users WHERE note = 'tenant_id = acme'") is not None

    def test_insert_column_list_satisfies(self) -> None:
        sql = "INSERT INTO users (tenant_id, name) VALUES ('acme', 'Jane')"
        assert self._check(sql) is None

    def test_insert_without_tenant_column(self) -> None:
        assert self._check("INSERT INTO users (name) VALUES ('Jane')") is not None

    def test_custom_tenant_column(self) -> None:
        sql = "UPDATE users SET name = 'x' WHERE org_id = 'acme'"
        assert self._check(sql, column="org_id") is None
        diag = self._check(sql)
        assert diag is not None

    def test_case_insensitive(self) -> None:
        assert self._check("DELETE FROM users WHERE TENANT_ID = 'acme'") is None
