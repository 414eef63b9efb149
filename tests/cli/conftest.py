"""CLI test fixtures."""

from __future__ import annotations

import pytest

POLICY_YAML = """\
tables:
  users:
    allow_ops: [select, insert, update, delete]
  orders:
    allow_ops: [select]
  payments:
    required_filters:
      - column: created_at
        operator: ">="
    deny_columns: [card_number]
"""


@pytest.fixture
def policy_file(tmp_path):
    path = tmp_path / "policy.yaml"
    path.write_text(POLICY_YAML)
    return str(path)
