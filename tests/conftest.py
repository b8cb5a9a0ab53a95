"""Test configuration and fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from actax.core.payload import NO_PAYLOAD
from actax.core.schema import ActionSchema
from actax.core.taxonomy import Taxonomy

USER_SCHEMA_TOML = """
name = "UserAction"

[kinds]
SET_NAME = "str"
SET_AGE = "int"
LOG_OUT = "none"
""".strip()


@pytest.fixture
def user_schema() -> ActionSchema:
    """The SET_NAME / SET_AGE / LOG_OUT schema used throughout the examples."""
    return ActionSchema({"SET_NAME": str, "SET_AGE": int, "LOG_OUT": NO_PAYLOAD})


@pytest.fixture
def user_taxonomy(user_schema: ActionSchema) -> Taxonomy:
    return Taxonomy(user_schema)


@pytest.fixture
def user_schema_file(tmp_path: Path) -> Path:
    p = tmp_path / "user_actions.toml"
    p.write_text(USER_SCHEMA_TOML, encoding="utf-8")
    return p


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Run in an empty cwd with no ACTAX_* variables set."""
    monkeypatch.chdir(tmp_path)
    for key in ["STRATEGY", "STRICT", "OUT_PATH", "UNION_NAME", "EMIT_CONSTANTS"]:
        monkeypatch.delenv(f"ACTAX_{key}", raising=False)
    return tmp_path
