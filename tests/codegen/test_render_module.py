from __future__ import annotations

import inspect
import typing
from collections.abc import Callable
from pathlib import Path
from typing import Annotated, Any, Literal, Optional

import pytest

from actax.codegen import read_fingerprint, render_annotation, render_module, write_module
from actax.core.errors import GrammarError, SchemaError
from actax.core.payload import NO_PAYLOAD
from actax.core.taxonomy import Taxonomy
from actax.io.config import CompileSettings
from sample_payloads import Credentials


def _exec_module(source: str) -> dict[str, Any]:
    ns: dict[str, Any] = {"__name__": "generated_actions"}
    exec(compile(source, "generated_actions.py", "exec"), ns)  # noqa: S102
    return ns


@pytest.mark.parametrize(
    ("tp", "expected"),
    [
        (str, "str"),
        (dict[str, list[int]], "dict[str, list[int]]"),
        (tuple[int, ...], "tuple[int, ...]"),
        (Optional[str], "str | None"),  # noqa: UP007
        (int | None, "int | None"),
        (Literal["a", 1], 'Literal["a", 1]'),
        (Annotated[int, "meta"], "int"),
        (typing.List[int], "list[int]"),  # noqa: UP006
        (Callable[[int], str], "Callable[[int], str]"),
    ],
)
def test_render_annotation(tp: Any, expected: str) -> None:
    assert render_annotation(tp, {}) == expected


def test_render_annotation_collects_imports() -> None:
    imports: dict[str, set[str]] = {}
    assert render_annotation(list[Credentials], imports) == "list[Credentials]"
    assert render_annotation(Any, imports) == "Any"
    assert imports == {"sample_payloads": {"Credentials"}, "typing": {"Any"}}


def test_local_classes_cannot_be_rendered() -> None:
    class Local:
        pass

    with pytest.raises(SchemaError, match="not importable"):
        render_annotation(Local, {})


def test_rendered_module_layout(user_taxonomy: Taxonomy) -> None:
    source = render_module(user_taxonomy)
    lines = source.splitlines()
    assert lines[0] == (
        f"# Generated by actax from schema 'Action' (sha256 {user_taxonomy.fingerprint})"
    )
    assert "from typing import Final, Literal, TypedDict" in lines
    assert 'ActionType = Literal["SET_NAME", "SET_AGE", "LOG_OUT"]' in lines
    assert 'LOG_OUT: Final = "LOG_OUT"' in lines
    assert "class LogOut(TypedDict):" in lines
    assert "Action = SetName | SetAge | LogOut" in lines
    assert "def set_name(payload: str) -> SetName:" in lines
    assert "def log_out() -> LogOut:" in lines
    assert source.endswith("\n")
    assert render_module(user_taxonomy) == source


def test_generated_module_runs(user_taxonomy: Taxonomy) -> None:
    ns = _exec_module(render_module(user_taxonomy))
    assert ns["set_name"]("Alice") == {"type": "SET_NAME", "payload": "Alice"}
    assert ns["log_out"]() == {"type": "LOG_OUT"}
    assert set(ns["LogOut"].__annotations__) == {"type"}
    assert set(ns["SetAge"].__annotations__) == {"type", "payload"}
    assert list(inspect.signature(ns["log_out"]).parameters) == []
    assert list(inspect.signature(ns["set_age"]).parameters) == ["payload"]
    assert ns["SET_AGE"] == "SET_AGE"
    assert typing.get_args(ns["ActionType"]) == ("SET_NAME", "SET_AGE", "LOG_OUT")
    assert set(ns["__all__"]) >= {"Action", "ActionType", "LogOut", "log_out", "LOG_OUT"}


def test_settings_change_union_name_and_constants(user_taxonomy: Taxonomy) -> None:
    settings = CompileSettings(union_name="UserAction", emit_constants=False)
    source = render_module(user_taxonomy, settings)
    ns = _exec_module(source)
    assert "UserAction" in ns and "UserActionType" in ns
    assert "LOG_OUT" not in ns
    assert "from typing import Literal, TypedDict" in source.splitlines()


def test_imported_payload_types() -> None:
    tax = Taxonomy({"LOGIN": Credentials, "LOG_OUT": NO_PAYLOAD}, name="Session")
    source = render_module(tax)
    assert "from sample_payloads import Credentials" in source.splitlines()
    ns = _exec_module(source)
    creds = Credentials(username="ada", password="pw")
    assert ns["login"](creds) == {"type": "LOGIN", "payload": creds}


def test_single_and_empty_schemas() -> None:
    single = _exec_module(render_module(Taxonomy({"LOG_OUT": NO_PAYLOAD})))
    assert single["Action"] is single["LogOut"]

    source = render_module(Taxonomy({}))
    assert "ActionType = Never" in source.splitlines()
    assert "Action = Never" in source.splitlines()
    _exec_module(source)


@pytest.mark.parametrize(
    ("schema", "name", "match"),
    [
        ({"SET_NAME": str, "setName": int}, "Action", "both render as"),
        ({"SET_NAME": str}, "SetName", "collides with action union"),
        ({"CREDENTIALS": Credentials}, "Action", "imported payload type"),
        ({"LITERAL": NO_PAYLOAD}, "Action", "collides"),
        ({"user/logout": NO_PAYLOAD}, "Action", "identifier"),
    ],
)
def test_name_collisions(schema: dict[str, Any], name: str, match: str) -> None:
    with pytest.raises(GrammarError, match=match):
        render_module(Taxonomy(schema, name=name))


@pytest.mark.parametrize("kind", ["A", "X1"])
def test_single_word_kinds_need_constants_off(kind: str) -> None:
    tax = Taxonomy({kind: NO_PAYLOAD})
    with pytest.raises(GrammarError, match="--no-constants"):
        render_module(tax)
    ns = _exec_module(render_module(tax, CompileSettings(emit_constants=False)))
    assert ns[kind.lower()]() == {"type": kind}
    assert ns[kind] is ns["Action"]


def test_invalid_union_name(user_taxonomy: Taxonomy) -> None:
    with pytest.raises(GrammarError, match="not a Python identifier"):
        render_module(user_taxonomy, CompileSettings(union_name="user-action"))


def test_write_module_and_fingerprint(user_taxonomy: Taxonomy, tmp_path: Path) -> None:
    dest = write_module(user_taxonomy, tmp_path / "pkg" / "actions.py")
    assert dest.read_text(encoding="utf-8") == render_module(user_taxonomy)
    assert read_fingerprint(dest) == user_taxonomy.fingerprint
    assert list((tmp_path / "pkg").iterdir()) == [dest]


def test_write_module_default_path(user_taxonomy: Taxonomy, clean_env: Path) -> None:
    dest = write_module(user_taxonomy, settings=CompileSettings(out_path="gen/out.py"))
    assert dest == Path("gen/out.py")
    assert (clean_env / "gen" / "out.py").exists()


def test_read_fingerprint_without_header(tmp_path: Path) -> None:
    assert read_fingerprint(tmp_path / "missing.py") is None
    plain = tmp_path / "plain.py"
    plain.write_text("x = 1\n")
    assert read_fingerprint(plain) is None
