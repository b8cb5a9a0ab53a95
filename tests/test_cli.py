from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from actax.cli import main, run


def test_no_arguments_prints_help(capsys) -> None:
    assert run([]) == 0
    assert "usage: actax" in capsys.readouterr().out


def test_unknown_command(capsys) -> None:
    assert run(["explode"]) == 2
    assert "Unknown command: explode" in capsys.readouterr().err


def test_kinds(clean_env: Path, user_schema_file: Path, capsys) -> None:
    assert run(["kinds", str(user_schema_file), "--no-env"]) == 0
    assert capsys.readouterr().out.splitlines() == ["SET_NAME", "SET_AGE", "LOG_OUT"]


def test_show(clean_env: Path, user_schema_file: Path, capsys) -> None:
    assert run(["show", str(user_schema_file)]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "schema: UserAction (sentinel strategy)"
    assert "with payload: SET_NAME, SET_AGE" in out
    assert "without payload: LOG_OUT" in out
    assert "  creator: (payload: int) -> SetAge" in out
    assert "  shape:   {type: 'LOG_OUT'}" in out


def test_show_single_kind(clean_env: Path, user_schema_file: Path, capsys) -> None:
    assert run(["show", str(user_schema_file), "--kind", "LOG_OUT"]) == 0
    assert capsys.readouterr().out.splitlines() == [
        "LOG_OUT: none",
        "  shape:   {type: 'LOG_OUT'}",
        "  creator: () -> LogOut",
    ]


def test_show_unknown_kind(clean_env: Path, user_schema_file: Path, capsys) -> None:
    assert run(["show", str(user_schema_file), "--kind", "RELOAD"]) == 2
    assert "[ERROR] unknown action kind 'RELOAD'" in capsys.readouterr().err


def test_schema_errors_exit_with_2(clean_env: Path, capsys) -> None:
    bad = clean_env / "bad.toml"
    bad.write_text('[kinds]\nLOG_OUT = "none"\n')
    assert run(["check", str(bad), "--strategy", "explicit"]) == 2
    assert "[ERROR]" in capsys.readouterr().err
    assert run(["check", str(clean_env / "missing.json")]) == 2


def test_generate_then_check(clean_env: Path, user_schema_file: Path, capsys) -> None:
    out = clean_env / "gen" / "user_actions.py"
    assert run(["generate", str(user_schema_file), "--out", str(out)]) == 0
    assert f"[INFO] Wrote 3 action kinds to {out}" in capsys.readouterr().out
    assert "class SetName(TypedDict):" in out.read_text(encoding="utf-8")

    assert run(["check", str(user_schema_file), "--generated", str(out)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("[ok]") and "3 kinds (2 with payload, 1 without)" in lines[0]
    assert lines[1] == f"[ok] {out} is up to date"

    user_schema_file.write_text(
        user_schema_file.read_text(encoding="utf-8") + '\nRELOAD = "none"\n', encoding="utf-8"
    )
    assert run(["check", str(user_schema_file), "--generated", str(out)]) == 1
    assert "[WARN]" in capsys.readouterr().err


def test_generate_uses_settings(clean_env: Path, user_schema_file: Path, monkeypatch) -> None:
    monkeypatch.setenv("ACTAX_OUT_PATH", "from_env.py")
    assert run(["generate", str(user_schema_file), "--no-constants", "--no-env"]) == 0
    source = (clean_env / "from_env.py").read_text(encoding="utf-8")
    assert "UserAction = SetName | SetAge | LogOut" in source
    assert "Final" not in source


def test_generate_union_name_flag(clean_env: Path, user_schema_file: Path) -> None:
    assert run(["generate", str(user_schema_file), "--union-name", "AppAction"]) == 0
    source = (clean_env / "actions_generated.py").read_text(encoding="utf-8")
    assert "AppAction = SetName | SetAge | LogOut" in source


def test_dotenv_is_loaded(clean_env: Path, user_schema_file: Path, monkeypatch) -> None:
    # load_dotenv writes into os.environ; keep that write local to this test.
    monkeypatch.setattr(os, "environ", dict(os.environ))
    (clean_env / ".env").write_text("ACTAX_UNION_NAME=EnvAction\n")
    assert run(["generate", str(user_schema_file)]) == 0
    source = (clean_env / "actions_generated.py").read_text(encoding="utf-8")
    assert "EnvAction = SetName | SetAge | LogOut" in source


def test_log_level_choices(clean_env: Path, user_schema_file: Path, capsys) -> None:
    logger = logging.getLogger("actax")
    try:
        assert run(["kinds", str(user_schema_file), "--no-env", "--log-level", "debug"]) == 0
        assert logger.level == logging.DEBUG
    finally:
        logger.setLevel(logging.WARNING)
    with pytest.raises(SystemExit) as excinfo:
        run(["kinds", str(user_schema_file), "--log-level", "VERBOSE"])
    assert excinfo.value.code == 2
    assert "invalid choice: 'VERBOSE'" in capsys.readouterr().err


def test_main_exits_with_run_status(clean_env: Path, user_schema_file: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["kinds", str(user_schema_file), "--no-env"])
    assert excinfo.value.code == 0
