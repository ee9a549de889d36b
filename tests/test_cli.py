import json
import logging
import os
import subprocess
import sys
from pathlib import Path

import pytest

from forthparse import forth_cli

SQUARE = ": square dup * ;"
SRC_DIR = Path(__file__).resolve().parent.parent / "src"


def test_run_forth_string_prints_repr(capsys: pytest.CaptureFixture[str]) -> None:
    assert forth_cli.run_forth(SQUARE, is_string=True)
    out = capsys.readouterr().out.strip()
    assert out.startswith("ForthProgram(forms=[ProcedureDef(name='square'")


def test_run_forth_json(capsys: pytest.CaptureFixture[str]) -> None:
    assert forth_cli.run_forth(SQUARE, is_string=True, mode="definition", fmt="json")
    data = json.loads(capsys.readouterr().out)
    assert data["kind"] == "procedure_def"
    assert [el["name"] for el in data["body"]] == ["dup", "*"]


def test_run_forth_words_as_forth(capsys: pytest.CaptureFixture[str]) -> None:
    assert forth_cli.run_forth(
        "1   2 ( add ) +", is_string=True, mode="words", fmt="forth"
    )
    assert capsys.readouterr().out.strip() == "1 2 +"


def test_run_forth_file_input(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "square.fs"
    path.write_text(SQUARE + "\nVARIABLE x\n")
    assert forth_cli.run_forth(str(path), fmt="forth")
    assert capsys.readouterr().out.strip() == ": square dup * ;\nVARIABLE x"


def test_run_forth_writes_output_file(tmp_path: Path) -> None:
    out = tmp_path / "out.json"
    assert forth_cli.run_forth("VARIABLE x", is_string=True, fmt="json", out=str(out))
    data = json.loads(out.read_text())
    assert data["forms"][0]["kind"] == "var_decl"


def test_run_forth_rejects_unknown_suffix() -> None:
    with pytest.raises(ValueError, match="files are supported"):
        forth_cli.run_forth("program.txt")


def test_run_forth_rejects_unknown_mode() -> None:
    with pytest.raises(ValueError, match="Unknown parse mode"):
        forth_cli.run_forth(SQUARE, is_string=True, mode="expr")


def test_run_forth_reports_parse_error(
    capsys: pytest.CaptureFixture[str], caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.ERROR, logger="forthparse.forth_cli"):
        assert not forth_cli.run_forth(": broken IF dup", is_string=True)
    assert capsys.readouterr().out == ""
    assert any("Unterminated 'IF'" in r.getMessage() for r in caplog.records)


def test_main_exits_nonzero_on_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "argv", ["forthparse", "-s", "; oops"])
    with pytest.raises(SystemExit) as excinfo:
        forth_cli.main()
    assert excinfo.value.code == 1


def test_main_parses_string(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(
        sys, "argv", ["forthparse", "-s", "dup swap", "-m", "words", "-f", "forth"]
    )
    forth_cli.main()
    assert capsys.readouterr().out.strip() == "dup swap"


def test_main_without_args_starts_repl(monkeypatch: pytest.MonkeyPatch) -> None:
    called: dict[str, bool] = {}
    monkeypatch.setattr(sys, "argv", ["forthparse"])
    monkeypatch.setattr(
        "forthparse.forth_repl.start_repl",
        lambda verbose=False: called.setdefault("repl", True),
    )
    forth_cli.main()
    assert called == {"repl": True}


def test_main_repl_flag_passes_verbose(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[bool] = []
    monkeypatch.setattr(sys, "argv", ["forthparse", "--repl", "-v"])
    monkeypatch.setattr(
        "forthparse.forth_repl.start_repl", lambda verbose=False: seen.append(verbose)
    )
    forth_cli.main()
    assert seen == [True]


@pytest.mark.parametrize(
    "env,verbose,expected",
    [
        (None, False, logging.WARNING),
        ("info", False, logging.INFO),
        ("nonsense", False, logging.WARNING),
        ("ERROR", True, logging.DEBUG),
    ],
)  # type: ignore[misc]
def test_configure_logging_levels(
    monkeypatch: pytest.MonkeyPatch, env: str | None, verbose: bool, expected: int
) -> None:
    seen: dict[str, int] = {}
    if env is None:
        monkeypatch.delenv(forth_cli.LOG_LEVEL_ENV, raising=False)
    else:
        monkeypatch.setenv(forth_cli.LOG_LEVEL_ENV, env)
    monkeypatch.setattr(
        logging, "basicConfig", lambda **kw: seen.setdefault("level", kw["level"])
    )
    forth_cli.configure_logging(verbose)
    assert seen["level"] == expected


def test_cli_module_runs_as_script(tmp_path: Path) -> None:
    path = tmp_path / "prog.fth"
    path.write_text("42 CONSTANT answer")
    result = subprocess.run(
        [sys.executable, "-m", "forthparse.forth_cli", str(path), "-f", "json"],
        capture_output=True,
        text=True,
        env={**os.environ, "PYTHONPATH": str(SRC_DIR)},
    )
    assert result.returncode == 0
    assert json.loads(result.stdout)["forms"][0]["name"] == "answer"
