import builtins
import os
import subprocess
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

from forthparse.forth_ast import (
    Conditional,
    IntegerLiteral,
    ProcedureDef,
    VarDecl,
    WordCall,
)
from forthparse.forth_lexer import tokenize
from forthparse.forth_repl import needs_more_input, parse_entry, start_repl

SRC_DIR = Path(__file__).resolve().parent.parent / "src"


def feed(monkeypatch: pytest.MonkeyPatch, lines: list[str]) -> list[str]:
    """Feeds `lines` to input() and records the prompts shown."""
    prompts: list[str] = []
    it: Iterator[str] = iter(lines)

    def fake_input(prompt: str = "") -> str:
        prompts.append(prompt)
        try:
            return next(it)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr(builtins, "input", fake_input)
    return prompts


def test_needs_more_input() -> None:
    assert needs_more_input(tokenize(": square"))
    assert not needs_more_input(tokenize(": square dup * ;"))
    assert needs_more_input(tokenize("dup ( open comment"))
    assert not needs_more_input(tokenize("dup swap"))


def test_parse_entry_word_sequence() -> None:
    assert parse_entry("dup IF drop THEN") == [
        WordCall("dup"),
        Conditional([WordCall("drop")], None),
    ]


def test_parse_entry_definitions() -> None:
    assert parse_entry("VARIABLE x 5 CONSTANT five") == [
        VarDecl("x", False, None),
        VarDecl("five", True, IntegerLiteral(5)),
    ]
    assert parse_entry(": f dup ;") == [ProcedureDef("f", [WordCall("dup")])]


def test_parse_entry_blank_and_malformed() -> None:
    assert parse_entry("( just a comment )") == []
    assert parse_entry(": f IF ;") == []
    assert parse_entry("THEN") == []


def test_repl_prints_nodes(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["dup swap", "exit"])
    start_repl()
    out = capsys.readouterr().out
    assert "WordCall(name='dup')" in out
    assert "WordCall(name='swap')" in out
    assert out.rstrip().endswith("Exiting Forth parser REPL.")


def test_repl_continues_open_definition(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    prompts = feed(monkeypatch, [": square", "  dup * ;", "quit"])
    start_repl()
    assert prompts == [">>> ", "... ", ">>> "]
    assert "ProcedureDef(name='square'" in capsys.readouterr().out


def test_repl_verbose_prints_json(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["VARIABLE x"])
    start_repl(verbose=True)
    out = capsys.readouterr().out
    assert '"kind": "var_decl"' in out


def test_repl_toggles_verbose_mode(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["verbose-mode", "dup"])
    start_repl()
    out = capsys.readouterr().out
    assert "[mode] >>> Verbose mode ON" in out
    assert '"name": "dup"' in out


def test_repl_skips_blank_lines(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["", "   "])
    start_repl()
    out = capsys.readouterr().out
    assert "WordCall" not in out


def test_repl_module_runs_as_script() -> None:
    result = subprocess.run(
        [sys.executable, "-m", "forthparse.forth_repl"],
        input="dup\nexit\n",
        capture_output=True,
        text=True,
        env={**os.environ, "PYTHONPATH": str(SRC_DIR)},
    )
    assert result.returncode == 0
    assert "WordCall(name='dup')" in result.stdout
    assert "Exiting Forth parser REPL." in result.stdout
