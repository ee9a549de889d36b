"""
Public entry points for parsing Forth source.

Two layers are provided:

- `try_parse_program`, `try_parse_definition`, `try_parse_word_sequence` return a
  discriminated result, either `ParseSuccess(value)` or `ParseFailure(error)`,
  and leave it to the caller to decide how to degrade.
- `parse_program`, `parse_definition`, `parse_word_sequence` are convenience
  wrappers that never raise: on failure they log one diagnostic on this
  module's logger and return `Unit()` (or `[]` for word sequences).

Each call lexes and parses its own input; no state is kept between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

from forthparse.forth_ast import (
    ForthCreate,
    ForthProgram,
    ProcedureDef,
    SyntaxTree,
    Unit,
    VarDecl,
)
from forthparse.forth_lexer import tokenize
from forthparse.forth_parser import ForthSyntaxError, Parser, UnexpectedTokenError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ParseSuccess(Generic[T]):
    value: T
    ok = True


@dataclass
class ParseFailure:
    error: ForthSyntaxError
    ok = False

    @property
    def message(self) -> str:
        return self.error.describe()


ParseResult = Union[ParseSuccess[T], ParseFailure]


def _run(source: str, rule: Callable[[Parser], T]) -> ParseResult[T]:
    parser = Parser(tokenize(source))
    try:
        value = rule(parser)
    except ForthSyntaxError as e:
        return ParseFailure(e)
    except RecursionError:
        return ParseFailure(
            UnexpectedTokenError("Input nested too deeply to parse", parser.current())
        )
    logger.debug("Parsed %d tokens", len(parser.tokens))
    return ParseSuccess(value)


def try_parse_program(source: str) -> ParseResult[ForthProgram]:
    return _run(source, Parser.parse)


def try_parse_definition(
    source: str,
) -> ParseResult[ProcedureDef | VarDecl | ForthCreate]:
    return _run(source, Parser.parse_definition)


def try_parse_word_sequence(source: str) -> ParseResult[list[SyntaxTree]]:
    return _run(source, Parser.parse_word_sequence)


def _report(failure: ParseFailure) -> None:
    logger.error("Parse error: %s", failure.message)


def parse_program(source: str) -> SyntaxTree:
    """Parse a complete program.

    Returns:
        ForthProgram on success, Unit on failure (a diagnostic is logged).
    """
    result = try_parse_program(source)
    if isinstance(result, ParseFailure):
        _report(result)
        return Unit()
    return result.value


def parse_definition(source: str) -> SyntaxTree:
    """Parse exactly one definition or declaration.

    Returns:
        ProcedureDef, VarDecl or ForthCreate on success; Unit on failure or if
        the input holds anything besides a single definition.
    """
    result = try_parse_definition(source)
    if isinstance(result, ParseFailure):
        _report(result)
        return Unit()
    return result.value


def parse_word_sequence(source: str) -> list[SyntaxTree]:
    """Parse a bare sequence of body elements, for interactive evaluation.

    Returns:
        The elements in source order, or an empty list on failure.
    """
    result = try_parse_word_sequence(source)
    if isinstance(result, ParseFailure):
        _report(result)
        return []
    return result.value


__all__ = [
    "ParseFailure",
    "ParseResult",
    "ParseSuccess",
    "parse_definition",
    "parse_program",
    "parse_word_sequence",
    "try_parse_definition",
    "try_parse_program",
    "try_parse_word_sequence",
]
