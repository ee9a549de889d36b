"""
Defines the syntax tree node shapes produced by the Forth parser.

The tree is a closed set of node variants, one dataclass per construct, joined
by the `SyntaxTree` union. Variants share no base class; code that walks the
tree dispatches on the concrete type (or on the `kind` tag).

Variants:
    Unit:            Empty node, only returned as the fallback for a failed parse.
    ForthProgram:    Root of a whole program; `forms` in source order.
    ProcedureDef:    Colon definition `: name ... ;`.
    VarDecl:         `VARIABLE name` or `<literal> CONSTANT name`.
    ForthCreate:     `CREATE name <literal> ALLOT`.
    IntegerLiteral:  Decimal or hexadecimal number.
    WordCall:        Invocation of any non-structural word.
    Conditional:     `IF ... THEN` / `IF ... ELSE ... THEN`.
    PostTestLoop:    `BEGIN ... UNTIL`.
    CountedLoop:     `DO ... LOOP`; limit and start are the preceding elements.

Every node records the `line`/`col` of the token that introduced it. Positions
are excluded from equality and repr, so two parses of the same construct
compare equal regardless of surrounding comments or whitespace.

The module also holds the tree builder: small deterministic constructors that
turn recognized tokens into nodes, and `to_dict` for JSON-ready serialization.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, TypedDict, Union

from forthparse.forth_constants import LOOP_INDEX
from forthparse.forth_lexer import Token


class ASTDict(TypedDict, total=False):
    """Serialized form of a node, as returned by `to_dict`."""

    kind: str
    line: int
    col: int
    name: str
    value: Any
    is_constant: bool
    size: "ASTDict"
    forms: list["ASTDict"]
    body: list["ASTDict"]
    consequent: list["ASTDict"]
    alternate: list["ASTDict"] | None


@dataclass
class Unit:
    kind: ClassVar[str] = "unit"


@dataclass
class IntegerLiteral:
    value: int
    line: int = field(default=0, compare=False, repr=False)
    col: int = field(default=0, compare=False, repr=False)
    kind: ClassVar[str] = "integer"


@dataclass
class WordCall:
    name: str
    line: int = field(default=0, compare=False, repr=False)
    col: int = field(default=0, compare=False, repr=False)
    kind: ClassVar[str] = "word_call"


@dataclass
class Conditional:
    consequent: list[SyntaxTree] = field(default_factory=list)
    alternate: list[SyntaxTree] | None = None
    line: int = field(default=0, compare=False, repr=False)
    col: int = field(default=0, compare=False, repr=False)
    kind: ClassVar[str] = "conditional"


@dataclass
class PostTestLoop:
    body: list[SyntaxTree] = field(default_factory=list)
    line: int = field(default=0, compare=False, repr=False)
    col: int = field(default=0, compare=False, repr=False)
    kind: ClassVar[str] = "post_test_loop"


@dataclass
class CountedLoop:
    body: list[SyntaxTree] = field(default_factory=list)
    line: int = field(default=0, compare=False, repr=False)
    col: int = field(default=0, compare=False, repr=False)
    kind: ClassVar[str] = "counted_loop"


@dataclass
class ProcedureDef:
    name: str
    body: list[SyntaxTree] = field(default_factory=list)
    line: int = field(default=0, compare=False, repr=False)
    col: int = field(default=0, compare=False, repr=False)
    kind: ClassVar[str] = "procedure_def"


@dataclass
class VarDecl:
    name: str
    is_constant: bool = False
    value: IntegerLiteral | None = None
    line: int = field(default=0, compare=False, repr=False)
    col: int = field(default=0, compare=False, repr=False)
    kind: ClassVar[str] = "var_decl"


@dataclass
class ForthCreate:
    name: str
    size: IntegerLiteral
    line: int = field(default=0, compare=False, repr=False)
    col: int = field(default=0, compare=False, repr=False)
    kind: ClassVar[str] = "forth_create"


@dataclass
class ForthProgram:
    forms: list[SyntaxTree] = field(default_factory=list)
    kind: ClassVar[str] = "forth_program"


SyntaxTree = Union[
    Unit,
    ForthProgram,
    ProcedureDef,
    VarDecl,
    ForthCreate,
    IntegerLiteral,
    WordCall,
    Conditional,
    PostTestLoop,
    CountedLoop,
]

NODE_TYPES: tuple[type, ...] = (
    Unit,
    ForthProgram,
    ProcedureDef,
    VarDecl,
    ForthCreate,
    IntegerLiteral,
    WordCall,
    Conditional,
    PostTestLoop,
    CountedLoop,
)


# Tree builder


def build_integer(tok: Token) -> IntegerLiteral:
    return IntegerLiteral(tok.int_value(), line=tok.line, col=tok.col)


def build_word_call(tok: Token) -> WordCall:
    """Builds a WordCall; the loop index word is normalized to lower case."""
    name = LOOP_INDEX if tok.value.lower() == LOOP_INDEX else tok.value
    return WordCall(name, line=tok.line, col=tok.col)


def build_variable(keyword: Token, name: Token) -> VarDecl:
    return VarDecl(name.value, False, None, line=keyword.line, col=keyword.col)


def build_constant(literal: Token, name: Token) -> VarDecl:
    return VarDecl(
        name.value, True, build_integer(literal), line=literal.line, col=literal.col
    )


def build_create(keyword: Token, name: Token, size: Token) -> ForthCreate:
    return ForthCreate(name.value, build_integer(size), line=keyword.line, col=keyword.col)


def build_procedure(colon: Token, name: Token, body: list[SyntaxTree]) -> ProcedureDef:
    return ProcedureDef(name.value, body, line=colon.line, col=colon.col)


def build_conditional(
    opener: Token,
    consequent: list[SyntaxTree],
    alternate: list[SyntaxTree] | None,
) -> Conditional:
    return Conditional(consequent, alternate, line=opener.line, col=opener.col)


def build_post_test_loop(opener: Token, body: list[SyntaxTree]) -> PostTestLoop:
    return PostTestLoop(body, line=opener.line, col=opener.col)


def build_counted_loop(opener: Token, body: list[SyntaxTree]) -> CountedLoop:
    return CountedLoop(body, line=opener.line, col=opener.col)


# Serialization


def to_dict(node: SyntaxTree) -> ASTDict:
    """Converts a node (and all descendants) into a nested, JSON-ready dict."""
    if not isinstance(node, NODE_TYPES):
        raise TypeError(f"Not a syntax tree node: {node!r}")
    out: dict[str, Any] = {"kind": node.kind}
    for f in fields(node):
        val = getattr(node, f.name)
        if isinstance(val, list):
            val = [to_dict(child) for child in val]
        elif isinstance(val, NODE_TYPES):
            val = to_dict(val)
        out[f.name] = val
    return out  # type: ignore[return-value]


def tree_to_dict(tree: SyntaxTree | list[SyntaxTree]) -> ASTDict | list[ASTDict]:
    """Like `to_dict`, but also accepts a bare sequence of nodes."""
    if isinstance(tree, list):
        return [to_dict(node) for node in tree]
    return to_dict(tree)


__all__ = [
    "ASTDict",
    "Conditional",
    "CountedLoop",
    "ForthCreate",
    "ForthProgram",
    "IntegerLiteral",
    "NODE_TYPES",
    "PostTestLoop",
    "ProcedureDef",
    "SyntaxTree",
    "Unit",
    "VarDecl",
    "WordCall",
    "to_dict",
    "tree_to_dict",
]
