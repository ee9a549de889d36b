"""
Renders Forth syntax trees back into canonical Forth source.

This module defines the `ForthEmitter` class, the inverse of the parser: it
walks a tree and produces source text that parses back to a structurally
equal tree.

Behavior:
    - Top-level forms are emitted one per line.
    - Body elements are separated by single spaces.
    - Literals are emitted in decimal; the original radix is not preserved.
    - Comments are not part of the tree and so are never emitted.

Raises:
    - `ValueError`: If a node cannot be expressed as source (e.g. a negative
      literal, or a word name the lexer would split or reclassify).
    - `NotImplementedError`: If an unrecognized node kind has no emitter.
"""

from __future__ import annotations

from forthparse.forth_ast import (
    Conditional,
    CountedLoop,
    ForthCreate,
    ForthProgram,
    IntegerLiteral,
    PostTestLoop,
    ProcedureDef,
    SyntaxTree,
    Unit,
    VarDecl,
    WordCall,
)
from forthparse.forth_constants import CONTROL_KEYWORDS, token_hashmap
from forthparse.forth_lexer import DECIMAL_RE, HEX_RE, WHITESPACE


class ForthEmitter:
    """Emits Forth source from syntax tree nodes.

    Attributes:
        lines (list[str]): Accumulated top-level lines of emitted source.

    Methods:
        emit(node): Emits a whole tree and returns the source text.
        emit_expr(node): Emits a single node as one line of source.
        get_output(): Returns the accumulated source as a string.
    """

    def __init__(self) -> None:
        self.lines: list[str] = []

    def get_output(self) -> str:
        return "\n".join(self.lines)

    def emit(self, tree: SyntaxTree | list[SyntaxTree]) -> str:
        """Emits a tree, or a bare word sequence, and returns the source text."""
        if isinstance(tree, list):
            self.lines.append(self.emit_sequence(tree))
        elif isinstance(tree, ForthProgram):
            for form in tree.forms:
                self.lines.append(self.emit_expr(form))
        else:
            self.lines.append(self.emit_expr(tree))
        return self.get_output()

    def emit_expr(self, node: SyntaxTree) -> str:
        method = getattr(self, f"emit_{node.kind}", None)
        if method is None:
            raise NotImplementedError(f"No emitter method for node kind '{node.kind}'")
        return str(method(node))

    def emit_sequence(self, nodes: list[SyntaxTree]) -> str:
        return " ".join(self.emit_expr(n) for n in nodes)

    def _block(self, *parts: str) -> str:
        return " ".join(p for p in parts if p)

    def emit_unit(self, node: Unit) -> str:
        return ""

    def emit_forth_program(self, node: ForthProgram) -> str:
        return "\n".join(self.emit_expr(f) for f in node.forms)

    def emit_integer(self, node: IntegerLiteral) -> str:
        if node.value < 0:
            raise ValueError(f"Negative literal {node.value} has no source form")
        return str(node.value)

    def emit_word_call(self, node: WordCall) -> str:
        name = node.name
        if (
            not name
            or any(ch in WHITESPACE for ch in name)
            or name in token_hashmap
            or name in ("(", "\\")
            or DECIMAL_RE.fullmatch(name)
            or HEX_RE.fullmatch(name)
            or name.upper() in CONTROL_KEYWORDS
        ):
            raise ValueError(f"Word name {name!r} cannot be emitted as a word call")
        return name

    def emit_procedure_def(self, node: ProcedureDef) -> str:
        return self._block(":", node.name, self.emit_sequence(node.body), ";")

    def emit_var_decl(self, node: VarDecl) -> str:
        if not node.is_constant:
            return f"VARIABLE {node.name}"
        if node.value is None:
            raise ValueError(f"Constant {node.name!r} has no value")
        return f"{self.emit_integer(node.value)} CONSTANT {node.name}"

    def emit_forth_create(self, node: ForthCreate) -> str:
        return f"CREATE {node.name} {self.emit_integer(node.size)} ALLOT"

    def emit_conditional(self, node: Conditional) -> str:
        if node.alternate is None:
            return self._block("IF", self.emit_sequence(node.consequent), "THEN")
        return self._block(
            "IF",
            self.emit_sequence(node.consequent),
            "ELSE",
            self.emit_sequence(node.alternate),
            "THEN",
        )

    def emit_post_test_loop(self, node: PostTestLoop) -> str:
        return self._block("BEGIN", self.emit_sequence(node.body), "UNTIL")

    def emit_counted_loop(self, node: CountedLoop) -> str:
        return self._block("DO", self.emit_sequence(node.body), "LOOP")


def emit_source(tree: SyntaxTree | list[SyntaxTree]) -> str:
    """Renders a tree (or word sequence) to Forth source."""
    return ForthEmitter().emit(tree)


__all__ = ["ForthEmitter", "emit_source"]
