"""
Forth Parser

Parses Forth source tokens into syntax trees.

This module implements the grammar engine: a recursive-descent parser that
transforms the flat list of lexer-generated `Token` objects into the node
shapes defined in `forthparse.forth_ast`.

Supported Constructs
--------------------
- Definitions:
    * Colon definitions: `: name body... ;`
    * Variables: `VARIABLE name`
    * Constants: `<literal> CONSTANT name`
    * Allocations: `CREATE name <literal> ALLOT`
- Body elements:
    * Numeric literals (decimal `42`, hexadecimal `0xFF`)
    * Conditionals: `IF ... THEN`, `IF ... ELSE ... THEN`
    * Post-test loops: `BEGIN ... UNTIL`
    * Counted loops: `DO ... LOOP`
    * Word calls: any other word (`dup`, `*`, `1-`, `i`, ...)

Parser Behavior
---------------
- Fails fast: raises a `ForthSyntaxError` subclass on the first malformed construct.
- Keywords are matched case-insensitively, by lookup at each decision point.
- Control-flow nesting is tracked on an explicit frame stack, not the Python
  call stack, so arbitrarily deep bodies parse.
- Inside a body only control keywords are structural; declaration keywords
  there are plain word calls.

Entry Points
------------
- `parse()`: Parse a full program into a `ForthProgram`.
- `parse_definition()`: Parse exactly one definition or declaration.
- `parse_word_sequence()`: Parse a bare list of body elements (REPL mode).

Raises
------
ForthSyntaxError
    UnexpectedTokenError, UnterminatedConstructError or UnknownTopLevelFormError.
"""

from __future__ import annotations

from forthparse.forth_ast import (
    ForthCreate,
    ForthProgram,
    ProcedureDef,
    SyntaxTree,
    VarDecl,
    build_conditional,
    build_constant,
    build_counted_loop,
    build_create,
    build_integer,
    build_post_test_loop,
    build_procedure,
    build_variable,
    build_word_call,
)
from forthparse.forth_constants import (
    CONTROL_CLOSERS,
    CONTROL_OPENERS,
    INT64_MAX,
    INT64_MIN,
    keyword_of,
)
from forthparse.forth_lexer import Token


class ForthSyntaxError(SyntaxError):
    """Base class for grammar errors.

    Attributes:
        token (Token): The token at which parsing failed.
        line (int): Line of the failing token.
        col (int): Column of the failing token.
    """

    def __init__(self, message: str, token: Token) -> None:
        super().__init__(message)
        self.token = token
        self.line = token.line
        self.col = token.col

    def describe(self) -> str:
        """Human-readable diagnostic including the token text and position."""
        return (
            f"{self.msg} at line {self.line}, col {self.col} "
            f"(token {self.token.value!r})"
        )


class UnexpectedTokenError(ForthSyntaxError):
    """The grammar expected something else at the current position."""


class UnterminatedConstructError(ForthSyntaxError):
    """An opener (`:`, `IF`, `BEGIN`, `DO`, `(`) was never closed."""


class UnknownTopLevelFormError(ForthSyntaxError):
    """A top-level token sequence matches no definition shape."""


class Parser:
    """
    Forth Parser Class

    Transforms a list of lexical tokens into syntax tree nodes. The token list
    must end with an EOF token, as produced by `forthparse.forth_lexer.tokenize`.

    Attributes
    ----------
    tokens : list[Token]
        The input token stream to be parsed.
    position : int
        Current index into the token stream.
    """

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens: list[Token] = tokens
        self.position: int = 0

    def current(self) -> Token:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        last = self.tokens[-1] if self.tokens else None
        return Token("EOF", "EOF", last.line if last else 0, last.col if last else 0)

    def peek(self, offset: int = 1) -> Token:
        index = self.position + offset
        return self.tokens[index] if index < len(self.tokens) else Token("EOF", "EOF")

    def advance(self) -> Token:
        tok = self.current()
        self.position += 1
        return tok

    def keyword(self, tok: Token | None = None) -> str | None:
        """Returns the keyword an IDENT token spells, or None."""
        tok = tok if tok is not None else self.current()
        if tok.type != "IDENT":
            return None
        return keyword_of(tok.value)

    def check_lexical(self) -> None:
        tok = self.current()
        if tok.type == "ERROR":
            raise UnterminatedConstructError("Unterminated comment", tok)

    def match(self, *types: str) -> Token:
        self.check_lexical()
        tok = self.current()
        if tok.type in types:
            return self.advance()
        expected = " or ".join(types)
        raise UnexpectedTokenError(f"Expected {expected}, got {tok.type}", tok)

    def match_keyword(self, word: str) -> Token:
        self.check_lexical()
        tok = self.current()
        if self.keyword(tok) == word:
            return self.advance()
        raise UnexpectedTokenError(f"Expected {word}, got {tok.value!r}", tok)

    def match_name(self, what: str) -> Token:
        """Consumes an identifier usable as a definition name."""
        self.check_lexical()
        tok = self.current()
        if tok.type != "IDENT":
            raise UnexpectedTokenError(f"Expected {what} name, got {tok.type}", tok)
        if self.keyword(tok) is not None:
            raise UnexpectedTokenError(
                f"Reserved keyword {tok.value!r} cannot be used as a {what} name", tok
            )
        return self.advance()

    def match_literal(self) -> Token:
        tok = self.match("NUMBER")
        if not INT64_MIN <= tok.int_value() <= INT64_MAX:
            raise UnexpectedTokenError("Integer literal out of 64-bit range", tok)
        return tok

    # Entry rules

    def parse(self) -> ForthProgram:
        """Parse a full program: top-level forms until EOF."""
        forms: list[SyntaxTree] = []
        while True:
            self.check_lexical()
            if self.current().type == "EOF":
                break
            forms.append(self.parse_top_level_form())
        return ForthProgram(forms)

    def parse_definition(self) -> ProcedureDef | VarDecl | ForthCreate:
        """Parse exactly one definition; anything after it is an error."""
        self.check_lexical()
        if self.current().type == "EOF":
            raise UnknownTopLevelFormError(
                "Expected a definition, got end of input", self.current()
            )
        node = self.parse_declaration()
        if node is None:
            tok = self.current()
            raise UnknownTopLevelFormError(
                f"Expected a definition, got {tok.value!r}", tok
            )
        self.check_lexical()
        if self.current().type != "EOF":
            tok = self.current()
            raise UnexpectedTokenError(
                f"Unexpected {tok.value!r} after definition", tok
            )
        return node

    def parse_word_sequence(self) -> list[SyntaxTree]:
        """Parse body elements until EOF, with no enclosing definition."""
        return self.parse_body((), None)

    # Structural rules

    def parse_top_level_form(self) -> SyntaxTree:
        node = self.parse_declaration()
        if node is not None:
            return node

        tok = self.current()
        if tok.type == "SEMICOLON":
            raise UnexpectedTokenError("Unmatched ';' outside of a definition", tok)
        if tok.type == "NUMBER":
            return build_integer(self.match_literal())
        if tok.type == "IDENT" and self.keyword(tok) is None:
            return build_word_call(self.advance())
        raise UnknownTopLevelFormError(
            f"{tok.value!r} is not valid at the top level", tok
        )

    def parse_declaration(self) -> ProcedureDef | VarDecl | ForthCreate | None:
        """Recognizes one definition shape, or returns None without consuming."""
        self.check_lexical()
        tok = self.current()
        kw = self.keyword(tok)

        if tok.type == "COLON":
            return self.parse_procedure()
        if kw == "VARIABLE":
            keyword_tok = self.advance()
            return build_variable(keyword_tok, self.match_name("variable"))
        if kw == "CREATE":
            return self.parse_create()
        if tok.type == "NUMBER" and self.keyword(self.peek()) == "CONSTANT":
            literal = self.match_literal()
            self.advance()
            return build_constant(literal, self.match_name("constant"))
        return None

    def parse_procedure(self) -> ProcedureDef:
        colon = self.match("COLON")
        name = self.match_name("word")
        body = self.parse_body((";",), colon)
        self.match("SEMICOLON")
        return build_procedure(colon, name, body)

    def parse_create(self) -> ForthCreate:
        keyword_tok = self.match_keyword("CREATE")
        name = self.match_name("buffer")
        size = self.match_literal()
        self.match_keyword("ALLOT")
        if self.current().type == "SEMICOLON":
            self.advance()
        return build_create(keyword_tok, name, size)

    # Body rules

    def at_terminator(self, tok: Token) -> str | None:
        """Returns the terminator spelled by `tok` (a closer keyword or ';')."""
        if tok.type == "SEMICOLON":
            return ";"
        kw = self.keyword(tok)
        return kw if kw in CONTROL_CLOSERS else None

    def parse_body(
        self, terminators: tuple[str, ...], opener: Token | None
    ) -> list[SyntaxTree]:
        """Parse body elements up to (not including) one of `terminators`.

        With no opener this is the REPL entry and EOF ends the sequence;
        otherwise EOF means the opener was never closed. Nested control
        flow is tracked on an explicit stack of frames, so nesting depth is
        bounded by memory rather than by the interpreter's recursion limit.
        """
        stack: list[BodyFrame] = [BodyFrame(opener, terminators)]
        while True:
            self.check_lexical()
            frame = stack[-1]
            tok = self.current()
            if tok.type == "EOF":
                if frame.reported is None:
                    return frame.body
                raise UnterminatedConstructError(
                    f"Unterminated {frame.reported.value!r} opened at line "
                    f"{frame.reported.line}, col {frame.reported.col}: expected "
                    f"{' or '.join(frame.terminators)} before end of input",
                    tok,
                )
            term = self.at_terminator(tok)
            if term is not None:
                if term not in frame.terminators:
                    raise UnexpectedTokenError(f"Unexpected {tok.value!r}", tok)
                if len(stack) == 1:
                    return frame.body
                node = self.close_frame(frame, term)
                if node is not None:
                    stack.pop()
                    stack[-1].body.append(node)
                continue

            kw = self.keyword(tok)
            if tok.type == "NUMBER":
                frame.body.append(build_integer(self.match_literal()))
            elif tok.type == "COLON":
                raise UnexpectedTokenError("Definitions cannot be nested", tok)
            elif kw in CONTROL_OPENERS:
                stack.append(BodyFrame(self.advance(), CONTROL_OPENERS[kw]))
            else:
                frame.body.append(build_word_call(self.match("IDENT")))

    def close_frame(self, frame: BodyFrame, term: str) -> SyntaxTree | None:
        """Consumes the closer of a nested frame and builds its node.

        `ELSE` only switches the frame to its alternate branch and returns None.
        """
        closer = self.advance()
        opener = frame.opener
        assert opener is not None  # for mypy
        if term == "ELSE":
            frame.consequent = frame.body
            frame.body = []
            frame.terminators = ("THEN",)
            frame.reported = closer
            return None
        if term == "THEN":
            if frame.consequent is None:
                return build_conditional(opener, frame.body, None)
            return build_conditional(opener, frame.consequent, frame.body)
        if term == "UNTIL":
            return build_post_test_loop(opener, frame.body)
        return build_counted_loop(opener, frame.body)


class BodyFrame:
    """One open body on the parser's nesting stack.

    Attributes:
        opener (Token | None): Token that opened the construct; None at the REPL root.
        reported (Token | None): Token named in diagnostics (the `ELSE` once seen).
        terminators (tuple[str, ...]): Closers accepted at this level.
        body (list[SyntaxTree]): Elements collected so far.
        consequent (list[SyntaxTree] | None): The `IF` branch, set once `ELSE` is seen.
    """

    def __init__(self, opener: Token | None, terminators: tuple[str, ...]) -> None:
        self.opener = opener
        self.reported = opener
        self.terminators = terminators
        self.body: list[SyntaxTree] = []
        self.consequent: list[SyntaxTree] | None = None


__all__ = [
    "ForthSyntaxError",
    "Parser",
    "UnexpectedTokenError",
    "UnknownTopLevelFormError",
    "UnterminatedConstructError",
]
