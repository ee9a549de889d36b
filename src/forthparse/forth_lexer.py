"""
Lexical analyzer for the Forth dialect.

This module provides core components for converting raw source text into token streams:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Represents a single token with type, value, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Features:
    - Splits input on whitespace (space, tab, carriage return, newline)
    - Skips parenthesized comments `( ... )` and end-of-line comments `\\ ...`
    - Recognizes:
        * `:` and `;` as structural tokens
        * Decimal (`42`) and hexadecimal (`0xFF`) numbers
        * Every other run of non-whitespace characters as an identifier

The lexer is total: it never raises on any input. An unterminated `(` comment
is reported as a single `ERROR` token and left for the grammar to reject.

Example:
    >>> lexer = Lexer(CharacterStream(": square dup * ;"))
    >>> lexer.next_token()
    Token(COLON, :)

Exports:
    - CharacterStream
    - Token
    - Lexer
    - tokenize
"""

import re
from typing import Any

from forthparse.forth_constants import (
    COMMENT_CLOSE,
    COMMENT_OPEN,
    LINE_COMMENT,
    token_hashmap,
)

WHITESPACE = " \t\r\n"

DECIMAL_RE = re.compile(r"[0-9]+")
HEX_RE = re.compile(r"0x([0-9A-Fa-f]+)")


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character at `offset` without advancing, or "" if out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Token:
    """Represents a single lexical token.

    Attributes:
        type (str): The token type ('COLON', 'SEMICOLON', 'NUMBER', 'IDENT', 'ERROR', 'EOF').
        value (str): The raw source text of the token.
        line (int): The 1-based line number where the token appears.
        col (int): The 1-based column number where the token starts.
        radix (int | None): 10 or 16 for NUMBER tokens, otherwise None.
    """

    def __init__(
        self,
        type_: str,
        value: str,
        line: int = 0,
        col: int = 0,
        radix: int | None = None,
    ):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col
        self.radix = radix

    def int_value(self) -> int:
        """Returns the integer denoted by a NUMBER token.

        Raises:
            ValueError: If the token is not a NUMBER.
        """
        if self.type != "NUMBER" or self.radix is None:
            raise ValueError(f"Token {self!r} is not a number")
        digits = self.value[2:] if self.radix == 16 else self.value
        return int(digits, self.radix)

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.col))


class Lexer:
    """Lexical analyzer for Forth source.

    The Lexer takes a CharacterStream and converts it into a stream of Token objects,
    one whitespace-delimited word at a time.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self) -> str:
        return self.stream.peek()

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        while not self.stream.end_of_file() and self.peek() in WHITESPACE:
            self.advance()

    def at_word_boundary(self, offset: int) -> bool:
        """True if the character at `offset` ends a word (whitespace or EOF)."""
        ch = self.stream.peek(offset)
        return ch == "" or ch in WHITESPACE

    def skip_line_comment(self) -> None:
        """Advances through the stream until the end of the current line."""
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def skip_paren_comment(self) -> bool:
        """Skips a `( ... )` comment, including both delimiters.

        Returns:
            bool: False if end of input was reached before the closing `)`.
        """
        self.advance()
        while not self.stream.end_of_file():
            if self.advance() == COMMENT_CLOSE:
                return True
        return False

    def read_word(self) -> str:
        word = ""
        while not self.stream.end_of_file() and self.peek() not in WHITESPACE:
            word += self.advance()
        return word

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Comments are consumed here and never produce tokens. An unterminated
        `(` comment yields an ERROR token positioned at the opening parenthesis.
        """
        while True:
            self.skip_whitespace()

            if self.stream.end_of_file():
                return Token("EOF", "EOF", self.stream.line, self.stream.column)

            ch = self.peek()
            line, col = self.stream.line, self.stream.column

            if ch == COMMENT_OPEN and self.at_word_boundary(1):
                if not self.skip_paren_comment():
                    return Token("ERROR", COMMENT_OPEN, line, col)
                continue

            if ch == LINE_COMMENT and self.at_word_boundary(1):
                self.skip_line_comment()
                continue

            break

        word = self.read_word()

        if word in token_hashmap:
            return Token(token_hashmap[word], word, line, col)

        if DECIMAL_RE.fullmatch(word):
            return Token("NUMBER", word, line, col, radix=10)

        if HEX_RE.fullmatch(word):
            return Token("NUMBER", word, line, col, radix=16)

        return Token("IDENT", word, line, col)


def tokenize(source: str) -> list[Token]:
    """Lexes `source` completely. The returned list always ends with an EOF token."""
    lexer = Lexer(CharacterStream(source, 0, 1, 1))
    tokens: list[Token] = []
    while True:
        tok = lexer.next_token()
        tokens.append(tok)
        if tok.type == "EOF":
            break
    return tokens


__all__ = ["CharacterStream", "Lexer", "Token", "token_hashmap", "tokenize"]
