"""
Keyword and token tables for the Forth parser.

Keywords are not baked into the lexer: every word reaches the grammar as an
``IDENT`` token and the grammar consults these tables (case-insensitively) at
each decision point.
"""

# Declaration keywords, only meaningful at the top level / definition entry.
DECLARATION_KEYWORDS: frozenset[str] = frozenset(
    {"VARIABLE", "CONSTANT", "CREATE", "ALLOT"}
)

# Control-flow openers and their closers.
CONTROL_OPENERS: dict[str, tuple[str, ...]] = {
    "IF": ("ELSE", "THEN"),
    "BEGIN": ("UNTIL",),
    "DO": ("LOOP",),
}

CONTROL_CLOSERS: frozenset[str] = frozenset({"ELSE", "THEN", "UNTIL", "LOOP"})

CONTROL_KEYWORDS: frozenset[str] = frozenset(CONTROL_OPENERS) | CONTROL_CLOSERS

RESERVED_KEYWORDS: frozenset[str] = DECLARATION_KEYWORDS | CONTROL_KEYWORDS

# The loop index word; always normalized to lower case.
LOOP_INDEX = "i"

# Structural singletons recognized by the lexer.
token_hashmap: dict[str, str] = {
    ":": "COLON",
    ";": "SEMICOLON",
}

COMMENT_OPEN = "("
COMMENT_CLOSE = ")"
LINE_COMMENT = "\\"

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def keyword_of(text: str) -> str | None:
    """Return the canonical keyword spelled by ``text``, or None."""
    upper = text.upper()
    return upper if upper in RESERVED_KEYWORDS else None


__all__ = [
    "CONTROL_CLOSERS",
    "CONTROL_KEYWORDS",
    "CONTROL_OPENERS",
    "DECLARATION_KEYWORDS",
    "INT64_MAX",
    "INT64_MIN",
    "LOOP_INDEX",
    "RESERVED_KEYWORDS",
    "keyword_of",
    "token_hashmap",
]
