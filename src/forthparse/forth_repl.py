"""
Interactive front end for the Forth parser.

Reads source a line at a time and prints the parsed nodes. Nothing is
executed. Input continues onto further lines while a `:` definition or a
`(` comment is still open.
"""

import json

from forthparse.forth_ast import ForthProgram, SyntaxTree, to_dict
from forthparse.forth_constants import DECLARATION_KEYWORDS
from forthparse.forth_entry import parse_program, parse_word_sequence
from forthparse.forth_lexer import Token, tokenize


def needs_more_input(tokens: list[Token]) -> bool:
    """True while a colon definition or a comment is still open."""
    depth = 0
    for tok in tokens:
        if tok.type == "ERROR":
            return True
        if tok.type == "COLON":
            depth += 1
        elif tok.type == "SEMICOLON":
            depth -= 1
    return depth > 0


def starts_definition(tokens: list[Token]) -> bool:
    first = tokens[0]
    if first.type == "COLON":
        return True
    if first.type == "IDENT" and first.value.upper() in DECLARATION_KEYWORDS:
        return True
    return (
        first.type == "NUMBER"
        and len(tokens) > 1
        and tokens[1].value.upper() == "CONSTANT"
    )


def parse_entry(src: str) -> list[SyntaxTree]:
    """Parses one complete REPL entry.

    Entries that open with a definition are parsed as a program, everything
    else as a bare word sequence. Failures are logged and yield no nodes.
    """
    tokens = tokenize(src)
    if tokens[0].type == "EOF":
        return []
    if starts_definition(tokens):
        program = parse_program(src)
        return list(program.forms) if isinstance(program, ForthProgram) else []
    return parse_word_sequence(src)


def show(node: SyntaxTree, verbose: bool) -> None:
    if verbose:
        print(json.dumps(to_dict(node), indent=2))
    else:
        print(repr(node))


def start_repl(verbose: bool = False) -> None:
    print("Forth parser REPL. Type 'exit' or 'quit' to leave.")

    while True:
        try:
            src_lines: list[str] = []
            while True:
                prompt = ">>> " if not src_lines else "... "
                line = input(prompt)
                if line.strip() in ("exit", "quit") and not src_lines:
                    print("Exiting Forth parser REPL.")
                    return
                src_lines.append(line)
                if not needs_more_input(tokenize("\n".join(src_lines))):
                    break
            src = "\n".join(src_lines).strip()
            if not src:
                continue
            if src.lower() == "verbose-mode":
                verbose = not verbose
                print(f"[mode] >>> Verbose mode {'ON' if verbose else 'OFF'}")
                continue

            for node in parse_entry(src):
                show(node, verbose)

        except (KeyboardInterrupt, EOFError):
            print("\nExiting Forth parser REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
