"""
Forth parser CLI entrypoint.

This module provides the command-line interface for parsing Forth source and
printing the resulting syntax tree.

Features:
    - Read source from `.fs`/`.fth`/`.4th`/`.forth` files or inline strings.
    - Parse as a whole program, a single definition, or a bare word sequence.
    - Print the tree as a repr, as JSON, or re-emitted as canonical Forth.
    - Output to console or file.
    - Launch an interactive REPL.

Configuration:
    FORTHPARSE_LOG_LEVEL  Default log level (e.g. DEBUG, INFO); defaults to WARNING.

Example usage:
    forthparse words.fs
    forthparse -s ": square dup * ;" -m definition -f json
    forthparse words.fs -f forth -o canonical.fs
    forthparse --repl --verbose
"""

import argparse
import json
import logging
import os
import sys
from typing import Any

from forthparse.emitters.forth_emitter import emit_source
from forthparse.forth_ast import tree_to_dict
from forthparse.forth_entry import (
    ParseFailure,
    try_parse_definition,
    try_parse_program,
    try_parse_word_sequence,
)

logger = logging.getLogger(__name__)

SOURCE_SUFFIXES = (".fs", ".fth", ".4th", ".forth")

PARSE_MODES = {
    "program": try_parse_program,
    "definition": try_parse_definition,
    "words": try_parse_word_sequence,
}

LOG_LEVEL_ENV = "FORTHPARSE_LOG_LEVEL"


def configure_logging(verbose: bool = False) -> None:
    """Configures root logging from FORTHPARSE_LOG_LEVEL, or DEBUG if verbose."""
    level_name = "DEBUG" if verbose else os.getenv(LOG_LEVEL_ENV, "WARNING").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(name)s: %(message)s")


def format_tree(tree: Any, fmt: str) -> str:
    if fmt == "json":
        return json.dumps(tree_to_dict(tree), indent=2)
    if fmt == "forth":
        return emit_source(tree)
    return repr(tree)


def run_forth(
    source: str,
    is_string: bool = False,
    mode: str = "program",
    fmt: str = "repr",
    out: str | None = None,
) -> bool:
    """
    Run the parser on a file or inline string and print or write the tree.

    Args:
        source (str): Forth source code, or a path to a Forth source file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        mode (str): 'program', 'definition' or 'words'.
        fmt (str): 'repr', 'json' or 'forth'.
        out (str | None): Optional path to write the output. If None, prints to stdout.

    Returns:
        bool: True if the source parsed, False if a diagnostic was reported.

    Raises:
        ValueError: If `is_string` is False and the path has no Forth suffix,
            or if `mode` is unknown.
    """
    if not is_string and not source.endswith(SOURCE_SUFFIXES):
        raise ValueError(f"Only {', '.join(SOURCE_SUFFIXES)} files are supported.")
    if mode not in PARSE_MODES:
        raise ValueError(f"Unknown parse mode: {mode!r}")

    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    result = PARSE_MODES[mode](source)
    if isinstance(result, ParseFailure):
        logger.error("Parse error: %s", result.message)
        return False

    text = format_tree(result.value, fmt)
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        logger.info("Wrote %s", out)
    else:
        print(text)
    return True


def main() -> None:
    """
    Entry point for the forthparse CLI.

    Launches the REPL if no arguments are passed or `--repl` is specified;
    otherwise parses the given source. Exits with status 1 on a parse error.
    """
    if len(sys.argv) == 1:
        from forthparse.forth_repl import start_repl

        configure_logging()
        start_repl()
        return
    parser = argparse.ArgumentParser(prog="forthparse")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "-m",
        "--mode",
        choices=tuple(PARSE_MODES),
        default="program",
        help="Grammar entry point (default: program)",
    )
    parser.add_argument(
        "-f",
        "--format",
        dest="fmt",
        choices=("repr", "json", "forth"),
        default="repr",
        help="Output format (default: repr)",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "--repl", action="store_true", help="Launch interactive REPL instead"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging; JSON trees in REPL"
    )

    args = parser.parse_args()
    configure_logging(args.verbose)

    if args.repl or args.source is None:
        from forthparse.forth_repl import start_repl

        start_repl(verbose=args.verbose)
        return

    ok = run_forth(
        source=args.source,
        is_string=args.string,
        mode=args.mode,
        fmt=args.fmt,
        out=args.out,
    )
    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
