"""
Nova CLI Entrypoint.

This module provides the command-line interface for the Nova front end.
It scans and parses Nova source and prints the result.

Features:
    - Read source from `.nova` files or inline strings.
    - Print the raw token stream (`--tokens`).
    - Print the parsed program in canonical form, or as JSON (`--json`).
    - Report parse errors on stderr with a non-zero exit status.

Example usage:
    nova hello.nova
    nova -s "let x = 1 + 2 * 3;"
    nova hello.nova --tokens
    nova hello.nova --json --verbose

Exit status:
    0  success
    1  the source has parse errors
    2  usage error, unreadable file or fatal lexing error

Functions:
    run_nova(source: str, is_string: bool = False, mode: str = "ast") -> int:
        Executes the Nova pipeline (read → scan → parse → print) and returns the exit status.

    main(argv: list[str] | None = None) -> int:
        Parses CLI arguments and invokes run_nova.
"""

import argparse
import json
import logging
import sys

from nova.nova_constants import EOF
from nova.nova_lexer import LexError, Lexer
from nova.nova_parser import Parser

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PARSE_ERRORS = 1
EXIT_USAGE = 2


def print_tokens(lexer: Lexer) -> None:
    while True:
        tok = lexer.next_token()
        print(repr(tok))
        if tok.type == EOF:
            break


def run_nova(source: str, is_string: bool = False, mode: str = "ast") -> int:
    """
    Run the Nova front end on a file or an inline string.

    Args:
        source (str): Nova source code, or a path to a `.nova` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        mode (str): 'tokens' prints the token stream, 'ast' prints one canonical
            statement per line, 'json' prints the program as JSON.

    Returns:
        int: The process exit status.
    """
    if not is_string:
        if not source.endswith(".nova"):
            print(f"error: only .nova files are supported: {source}", file=sys.stderr)
            return EXIT_USAGE
        try:
            with open(source, encoding="utf-8") as f:
                source = f.read()
        except OSError as e:
            print(f"error: could not read {e.filename}: {e.strerror}", file=sys.stderr)
            return EXIT_USAGE

    lexer = Lexer.from_source(source)
    try:
        if mode == "tokens":
            print_tokens(lexer)
            for diagnostic in lexer.diagnostics:
                print(f"warning: {diagnostic}", file=sys.stderr)
            return EXIT_OK

        program, errors = Parser(lexer).parse()
    except LexError as e:
        print(f"fatal: {e}", file=sys.stderr)
        return EXIT_USAGE

    logger.debug(
        "parsed %d statement(s) with %d error(s)", len(program.statements), len(errors)
    )

    if errors:
        for message in errors:
            print(f"error: {message}", file=sys.stderr)
        return EXIT_PARSE_ERRORS

    if mode == "json":
        print(json.dumps(program.to_dict(), indent=2))
    else:
        for stmt in program.statements:
            print(stmt)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the Nova CLI.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `--tokens`: Print the token stream instead of parsing.
        - `--ast`: Print the parsed program in canonical form (default).
        - `--json`: Print the parsed program as JSON.
        - `--verbose`: Log scanner and parser activity to stderr.
    """
    parser = argparse.ArgumentParser(prog="nova")
    parser.add_argument("source", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument(
        "--tokens",
        dest="mode",
        action="store_const",
        const="tokens",
        help="Print the token stream",
    )
    output.add_argument(
        "--ast",
        dest="mode",
        action="store_const",
        const="ast",
        help="Print the parsed program (default)",
    )
    output.add_argument(
        "--json",
        dest="mode",
        action="store_const",
        const="json",
        help="Print the parsed program as JSON",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Log scanner and parser activity"
    )
    parser.set_defaults(mode="ast")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )

    return run_nova(source=args.source, is_string=args.string, mode=args.mode)


if __name__ == "__main__":
    sys.exit(main())
