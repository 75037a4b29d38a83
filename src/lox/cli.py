"""Lox CLI — run a script file or start an interactive prompt."""

from __future__ import annotations

import logging
import sys

from .emit import to_sexprs
from .session import EXIT_DATAERR, EXIT_OK, Session
from .tokens import tokenize

EXIT_USAGE = 64
EXIT_NOINPUT = 66

logger = logging.getLogger(__name__)


USAGE: str = """\
lox [OPTIONS] [SCRIPT]

Run a Lox script, or start an interactive prompt when no SCRIPT is given.

Options:
  --tokens       Print the token stream instead of running
  --ast          Print the parsed syntax tree instead of running
  -v, --verbose  Log pipeline stages to stderr
  -h, --help     Show this help message
"""


def _process(session: Session, source: str, mode: str, *, echo: bool) -> None:
    if mode == "tokens":
        for tok in tokenize(source, session.reporter):
            print(str(tok))
        return
    if mode == "ast":
        statements = session.parse(source)
        if not session.had_error:
            print(to_sexprs(statements), end="")
        return
    session.run(source, echo=echo)


def run_file(path: str, mode: str) -> int:
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        print("lox: " + path + ": No such file or directory", file=sys.stderr)
        return EXIT_NOINPUT
    except OSError as e:
        print("lox: " + path + ": " + str(e), file=sys.stderr)
        return EXIT_NOINPUT
    try:
        source = raw.decode("utf-8")
    except ValueError:
        print("lox: " + path + ": invalid utf-8", file=sys.stderr)
        return EXIT_DATAERR

    logger.debug("running %s (%d bytes)", path, len(raw))
    session = Session()
    _process(session, source, mode, echo=False)
    return session.exit_code()


def run_prompt(mode: str) -> int:
    session = Session()
    while True:
        try:
            line = input("> ")
        except (EOFError, KeyboardInterrupt):
            print()
            return EXIT_OK
        _process(session, line, mode, echo=True)
        session.reporter.reset()


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    path: str = ""
    mode = "run"
    verbose = False
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return EXIT_OK
        elif arg == "--tokens":
            mode = "tokens"
            i += 1
        elif arg == "--ast":
            mode = "ast"
            i += 1
        elif arg == "--verbose" or arg == "-v":
            verbose = True
            i += 1
        elif arg.startswith("-"):
            print("lox: unknown flag '" + arg + "'", file=sys.stderr)
            print("Usage: lox [OPTIONS] [SCRIPT]", file=sys.stderr)
            return EXIT_USAGE
        elif path == "":
            path = arg
            i += 1
        else:
            print("Usage: lox [OPTIONS] [SCRIPT]", file=sys.stderr)
            return EXIT_USAGE

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(name)s: %(levelname)s: %(message)s",
        )

    if path == "":
        return run_prompt(mode)
    return run_file(path, mode)


if __name__ == "__main__":
    sys.exit(main())
