"""Runs simplecalc on a script file or in command-line mode, inside the error handling context manager. Called from
the simplecalc console script.

Exit status is 0 when input runs out or a quit command is read, 1 when a statement error is fatal (script files
without --keep-going) and 2 for internal errors.
"""

import argparse
import sys

from simplecalc.lang.error import CalcException, ErrorHandler
from simplecalc.lang.lexical import CharStream
from simplecalc.lang.session import Session
from simplecalc.lang.shell import Shell


def run_file(error_handler, path, keep_going):
    """Evaluates every statement of the file at path ('-' for stdin)."""
    if path == "-":
        error_handler.fatal = not keep_going
        Session(error_handler, CharStream(sys.stdin), path="<stdin>").run()
        return

    try:
        file = open(path, "r")
    except OSError:
        raise CalcException("'{}' could not be opened", path)

    with file:
        error_handler.fatal = not keep_going
        Session(error_handler, CharStream(file), path=path).run()


def main(argv=None):
    """Runs simplecalc. Called from the simplecalc console script."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="simplecalc", description="Simple Calc: an interactive calculator.")
        parser.add_argument("file", help="file to evaluate ('-' for stdin; if empty, goes to command-line mode)",
                            nargs="?")
        parser.add_argument("-k", "--keep-going", action="store_true",
                            help="report errors in file and continue with the next statement")
        args = parser.parse_args(argv)

        if args.file is None and not sys.stdin.isatty():
            args.file, args.keep_going = "-", True  # piped input behaves like a pasted session

        if args.file is not None:
            run_file(error_handler, args.file, args.keep_going)
        else:
            error_handler.fatal = False
            Shell(Session(error_handler)).cmdloop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
