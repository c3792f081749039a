"""Uses the pure lambda calculus core and the lambdacalc session to interpret .lc files or run in command-line mode.
Also uses error handling context manager. Called from the lc console script.
"""

import argparse
import os

from lambdacalc.lang.error import ErrorHandler
from lambdacalc.lang.session import Session
from lambdacalc.lang.shell import Shell
from lambdacalc.pure.reducer import NormalOrderReducer


def positive_int(value):
    """argparse type for --max-passes."""
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive number of passes, got '{value}'")
    return number


def build_parser():
    parser = argparse.ArgumentParser(prog="lc", description="Untyped lambda calculus interpreter (normal order).")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--max-passes", type=positive_int, default=NormalOrderReducer.MAX_PASSES,
                        help="beta reductions to try before giving up on finding a normal form "
                             f"(default: {NormalOrderReducer.MAX_PASSES})")
    parser.add_argument("--no-color", action="store_true", help="print errors and warnings without colors")
    return parser


def main(argv=None):
    """Runs lambdacalc interpreter. Called from lc console script."""
    args = build_parser().parse_args(argv)
    if args.no_color:
        os.environ["NO_COLOR"] = "1"  # honored by termcolor

    with ErrorHandler() as error_handler:
        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, max_passes=args.max_passes)
            for result in sess.run():
                print(result)

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, max_passes=args.max_passes)).cmdloop()


if __name__ == "__main__":
    main()
