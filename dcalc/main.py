"""Runs the dcalc interpreter on a file of dcalc lines, or in command-line mode. Also uses the error handling context
manager. Called from the `dcalc` console script.
"""

import argparse
import sys

from dcalc.lang.error import ErrorHandler
from dcalc.lang.session import Session
from dcalc.lang.shell import Shell


def main(argv=None):
    """Runs the dcalc interpreter. Called from the dcalc console script."""
    parser = argparse.ArgumentParser(prog="dcalc", description="Calculator for dice and other discrete distributions.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--no-std", action="store_true", help="start with an empty environment (no builtins)")
    args = parser.parse_args(argv)

    with ErrorHandler() as error_handler:
        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, import_std=not args.no_std)
            sess.run()

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, import_std=not args.no_std)).cmdloop()


if __name__ == "__main__":
    sys.exit(main())
