"""Runs Doma source files, or an interactive shell when no file is given. Also uses the error handling context
manager. Installed as the doma console script.
"""

import argparse
import sys

from doma.lang.error import DomaException, ErrorHandler
from doma.lang.session import Session
from doma.lang.shell import Shell


def main(argv=None):
    """Runs the doma interpreter. Called from the doma console script."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="doma", description="Doma interpreter")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("--recursion-limit", type=int, default=None,
                            help="maximum Python recursion depth, raise for deeply recursive programs")
        args = parser.parse_args(argv)

        if args.recursion_limit is not None:
            if args.recursion_limit < 100:
                raise DomaException("--recursion-limit must be at least 100, got {}", str(args.recursion_limit))
            sys.setrecursionlimit(args.recursion_limit)

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False)
            sess.run()

            for result in sess.results:
                print(result.inspect())

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop()


if __name__ == "__main__":
    main()
