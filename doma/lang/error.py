"""Error reporting for the doma command. Only DomaExceptions should be encountered while running: if another type of
error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Note that the interpreter core never raises for errors in Doma programs (syntax errors come back as a list of
messages, runtime errors as Error objects). It is the Session that turns those into DomaExceptions.
"""

import sys

from termcolor import colored


class DomaException(Exception):
    """Templates an error message so that it can be reported by ErrorHandler. exprs are formatted into msg in bold."""

    def __init__(self, msg, exprs=None, kind="error", internal=False):
        if exprs is None:
            exprs = []
        if isinstance(exprs, str):
            exprs = [exprs]

        if exprs:
            msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        super().__init__(msg)

        self.msg = msg
        self.kind = kind  # "error", "syntax error" or "runtime error"
        self.internal = internal


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report Doma errors instead."""
    ERROR = "red"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    def throw(self, error):
        """Reports error (a DomaException) along with the lines registered in self.traceback. Exits if fatal."""
        error_msg = ""
        for file, (line, line_num) in self.traceback.items():
            if line:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line.strip()}\n"

        prefix = ""
        if error.internal:
            prefix += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])
        prefix += colored(f"{error.kind}: ", ErrorHandler.ERROR, attrs=["bold"])

        # multi-line messages (e.g. several syntax errors) get one prefixed line each
        error_msg += "\n".join(prefix + msg_line for msg_line in error.msg.splitlines())
        print(error_msg)

        if self.fatal:
            sys.exit(1)
        for file in self.traceback:
            self.remove_line(file)  # if error occurred, reset traceback (no need if error is fatal)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(DomaException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(DomaException("maximum recursion depth exceeded"))
        elif exc_type is DomaException:
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(DomaException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
