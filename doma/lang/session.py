"""Session control for the doma command: owns the single Environment shared by everything evaluated in one process,
either a whole file or successive lines typed at the shell.
"""

from doma.interpreter import evaluate_source, new_environment
from doma.lang.error import DomaException
from doma.runtime.objects import NIL, is_error
from doma.syntax.scanner import Scanner
from doma.syntax.token import TokenType


class Session:
    """Governs a Doma session: pending sources, results, and the environment they are evaluated in."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path            # used for error messages
        self.cmd_line = cmd_line    # whether or not in command-line mode

        self.env = new_environment()
        self.to_run = []   # list of (source, line num) waiting to be evaluated
        self.results = []  # list of non-nil Objects produced by run

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r") as file:
                    self.add(file.read())
            except OSError:
                raise DomaException("'{}' could not be opened", path)

        elif not cmd_line:
            raise DomaException("'<in>' is a reserved filename")

    @staticmethod
    def preprocess_line(line, add_to_prev):
        """Preprocesses a line typed at the shell. Returns the line with surrounding whitespace removed, and whether
        the line leaves a parenthesis (or string) open and so must be continued by the next line. add_to_prev tells
        whether line already continues an earlier one.
        """
        line = line.strip() if not add_to_prev else line.rstrip()

        depth = 0
        for token in Scanner(line):
            if token.kind is TokenType.LPAREN:
                depth += 1
            elif token.kind is TokenType.RPAREN:
                depth -= 1
            elif token.kind is TokenType.ILLEGAL and token.literal.startswith('"'):
                return line, True  # unterminated string

        return line, depth > 0

    def add(self, source, line_num=None):
        """Queues source for evaluation. Evaluation is delayed until run is called."""
        self.to_run.append((source, line_num))

    def run(self):
        """Evaluates every queued source in order, in this session's environment. Raises a DomaException for syntax
        errors and for runtime errors.
        """
        while self.to_run:
            source, line_num = self.to_run.pop(0)
            if line_num is not None:
                self.error_handler.register_line(self.path, source, line_num)  # in case error is raised

            value, errors = evaluate_source(source, self.env)
            if errors:
                raise DomaException("\n".join(errors), kind="syntax error")
            if is_error(value):
                raise DomaException(value.message, kind="runtime error")

            if value is not NIL:
                self.results.append(value)
            self.error_handler.remove_line(self.path)  # error was not raised

    def pop(self):
        """Removes and returns the inspected form of the last result."""
        return self.results.pop().inspect()
