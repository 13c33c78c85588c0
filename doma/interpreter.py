"""Doma interpreter: the front-to-back pipeline behind the doma command.

Basic program flow:
    1. Scanner: turns source text into a lazy stream of tokens (see doma/syntax/scanner.py)
        - Never fails; unknown characters become ILLEGAL tokens
    2. Parser: builds a Program, a sequence of top-level expressions, with one token of lookahead
       (see doma/syntax/parser.py)
        - Collects syntax errors instead of stopping at the first one
    3. Evaluator: walks the Program against an Environment (see doma/runtime/evaluator.py)
        - Not a compiler, so the tree is walked directly on every call
        - Runtime errors are Error objects that short-circuit evaluation

Hosts (the REPL and file mode, see doma/lang/) create one Environment with new_environment and hand it to every
evaluate_source call, so definitions persist between calls.
"""

from doma.runtime.environment import Environment
from doma.runtime.evaluator import evaluate
from doma.runtime.objects import NIL, new_error
from doma.syntax.parser import Parser
from doma.syntax.scanner import Scanner


def new_environment():
    """Returns an empty top-level Environment."""
    return Environment()


def parse(source):
    """Returns (Program, list of syntax error messages) for source."""
    return Parser(Scanner(source)).parse_program()


def evaluate_source(source, env):
    """Parses and evaluates source in env. Returns (Object, list of syntax error messages). If there are syntax
    errors, nothing is evaluated and the Object is nil. Runtime errors are returned as Error objects.
    """
    try:
        program, errors = parse(source)
        if errors:
            return NIL, errors
        return evaluate(program, env), []
    except RecursionError:
        return new_error("maximum recursion depth exceeded"), []
