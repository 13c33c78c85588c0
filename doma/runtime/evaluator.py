"""Tree-walking evaluator for Doma.

Runtime errors are values, not exceptions: anything that goes wrong produces an Error object, and every place that
evaluates a sub-expression checks for one and returns it straight away. The first Error therefore short-circuits
everything above it, up to the top-level Program.

Builtins receive their argument expressions unevaluated, which is what lets if, define and lambda be special forms
while still being ordinary first-class values.
"""

import operator
import re

from doma.runtime.environment import Environment
from doma.runtime.objects import (FALSE, NIL, TRUE, Boolean, Builtin, Error, Lambda, List, Number, Procedure, String,
                                  Symbol, is_error, is_truthy, new_error)
from doma.syntax import ast
from doma.syntax.token import TokenType


INT64_MIN = -2 ** 63
INT64_RANGE = 2 ** 64

ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", '"': '"'}
ESCAPE_PATTERN = re.compile(r"\\(.?)", re.DOTALL)


def evaluate(expr, env):
    """Evaluates expr in env and returns the resulting Object (possibly an Error)."""
    if isinstance(expr, ast.Number):
        return Number(expr.value)
    elif isinstance(expr, ast.String):
        return String(expr.value)
    elif isinstance(expr, ast.Boolean):
        return TRUE if expr.value else FALSE
    elif isinstance(expr, ast.Symbol):
        return Symbol(expr.value)
    elif isinstance(expr, ast.BuiltinIdentifier):
        return Builtin(expr.kind, expr.value)
    elif isinstance(expr, ast.QuotedList):
        return eval_quoted_list(expr, env)
    elif isinstance(expr, ast.Identifier):
        return eval_identifier(expr, env)
    elif isinstance(expr, ast.Form):
        return eval_form(expr, env)
    elif isinstance(expr, ast.Program):
        return eval_program(expr, env)

    raise TypeError(f"cannot evaluate {type(expr).__name__}")


def eval_program(program, env):
    result = NIL
    for expr in program.expressions:
        result = evaluate(expr, env)
        if is_error(result):
            return result
    return result


def eval_identifier(expr, env):
    value = env.get(expr.value)
    if value is None:
        return new_error("identifier not found: {}", expr.value)
    return value


def eval_quoted_list(expr, env):
    """Builds a fresh List for a list literal. Identifiers and builtin names become Symbols instead of being looked up;
    everything else is evaluated.
    """
    elements = []
    for element in expr.elements:
        if isinstance(element, (ast.Identifier, ast.BuiltinIdentifier)):
            obj = Symbol(element.value)
        else:
            obj = evaluate(element, env)
            if is_error(obj):
                return obj
        elements.append(obj)
    return List(elements)


def eval_form(form, env):
    callee = evaluate(form.first, env)
    if is_error(callee):
        return callee

    if isinstance(callee, Builtin):
        return BUILTINS[callee.kind](callee, form.rest, env)
    elif isinstance(callee, (Procedure, Lambda)):
        return apply_function(callee, form.rest, env)

    return new_error("unknown procedure: {}", form.first)


def apply_function(callee, args, env):
    """Calls a Lambda (or a Procedure wrapping one). Arguments are evaluated left to right in the caller's env; the
    body runs in a new scope enclosed by the lambda's own env. Parameters without an argument are bound to nil.
    """
    function = callee.function if isinstance(callee, Procedure) else callee
    if len(args) > len(function.params):
        name = callee.name if isinstance(callee, Procedure) else "lambda"
        return new_error("{} expects at most {} {}, got {}", name, len(function.params),
                         _plural(len(function.params)), len(args))

    objs = _evaluate_all(args, env)
    if is_error(objs):
        return objs

    scope = Environment.new_enclosed(function.env)
    for idx, param in enumerate(function.params):
        scope.set(param, objs[idx] if idx < len(objs) else NIL)

    result = NIL
    for expr in function.body:
        result = evaluate(expr, scope)
        if is_error(result):
            return result
    return result


# ---------------------------------------------------------------------------------------------------------------------
# builtins: each takes (builtin, argument expressions, env)
# ---------------------------------------------------------------------------------------------------------------------

def _plural(count):
    return "argument" if count == 1 else "arguments"


def _check_arity(builtin, args, expected):
    """Returns an Error if args doesn't have exactly expected elements, else None."""
    if len(args) != expected:
        return new_error("{} expects {} {}, got {}", builtin.name, expected, _plural(expected), len(args))
    return None


def _evaluate_all(args, env):
    """Evaluates args in order. Returns the list of results, or the first Error encountered."""
    objs = []
    for arg in args:
        obj = evaluate(arg, env)
        if is_error(obj):
            return obj
        objs.append(obj)
    return objs


def _to_int64(value):
    """Wraps value into the signed 64-bit range."""
    return (value - INT64_MIN) % INT64_RANGE + INT64_MIN


def _truncating_div(left, right):
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


MATH_OPERATORS = {
    TokenType.PLUS: operator.add,
    TokenType.MINUS: operator.sub,
    TokenType.ASTERISK: operator.mul,
    TokenType.SLASH: _truncating_div,
}

COMPARISON_OPERATORS = {
    TokenType.LT: operator.lt,
    TokenType.GT: operator.gt,
    TokenType.LTE: operator.le,
    TokenType.GTE: operator.ge,
}


def eval_math(builtin, args, env):
    values = []
    for arg in args:
        obj = evaluate(arg, env)
        if is_error(obj):
            return obj
        if not isinstance(obj, Number):
            return new_error("type mismatch - expected NUMBER, got {}", obj.type_name)
        values.append(obj.value)

    if not values:
        return new_error("no arguments given to {}", builtin.name)

    op = MATH_OPERATORS[builtin.kind]
    result, *others = values
    for value in others:
        if builtin.kind is TokenType.SLASH and value == 0:
            return new_error("division by zero")
        result = _to_int64(op(result, value))
    return Number(result)


def _evaluate_pair(builtin, args, env):
    """Evaluates exactly two arguments of the same type. Returns (left, right), or an Error."""
    error = _check_arity(builtin, args, 2)
    if error:
        return error

    objs = _evaluate_all(args, env)
    if is_error(objs):
        return objs

    left, right = objs
    if type(left) is not type(right):
        return new_error("type mismatch - {} and {}", left.type_name, right.type_name)
    return left, right


def eval_comparison(builtin, args, env):
    pair = _evaluate_pair(builtin, args, env)
    if is_error(pair):
        return pair

    left, right = pair
    if not isinstance(left, (Number, String)):
        return new_error("unsupported type {} for {}", left.type_name, builtin.name)
    return TRUE if COMPARISON_OPERATORS[builtin.kind](left.value, right.value) else FALSE


def eval_eq(builtin, args, env):
    pair = _evaluate_pair(builtin, args, env)
    if is_error(pair):
        return pair

    left, right = pair
    if not isinstance(left, (Number, String, Boolean, Symbol)):
        return new_error("eq on invalid type {}", left.type_name)
    return TRUE if left.value == right.value else FALSE


def eval_if(builtin, args, env):
    error = _check_arity(builtin, args, 3)
    if error:
        return error

    condition, consequence, alternative = args
    cond = evaluate(condition, env)
    if is_error(cond):
        return cond
    return evaluate(consequence if is_truthy(cond) else alternative, env)


def eval_define(builtin, args, env):
    error = _check_arity(builtin, args, 2)
    if error:
        return error

    name, value = args
    if not isinstance(name, ast.Identifier):
        return new_error("define expects first argument to be an identifier, got {}", name)

    obj = evaluate(value, env)
    if is_error(obj):
        return obj
    if isinstance(obj, Lambda):
        obj = Procedure(name.value, obj)
    return env.set(name.value, obj)


def eval_lambda(builtin, args, env):
    if len(args) < 2:
        return new_error("lambda expects a parameter list and at least one body expression, got {} {}", len(args),
                         _plural(len(args)))

    params = ast.parameter_names(args[0])
    if params is None:
        return new_error("lambda expects a list of identifiers as parameters, got {}", args[0])
    return Lambda(params, tuple(args[1:]), env)


def eval_display(builtin, args, env):
    objs = _evaluate_all(args, env)
    if is_error(objs):
        return objs

    print(" ".join(obj.inspect() for obj in objs))
    return NIL


def eval_printf(builtin, args, env):
    """Like display, but interprets backslash escapes and doesn't end the line."""
    objs = _evaluate_all(args, env)
    if is_error(objs):
        return objs

    text = " ".join(obj.inspect() for obj in objs)
    for match in ESCAPE_PATTERN.finditer(text):
        if match.group(1) not in ESCAPES:
            return new_error("invalid escape sequence '{}' in printf", match.group(0))

    print(ESCAPE_PATTERN.sub(lambda match: ESCAPES[match.group(1)], text), end="")
    return NIL


def _evaluate_list(builtin, arg, env):
    """Evaluates arg and checks that it is a List. Returns the List, or an Error."""
    obj = evaluate(arg, env)
    if is_error(obj):
        return obj
    if not isinstance(obj, List):
        return new_error("{} expects a LIST, got {}", builtin.name, obj.type_name)
    return obj


def eval_first(builtin, args, env):
    lst = _check_arity(builtin, args, 1) or _evaluate_list(builtin, args[0], env)
    if is_error(lst):
        return lst
    if not lst.elements:
        return new_error("first expects a non-empty list")
    return lst.elements[0]


def eval_rest(builtin, args, env):
    lst = _check_arity(builtin, args, 1) or _evaluate_list(builtin, args[0], env)
    if is_error(lst):
        return lst
    return List(lst.elements[1:])


def eval_length(builtin, args, env):
    lst = _check_arity(builtin, args, 1) or _evaluate_list(builtin, args[0], env)
    if is_error(lst):
        return lst
    return Number(len(lst.elements))


def eval_cons(builtin, args, env):
    error = _check_arity(builtin, args, 2)
    if error:
        return error

    head = evaluate(args[0], env)
    if is_error(head):
        return head
    tail = _evaluate_list(builtin, args[1], env)
    if is_error(tail):
        return tail
    return List([head] + tail.elements)


def eval_list_ref(builtin, args, env):
    lst = _check_arity(builtin, args, 2) or _evaluate_list(builtin, args[0], env)
    if is_error(lst):
        return lst

    idx = evaluate(args[1], env)
    if is_error(idx):
        return idx
    if not isinstance(idx, Number):
        return new_error("list-ref expects NUMBER as second argument, got {}", idx.type_name)
    if not 0 <= idx.value < len(lst.elements):
        return new_error("list-ref index {} out of range for list of length {}", idx.value, len(lst.elements))
    return lst.elements[idx.value]


def eval_list(builtin, args, env):
    objs = _evaluate_all(args, env)
    if is_error(objs):
        return objs
    return List(objs)


def eval_begin(builtin, args, env):
    if not args:
        return new_error("begin expects at least 1 argument, got 0")

    result = NIL
    for arg in args:
        result = evaluate(arg, env)
        if is_error(result):
            return result
    return result


BUILTINS = {
    TokenType.PLUS: eval_math,
    TokenType.MINUS: eval_math,
    TokenType.ASTERISK: eval_math,
    TokenType.SLASH: eval_math,
    TokenType.LT: eval_comparison,
    TokenType.GT: eval_comparison,
    TokenType.LTE: eval_comparison,
    TokenType.GTE: eval_comparison,
    TokenType.EQ: eval_eq,
    TokenType.IF: eval_if,
    TokenType.DEFINE: eval_define,
    TokenType.LAMBDA: eval_lambda,
    TokenType.DISPLAY: eval_display,
    TokenType.PRINTF: eval_printf,
    TokenType.FIRST: eval_first,
    TokenType.REST: eval_rest,
    TokenType.LENGTH: eval_length,
    TokenType.CONS: eval_cons,
    TokenType.LIST_REF: eval_list_ref,
    TokenType.LIST: eval_list,
    TokenType.BEGIN: eval_begin,
}
