"""Recursive-descent parser for Doma. Builds a Program out of the tokens produced by a Scanner, using one token of
lookahead beyond the current token.

The parser does not give up at the first problem: every syntax error is recorded in Parser.errors (prefixed with the
line it was found on) and parsing resumes with the next top-level expression. A Program is only worth evaluating if
no errors were recorded.
"""

from doma.syntax.ast import (Boolean, BuiltinIdentifier, Form, Identifier, Number, Program, QuotedList, String, Symbol,
                             parameter_names)
from doma.syntax.token import TokenType, is_builtin


INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


class Parser:
    """Parses a single token stream. Create a new Parser for every source text."""

    def __init__(self, scanner):
        self.scanner = scanner
        self.errors = []

        self.cur = None
        self.peek = None
        self.next_token()
        self.next_token()

    def parse_program(self):
        """Parses every top-level expression. Returns (Program, list of syntax error messages)."""
        expressions = []

        while not self.cur_token_is(TokenType.EOF):
            expr = self.parse_expression()
            if expr is not None:
                expressions.append(expr)
            self.next_token()

        return Program(tuple(expressions)), self.errors

    def parse_expression(self):
        """Parses the expression starting at the current token. Leaves the last token of the expression as the
        current token. Returns None (after recording an error) if the expression is malformed.
        """
        token = self.cur
        kind = token.kind

        if kind is TokenType.NUMBER:
            return self.parse_number()
        elif kind is TokenType.STRING:
            return String(token.literal)
        elif kind is TokenType.IDENT:
            return Identifier(token.literal)
        elif kind in (TokenType.TRUE, TokenType.FALSE):
            return Boolean(kind is TokenType.TRUE, token.literal)
        elif kind is TokenType.SYMBOL:
            return Symbol(token.literal)
        elif is_builtin(kind):
            return BuiltinIdentifier(kind, token.literal)
        elif kind is TokenType.TICK:
            return self.parse_quoted_list()
        elif kind is TokenType.LPAREN:
            return self.parse_form()
        elif kind is TokenType.RPAREN:
            self.error("unexpected ')'")
        elif kind is TokenType.ILLEGAL and token.literal.startswith('"'):
            self.error(f"unterminated string {token.literal}")
        elif kind is TokenType.ILLEGAL:
            self.error(f"illegal character '{token.literal}'")
        else:
            self.error(f"unexpected token {kind.value}")
        return None

    def parse_number(self):
        literal = self.cur.literal
        try:
            value = int(literal)
            assert INT64_MIN <= value <= INT64_MAX
        except (AssertionError, ValueError):
            self.error(f"could not parse {literal} as integer")
            return None
        return Number(value)

    def parse_quoted_list(self):
        """'( <expr>* ): current token is the tick."""
        if not self.peek_token_is(TokenType.LPAREN):
            self.error("expected '(' after quote")
            return None

        self.next_token()
        elements = self.parse_sequence()
        if elements is None:
            return None
        return QuotedList(tuple(elements))

    def parse_form(self):
        """( <expr> <expr>* ): current token is the opening parenthesis. () is read as the empty quoted list."""
        elements = self.parse_sequence()
        if elements is None:
            return None
        if not elements:
            return QuotedList(())

        form = Form(elements[0], tuple(elements[1:]))
        if isinstance(form.first, BuiltinIdentifier) and form.first.kind is TokenType.LAMBDA:
            return self.check_lambda(form)
        return form

    def parse_sequence(self):
        """Parses expressions from the token after the current '(' up to the matching ')', which is left as the current
        token. Returns the list of expressions, or None if any of them (or the closing parenthesis) is missing.
        """
        line = self.cur.line
        elements = []
        malformed = False

        self.next_token()
        while not self.cur_token_is(TokenType.RPAREN):
            if self.cur_token_is(TokenType.EOF):
                self.error("missing ')'", line)
                return None

            expr = self.parse_expression()
            if expr is None:
                malformed = True
            elements.append(expr)

            if self.cur_token_is(TokenType.EOF):
                return None  # a nested form ran out of input and has already reported it
            self.next_token()

        return None if malformed else elements

    def check_lambda(self, form):
        """Records an error and returns None if a (lambda ...) form can't possibly produce a closure."""
        if len(form.rest) < 2:
            self.error(f"lambda expects a parameter list and at least one body expression, got {form}")
            return None

        params = form.rest[0]
        if parameter_names(params) is None:
            if not isinstance(params, (Form, QuotedList)):
                self.error(f"lambda expects first argument to be a list, got {params}")
            else:
                self.error(f"all parameters should be identifiers, got {params}")
            return None

        return form

    def error(self, msg, line=None):
        if line is None:
            line = self.cur.line
        self.errors.append(f"line {line}: {msg}")

    def next_token(self):
        self.cur = self.peek
        self.peek = self.scanner.next_token()

    def cur_token_is(self, kind):
        return self.cur.kind is kind

    def peek_token_is(self, kind):
        return self.peek.kind is kind
