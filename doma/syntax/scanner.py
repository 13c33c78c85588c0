"""Lexical scanner for Doma. Converts raw source text into a lazy stream of Tokens.

Scanning never fails: characters that do not start a valid token come out as ILLEGAL tokens, and it is up to the
parser to report them.
"""

from doma.syntax.token import Token, TokenType, lookup_ident


WHITESPACE = " \t\n\r"
SINGLE_CHARS = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "+": TokenType.PLUS,
    "*": TokenType.ASTERISK,
    "/": TokenType.SLASH,
    "=": TokenType.EQ,
}


def is_letter(char):
    if not char:
        return False
    return char.isascii() and char.isalpha() or char in "_-/"


def is_digit(char):
    return "0" <= char <= "9"


class Scanner:
    """Reads tokens one at a time from source. The empty string stands for end of input."""

    def __init__(self, source):
        self.source = source
        self.pos = 0       # position of self.char
        self.read_pos = 0  # position of the next char to read
        self.char = ""
        self.line = 1
        self.read_char()

    def __iter__(self):
        """Yields tokens lazily, up to and including the EOF token."""
        while True:
            token = self.next_token()
            yield token
            if token.kind is TokenType.EOF:
                return

    def next_token(self):
        """Returns the next token in source. Once input is exhausted, always returns an EOF token."""
        self.skip_whitespace()
        self.skip_comments()

        line = self.line
        char = self.char

        if char == "":
            return Token(TokenType.EOF, "", line)

        if char in SINGLE_CHARS:
            self.read_char()
            return Token(SINGLE_CHARS[char], char, line)

        if char == "'":
            if is_letter(self.peek_char()):
                self.read_char()
                return Token(TokenType.SYMBOL, self.read_ident(), line)
            self.read_char()
            return Token(TokenType.TICK, char, line)

        if char == '"':
            literal, terminated = self.read_string()
            if not terminated:
                return Token(TokenType.ILLEGAL, '"' + literal, line)
            return Token(TokenType.STRING, literal, line)

        if char == "-":
            if is_digit(self.peek_char()):
                self.read_char()
                return Token(TokenType.NUMBER, "-" + self.read_int(), line)
            self.read_char()
            return Token(TokenType.MINUS, char, line)

        if char in "<>":
            kinds = {"<": (TokenType.LT, TokenType.LTE), ">": (TokenType.GT, TokenType.GTE)}[char]
            if self.peek_char() == "=":
                self.read_char()
                self.read_char()
                return Token(kinds[1], char + "=", line)
            self.read_char()
            return Token(kinds[0], char, line)

        if char == "#":
            if self.peek_char() in ("t", "f"):
                self.read_char()
                literal = "#" + self.char
                self.read_char()
                return Token(TokenType.TRUE if literal == "#t" else TokenType.FALSE, literal, line)
            self.read_char()
            return Token(TokenType.ILLEGAL, char, line)

        if is_letter(char):
            literal = self.read_ident()
            return Token(lookup_ident(literal), literal, line)

        if is_digit(char):
            return Token(TokenType.NUMBER, self.read_int(), line)

        self.read_char()
        return Token(TokenType.ILLEGAL, char, line)

    def read_string(self):
        """Reads a string literal (self.char is the opening quote). Returns the raw contents and whether the closing
        quote was found. No escape processing is done.
        """
        start = self.pos + 1
        self.read_char()
        while self.char not in ('"', ""):
            self.read_char()

        literal = self.source[start:self.pos]
        if self.char == "":
            return literal, False

        self.read_char()  # closing quote
        return literal, True

    def read_int(self):
        start = self.pos
        while is_digit(self.char):
            self.read_char()
        return self.source[start:self.pos]

    def read_ident(self):
        start = self.pos
        while is_letter(self.char):
            self.read_char()
        return self.source[start:self.pos]

    def skip_whitespace(self):
        while self.char != "" and self.char in WHITESPACE:
            self.read_char()

    def skip_comments(self):
        """Skips ';' comments up to the end of the line, along with any whitespace after them."""
        while self.char == ";":
            while self.char not in ("\n", ""):
                self.read_char()
            self.skip_whitespace()

    def read_char(self):
        if self.char == "\n":
            self.line += 1

        if self.read_pos >= len(self.source):
            self.char = ""
        else:
            self.char = self.source[self.read_pos]

        self.pos = self.read_pos
        self.read_pos += 1

    def peek_char(self):
        if self.read_pos >= len(self.source):
            return ""
        return self.source[self.read_pos]
