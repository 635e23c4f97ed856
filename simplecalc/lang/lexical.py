"""Lexical analysis for simplecalc. Turns a character stream into Tokens, one at a time, with an arbitrarily deep
pushback stack so that the grammar can look ahead and then undo.

Tokens can be loosely defined as follows:

```
<print>   ::= ";" | "\\n"                               ; statement terminator
<punct>   ::= "#" | "q" | "=" | "(" | ")" | "{" | "}" | "," | "+" | "-" | "*" | "/" | "%" | "!"
<number>  ::= [digits] ["." digits] [("e"|"E") ["+"|"-"] digits]
<name>    ::= [A-Za-z] [A-Za-z0-9_]*                    ; unless it is a keyword
<keyword> ::= "let" | "const" | "sqrt" | "pow" | "help" | "symbols" | "exit"
                                                        ; "q" is punctuation, so "quit" and "qx" quit too
```
"""

import string
from dataclasses import dataclass

from simplecalc.lang.error import EndOfInput, LexError


# token kinds: punctuation tokens use the character itself as their kind
NUMBER = "number"
NAME = "name"
PRINT = ";"
ASSIGN = "="
QUIT = "quit"
HELP = "help"
SYMBOLS = "symbols"
DECLARE = "let"
DECLARE_CHAR = "#"
CONST = "const"
SQRT = "sqrt"
POW = "pow"

KEYWORDS = {
    "let": DECLARE,
    "const": CONST,
    "sqrt": SQRT,
    "pow": POW,
    "help": HELP,
    "symbols": SYMBOLS,
    "exit": QUIT,
}

PUNCTUATION = {char: char for char in DECLARE_CHAR + "=(){},+-*/%!"}
PUNCTUATION["q"] = QUIT  # any word starting with q quits

TERMINATORS = {PRINT: (PRINT, "\n")}  # characters ending a statement of each kind, see TokenStream.ignore

NAME_CHARS = string.ascii_letters + string.digits + "_"


@dataclass(frozen=True)
class Token:
    """A single lexical unit. value is set for number tokens, name for name tokens."""
    kind: str
    value: float = 0.0
    name: str = ""


class CharStream:
    """Character source for a TokenStream. Reads file (if any) one line at a time, after any lines that have been fed to
    it, and hands out one character at a time. Keeps the current line around for error messages.
    """

    def __init__(self, file=None):
        self.file = file
        self.pending = []  # lines fed but not yet read

        self.line = ""     # current line, always newline-terminated
        self.line_num = 0
        self.col = 0       # index of the next character in self.line

    def feed(self, text):
        """Queues text to be read before anything else from file."""
        self.pending.extend(text.splitlines(keepends=True) or ["\n"])

    def _next_line(self):
        if self.pending:
            line = self.pending.pop(0)
        elif self.file is not None:
            line = self.file.readline()
        else:
            line = ""

        if line and not line.endswith("\n"):
            line += "\n"  # last line of a file without a trailing newline still ends a statement
        return line

    def get(self):
        """Returns the next character, or '' if input is exhausted."""
        if self.col >= len(self.line):
            line = self._next_line()
            if not line:
                return ""

            self.line, self.col = line, 0
            self.line_num += 1

        char = self.line[self.col]
        self.col += 1
        return char

    def putback(self, char):
        """Puts back char, which must be the last character returned by get."""
        if char:
            self.col -= 1


class TokenStream:
    """Models a CharStream as a stream of Tokens."""

    def __init__(self, stream):
        self.stream = stream
        self.buffer = []  # pushback stack, top is the last element

    def get(self):
        """Returns the next Token: the most recently put back one if there is any, otherwise one read from stream."""
        if self.buffer:
            return self.buffer.pop()

        char = self.stream.get()
        while char and char.isspace() and char != "\n":  # newline is a statement terminator
            char = self.stream.get()

        if not char:
            raise EndOfInput()
        elif char in TERMINATORS[PRINT]:
            return Token(PRINT)
        elif char in PUNCTUATION:
            return Token(PUNCTUATION[char])
        elif char in string.digits or char == ".":
            self.stream.putback(char)
            return self._read_number()
        elif char in string.ascii_letters:
            word = char + self._read_while(NAME_CHARS)
            if word in KEYWORDS:
                return Token(KEYWORDS[word])
            return Token(NAME, name=word)

        raise LexError("bad token '{}'", char)

    def putback(self, token):
        """Puts token back on top of the buffer: it will be the next one returned by get."""
        self.buffer.append(token)

    def ignore(self, kind):
        """Discards input up to and including the next token of kind. The buffer is searched first, then the raw
        characters of stream.
        """
        while self.buffer:
            if self.buffer.pop().kind == kind:
                return

        terminators = TERMINATORS.get(kind, (kind,))
        char = self.stream.get()
        while char and char not in terminators:
            char = self.stream.get()

    def get_command_or_statement(self):
        """Skips empty statements and returns the first token of the next command or statement."""
        token = self.get()
        while token.kind == PRINT:
            token = self.get()
        return token

    def _read_while(self, chars):
        """Reads characters for as long as they are in chars."""
        result = ""
        char = self.stream.get()
        while char and char in chars:
            result += char
            char = self.stream.get()
        self.stream.putback(char)
        return result

    def _read_number(self):
        literal = self._read_while(string.digits)

        char = self.stream.get()
        if char == ".":
            literal += char + self._read_while(string.digits)
            char = self.stream.get()

        if char and char in "eE":
            literal += char
            sign = self.stream.get()
            if sign and sign in "+-":
                literal += sign
            else:
                self.stream.putback(sign)
            literal += self._read_while(string.digits)
        else:
            self.stream.putback(char)

        try:
            return Token(NUMBER, value=float(literal))
        except ValueError:
            raise LexError("malformed number '{}'", literal)
