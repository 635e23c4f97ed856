"""Error handling for simplecalc. Every error a statement can produce is a CalcException: the session loop reports
it and skips to the next statement. If another type of error makes it all the way to ErrorHandler, it is assumed to be
an internal issue and the process exits with status 2.
"""

import sys

from termcolor import colored


class CalcException(Exception):
    """Templates an error message so that it can be used to report a calculator error. msg is a format string whose
    '{}' slots are filled by exprs (bolded for display, plain for str()).
    """

    def __init__(self, msg, exprs=None, internal=False):
        if exprs is None:
            exprs = []
        if isinstance(exprs, str):
            exprs = [exprs]

        super().__init__(msg.format(*exprs))
        self.msg = msg.format(*(colored(str(expr), attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.internal = internal

        self.expr = ""  # offending source line, see locate
        self.start = 0
        self.end = -1

    def locate(self, expr, start, end=-1):
        """Attaches the offending source line and column span, used for error display. A located error keeps its
        first location.
        """
        if not self.expr:
            self.expr = expr
            self.start = max(0, min(start, len(expr)))
            self.end = end if end != -1 else self.start + 1
        return self

    @property
    def diagnosis(self):
        return bool(self.expr.strip())


class LexError(CalcException):
    """Raised when the character stream cannot be turned into a token."""


class EndOfInput(LexError):
    """Raised by the lexer when the character stream is exhausted."""

    def __init__(self):
        super().__init__("bad token: end of input")


class CalcSyntaxError(CalcException):
    """Superclass for statements that do not follow the calculator grammar. context is prefixed to the message (e.g.
    the function being called).
    """
    message = "syntax error"

    def __init__(self, context=None, exprs=None):
        super().__init__(self.message if context is None else f"{context}: {self.message}", exprs)


class NameExpected(CalcSyntaxError):
    message = "name expected in declaration"


class MissingEquals(CalcSyntaxError):
    message = "'=' missing in declaration of '{}'"

    def __init__(self, name):
        super().__init__(exprs=name)
        self.name = name


class UnmatchedParen(CalcSyntaxError):
    message = "')' expected"


class UnmatchedBrace(CalcSyntaxError):
    message = "'}}' expected"


class PrimaryExpected(CalcSyntaxError):
    message = "primary expected"


class CommaExpected(CalcSyntaxError):
    message = "',' expected"


class ParenExpected(CalcSyntaxError):
    message = "')' expected"


class NestingTooDeep(CalcSyntaxError):
    message = "expression nested too deeply"


class SemanticError(CalcException):
    """Superclass for well-formed statements that misuse the symbol table."""


class UndefinedVariable(SemanticError):
    def __init__(self, name, writing=False):
        super().__init__(f"trying to {'write' if writing else 'read'} undefined variable '{{}}'", name)
        self.name = name


class UndeclaredVariable(SemanticError):
    def __init__(self, name):
        super().__init__("'{}' has not been declared", name)
        self.name = name


class DuplicateDeclaration(SemanticError):
    def __init__(self, name):
        super().__init__("'{}' declared twice", name)
        self.name = name


class ConstantWriteError(SemanticError):
    def __init__(self, name):
        super().__init__("trying to write to constant '{}'", name)
        self.name = name


class MathError(CalcException):
    """Superclass for arithmetic that has no (representable) result."""


class DivideByZero(MathError):
    def __init__(self):
        super().__init__("divide by zero")


class ModuloByZero(MathError):
    def __init__(self):
        super().__init__("%: divide by zero")


class NegativeFactorial(MathError):
    def __init__(self, value):
        super().__init__("cannot get factorial of negative number '{}'", f"{value:g}")


class FactorialOverflow(MathError):
    def __init__(self, value):
        super().__init__("overflow occurred in factorial of '{}'", f"{value:g}")


class NegativeSqrt(MathError):
    def __init__(self, value):
        super().__init__("cannot get square root of negative number '{}'", f"{value:g}")


class FunctionDomainError(MathError):
    def __init__(self, function, reason):
        super().__init__("{}: {}", (function, reason))


class ErrorHandler:
    """Context manager that reports calculator errors and turns any other Python error into an internal error."""
    ERROR = "red"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called before reporting an error from path."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path."""
        self.traceback[path] = (None, None)

    @staticmethod
    def diagnose(error):
        """Returns offending part of error.expr highlighted and bolded, with a caret underneath."""
        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, error.start + 1)
        diagnosis += colored(error.expr[error.start:end], ErrorHandler.ERROR, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), ErrorHandler.ERROR, attrs=["bold"])

        return diagnosis

    def throw(self, error, status=1, fatal=None):
        """Reports error, which must be a CalcException, using self.traceback for its origin. Exits with status if
        fatal (defaults to self.fatal).
        """
        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg)

        if not error.internal and error.diagnosis:
            print(ErrorHandler.diagnose(error))

        if fatal is None:
            fatal = self.fatal
        if fatal:
            sys.exit(status)
        for path in self.traceback:  # if error was not fatal, reset traceback
            self.remove_line(path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is KeyboardInterrupt:
            self.throw(CalcException("keyboard interrupt"))
        elif exc_type is SystemExit:
            return False
        elif exc_type is not None and issubclass(exc_type, CalcException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(CalcException("unknown error: '{}: {}'", (exc_type.__name__, exc_val), internal=True),
                       status=2, fatal=True)

        return True
