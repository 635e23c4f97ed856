"""Recursive-descent evaluator for simplecalc. Parsing and evaluation are fused: every grammar level reads Tokens from
a TokenStream, consults/updates a SymbolTable and returns the resulting value. There is no syntax tree.

The grammar, lowest precedence first:

```
<statement>   ::= <declaration> | <assignment> | <expression>
<declaration> ::= ("let" | "#" | "const") <name> "=" <expression>
<assignment>  ::= <name> "=" <expression>              ; name must already be declared
<expression>  ::= <term> | <expression> ("+" | "-") <term>
<term>        ::= <secondary> | <term> ("*" | "/" | "%") <secondary>
<secondary>   ::= <primary> | <secondary> "!"
<primary>     ::= <number> | <name> | ("-" | "+") <primary>
                | "(" <expression> ")" | "{" <expression> "}"
                | "sqrt" "(" <expression> ")" | "pow" "(" <expression> "," <expression> ")"
```

Unary signs apply to a primary, so `-2!` is `(-2)!`. Errors are never caught here: they propagate to whoever asked for
the statement, with any declaration or assignment already made left in place. A token that does not fit is put back
before the error is raised so that TokenStream.ignore can find a terminator that caused it.
"""

import math

from simplecalc.lang.error import (CommaExpected, DivideByZero, FactorialOverflow, FunctionDomainError,
                                   MissingEquals, ModuloByZero, NameExpected, NegativeFactorial, NegativeSqrt,
                                   ParenExpected, PrimaryExpected, UndeclaredVariable, UnmatchedBrace, UnmatchedParen)
from simplecalc.lang.lexical import ASSIGN, CONST, DECLARE, DECLARE_CHAR, NAME, NUMBER, POW, SQRT


INT_MIN = -2 ** 31  # factorials are computed as a 32-bit signed int
INT_MAX = 2 ** 31 - 1


def _expect(ts, kind, error):
    """Returns the next token if it is of kind. Otherwise puts it back and raises error."""
    token = ts.get()
    if token.kind != kind:
        ts.putback(token)
        raise error
    return token


def _wrap_int(x):
    return (x - INT_MIN) % 2 ** 32 + INT_MIN


def _int_div(a, b):
    """Integer division truncating toward zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def factorial(x):
    """Returns x! for x truncated to an int. The product is kept to 32 bits: as soon as a step no longer divides back
    to its multiplier, the result has overflowed.
    """
    if not INT_MIN <= x < INT_MAX + 1:  # also catches inf and nan
        if x < 0:
            raise NegativeFactorial(x)
        raise FactorialOverflow(x)

    result = int(x)
    if result < 0:
        raise NegativeFactorial(x)
    if result == 0:
        result = 1

    for multiplier in range(result - 1, 0, -1):
        prev = result
        result = _wrap_int(result * multiplier)
        if prev != 0 and _int_div(result, prev) != multiplier:
            raise FactorialOverflow(x)

    return float(result)


def eval_function(ts, symbols, token):
    """Evaluates a call of the builtin function named by token. The function keyword has already been read."""
    if token.kind == SQRT:
        _expect(ts, "(", PrimaryExpected(SQRT))
        arg = expression(ts, symbols)
        _expect(ts, ")", ParenExpected(SQRT))

        if arg < 0:
            raise NegativeSqrt(arg)
        return math.sqrt(arg)

    elif token.kind == POW:
        _expect(ts, "(", PrimaryExpected(POW))
        base = expression(ts, symbols)
        _expect(ts, ",", CommaExpected(POW))
        exponent = expression(ts, symbols)
        _expect(ts, ")", ParenExpected(POW))

        try:
            return math.pow(base, exponent)
        except ValueError:
            raise FunctionDomainError(POW, "math domain error")
        except OverflowError:
            raise FunctionDomainError(POW, "result too large")

    raise PrimaryExpected(token.kind)


def primary(ts, symbols):
    """Numbers, names, unary signs, function calls and parenthesized/braced expressions."""
    token = ts.get()

    if token.kind == "(":
        value = expression(ts, symbols)
        _expect(ts, ")", UnmatchedParen())
        return value
    elif token.kind == "{":
        value = expression(ts, symbols)
        _expect(ts, "}", UnmatchedBrace())
        return value
    elif token.kind in (SQRT, POW):
        return eval_function(ts, symbols, token)
    elif token.kind == NUMBER:
        return token.value
    elif token.kind == "-":
        return -primary(ts, symbols)
    elif token.kind == "+":
        return +primary(ts, symbols)
    elif token.kind == NAME:
        return symbols.get_value(token.name)

    ts.putback(token)
    raise PrimaryExpected()


def secondary(ts, symbols):
    """Postfix factorials."""
    left = primary(ts, symbols)
    token = ts.get()
    while token.kind == "!":
        left = factorial(left)
        token = ts.get()

    ts.putback(token)
    return left


def term(ts, symbols):
    """'*', '/' and '%'. Division and modulo check their divisor before dividing."""
    left = secondary(ts, symbols)
    token = ts.get()
    while True:
        if token.kind == "*":
            left *= secondary(ts, symbols)
        elif token.kind == "/":
            divisor = secondary(ts, symbols)
            if divisor == 0:
                raise DivideByZero()
            left /= divisor
        elif token.kind == "%":
            divisor = secondary(ts, symbols)
            if divisor == 0:
                raise ModuloByZero()
            left = math.fmod(left, divisor)
        else:
            ts.putback(token)
            return left
        token = ts.get()


def expression(ts, symbols):
    """'+' and '-'."""
    left = term(ts, symbols)
    token = ts.get()
    while True:
        if token.kind == "+":
            left += term(ts, symbols)
        elif token.kind == "-":
            left -= term(ts, symbols)
        else:
            ts.putback(token)
            return left
        token = ts.get()


def declaration(ts, symbols, constant=False):
    """Declares a variable (or constant) with the value of the expression after '='. The declaring keyword has already
    been read.
    """
    name = _expect(ts, NAME, NameExpected())
    _expect(ts, ASSIGN, MissingEquals(name.name))

    value = expression(ts, symbols)
    return symbols.define_name(name.name, value, constant)


def assignment(ts, symbols):
    """Gives a new value to a declared variable."""
    name = ts.get()
    if not symbols.is_declared(name.name):
        raise UndeclaredVariable(name.name)

    ts.get()  # skip the '='
    value = expression(ts, symbols)
    symbols.set_value(name.name, value)
    return value


def statement(ts, symbols):
    """Evaluates exactly one statement and returns its value."""
    token = ts.get()

    if token.kind == CONST:
        return declaration(ts, symbols, constant=True)
    elif token.kind in (DECLARE, DECLARE_CHAR):
        return declaration(ts, symbols)
    elif token.kind == NAME:
        lookahead = ts.get()
        ts.putback(lookahead)  # both tokens go back, name on top
        ts.putback(token)
        if lookahead.kind == ASSIGN:
            return assignment(ts, symbols)
    else:
        ts.putback(token)

    return expression(ts, symbols)


evaluate_one_statement = statement
