import io
import unittest
from contextlib import redirect_stdout

from simplecalc.lang.error import (CalcException, CalcSyntaxError, CommaExpected, ConstantWriteError, DivideByZero,
                                   DuplicateDeclaration, EndOfInput, ErrorHandler, FactorialOverflow,
                                   FunctionDomainError, LexError, MathError, MissingEquals, ModuloByZero, NameExpected,
                                   NegativeFactorial, NegativeSqrt, ParenExpected, PrimaryExpected, SemanticError,
                                   UndeclaredVariable, UndefinedVariable, UnmatchedBrace, UnmatchedParen)


class CalcExceptionTestCase(unittest.TestCase):

    def test_messages(self):
        cases = {
            CalcException("'{}' could not be opened", "x.calc"): "'x.calc' could not be opened",
            DivideByZero(): "divide by zero",
            ModuloByZero(): "%: divide by zero",
            UnmatchedBrace(): "'}' expected",
            UnmatchedParen(): "')' expected",
            MissingEquals("x"): "'=' missing in declaration of 'x'",
            PrimaryExpected("sqrt"): "sqrt: primary expected",
            CommaExpected("pow"): "pow: ',' expected",
            NegativeSqrt(-1.0): "cannot get square root of negative number '-1'",
            NegativeFactorial(-2.0): "cannot get factorial of negative number '-2'",
            UndefinedVariable("x"): "trying to read undefined variable 'x'",
            UndefinedVariable("x", writing=True): "trying to write undefined variable 'x'",
            DuplicateDeclaration("x"): "'x' declared twice",
            FunctionDomainError("pow", "math domain error"): "pow: math domain error",
        }
        for error, msg in cases.items():
            self.assertEqual(msg, str(error))

    def test_families(self):
        families = {
            LexError: [EndOfInput],
            CalcSyntaxError: [NameExpected, MissingEquals, UnmatchedParen, UnmatchedBrace, PrimaryExpected,
                              CommaExpected, ParenExpected],
            SemanticError: [UndefinedVariable, UndeclaredVariable, DuplicateDeclaration, ConstantWriteError],
            MathError: [DivideByZero, ModuloByZero, NegativeFactorial, FactorialOverflow, NegativeSqrt,
                        FunctionDomainError],
        }
        for family, members in families.items():
            self.assertTrue(issubclass(family, CalcException))
            for member in members:
                self.assertTrue(issubclass(member, family), member)

    def test_locate(self):
        error = DivideByZero()
        self.assertFalse(error.diagnosis)

        error.locate("1 / 0", 4)
        self.assertTrue(error.diagnosis)
        self.assertEqual((4, 5), (error.start, error.end))

        error.locate("other line", 0)
        self.assertEqual("1 / 0", error.expr)

        self.assertEqual(3, DivideByZero().locate("abc", 10).start)


class ErrorHandlerTestCase(unittest.TestCase):

    def test_diagnose(self):
        diagnosis = ErrorHandler.diagnose(DivideByZero().locate("1 / 0", 4))
        line, caret = diagnosis.split("\n")
        self.assertTrue(line.startswith("  1 / "))
        self.assertIn("0", line)
        self.assertTrue(caret.startswith("      "))
        self.assertIn("^", caret)

    def test_throw_non_fatal(self):
        handler = ErrorHandler(fatal=False)
        handler.register_file("f.calc")
        handler.register_line("f.calc", "1/0", 3)

        with redirect_stdout(io.StringIO()) as out:
            handler.throw(DivideByZero())

        self.assertIn("File 'f.calc', line 3:", out.getvalue())
        self.assertIn("divide by zero", out.getvalue())
        self.assertEqual({"f.calc": (None, None)}, handler.traceback)

    def test_throw_fatal(self):
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as cm:
                ErrorHandler().throw(DivideByZero())
            self.assertEqual(1, cm.exception.code)

            with self.assertRaises(SystemExit) as cm:
                ErrorHandler(fatal=False).throw(CalcException("boom", internal=True), status=2, fatal=True)
            self.assertEqual(2, cm.exception.code)

    def test_context_manager(self):
        with redirect_stdout(io.StringIO()) as out:
            with ErrorHandler(fatal=False):
                raise DivideByZero()
            self.assertIn("divide by zero", out.getvalue())

            with ErrorHandler(fatal=False):
                raise KeyboardInterrupt()
            self.assertIn("keyboard interrupt", out.getvalue())

            with self.assertRaises(SystemExit) as cm:
                with ErrorHandler(fatal=False):
                    raise KeyError("x")
            self.assertEqual(2, cm.exception.code)
            self.assertIn("unknown error", out.getvalue())

            with self.assertRaises(SystemExit) as cm:
                with ErrorHandler(fatal=False):
                    raise SystemExit(0)
            self.assertEqual(0, cm.exception.code)


if __name__ == '__main__':
    unittest.main()
