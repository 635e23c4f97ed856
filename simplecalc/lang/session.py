"""Session control for simplecalc. Drives statement evaluation over a character stream, either a script file or lines
fed from the interactive shell, and handles the help/symbols/quit commands.
"""

from simplecalc.lang.error import CalcException, EndOfInput, NestingTooDeep
from simplecalc.lang.grammar import evaluate_one_statement
from simplecalc.lang.lexical import CharStream, HELP, PRINT, QUIT, SYMBOLS, TokenStream
from simplecalc.lang.symbols import SymbolTable


def format_value(value):
    """Formats value the way a C++ ostream would (6 significant digits)."""
    return f"{value:g}"


class Session:
    """Governs a simplecalc session: one token stream and the symbol table that persists across its statements."""
    SH_FILE = "<in>"  # command-line interpreter filename
    RESULT = "= "     # indicates that what follows is a result

    def __init__(self, error_handler, stream=None, symbols=None, path=SH_FILE):
        self.error_handler = error_handler
        self.error_handler.register_file(path)
        self.path = path  # used for error messages

        self.stream = stream if stream is not None else CharStream()
        self.ts = TokenStream(self.stream)
        self.symbols = symbols if symbols is not None else SymbolTable.with_predefined()

    def feed(self, line):
        """Queues a line of input. Must be followed by run to evaluate it."""
        self.stream.feed(line)

    def run(self):
        """Evaluates statements until input is exhausted (returns True) or a quit command is read (returns False).
        Statement errors are reported through error_handler, after which evaluation resumes at the next statement.
        """
        while True:
            try:
                token = self.ts.get_command_or_statement()

                if token.kind == QUIT:
                    return False
                elif token.kind == HELP:
                    print(self.help_text())
                elif token.kind == SYMBOLS:
                    print(self.symbols_text())
                else:
                    self.ts.putback(token)
                    print(self.RESULT + format_value(evaluate_one_statement(self.ts, self.symbols)))

            except EndOfInput:
                return True
            except RecursionError:
                self._report(NestingTooDeep())
            except CalcException as error:
                self._report(error)

    def _report(self, error):
        line = self.stream.line.rstrip("\n")
        error.locate(line, self.stream.col - 1)

        if self.path != Session.SH_FILE:
            self.error_handler.register_line(self.path, line, self.stream.line_num)
        self.error_handler.throw(error)

        self.ts.ignore(PRINT)  # move to start of next statement

    def symbols_text(self):
        """Returns all declared names and their values, in declaration order."""
        return "\nSymbols:\n" + "".join(f"{name}\t{format_value(value)}\n" for name, value in self.symbols.list())

    @staticmethod
    def help_text():
        return ("\nSimple Calc Help\n"
                "\n\tBasic Syntax:\n"
                "\t\tEnter 'help' to see this message.\n"
                "\t\tEnter 'quit' or 'q' to exit the program.\n"
                "\t\tEnter ';' or a new line to print the results.\n"
                "\t\tSupported operands: '*', '/', '%', '!', '+', '-', '=' (assignment).\n"
                "\t\tBrackets and braces can be used to group expressions: '4*(2+3)'.\n"
                "\n\tFunctions:\n"
                "\t\tsqrt(n)\t\t\tsquare root of n.\n"
                "\t\tpow(n, e)\t\te power of n.\n"
                "\n\tUser Variables:\n"
                "\t\tVariable names must be composed of alphanumerical characters and '_',\n"
                "\t\tand must start with an alphabetical character: 'a_var3', 'X', or 'y2'.\n"
                "\t\tlet var = expr\t\tdeclare a variable named var and initialize it\n"
                "\t\t# var = expr\t\twith the value of expression expr.\n"
                "\t\tconst var = expr\tdeclare and initialize a constant named var.\n"
                "\t\tvar = expr\t\tassign new value to previously declared variable var.\n"
                "\t\tEnter 'symbols' to see all variables in the program.\n"
                "\n\tPredefined Variables:\n"
                "\t\tpi\t\t3.1415926535 (constant)\n"
                "\t\te\t\t2.7182818284 (constant)\n"
                "\t\tk\t\t1000\n")
