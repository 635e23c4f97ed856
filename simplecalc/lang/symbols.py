"""Symbol table for simplecalc: named values that persist across statements for the whole session."""

from dataclasses import dataclass

from simplecalc.lang.error import ConstantWriteError, DuplicateDeclaration, UndefinedVariable


@dataclass
class Variable:
    """A (name, value) pair. Constants cannot be assigned to once defined."""
    name: str
    value: float
    constant: bool = False


class SymbolTable:
    """Declared variables and constants, in declaration order. Names are never removed."""
    PREDEFINED = (
        ("pi", 3.1415926535, True),
        ("e", 2.7182818284, True),
        ("k", 1000.0, False),
    )

    def __init__(self):
        self.var_table = []

    @classmethod
    def with_predefined(cls):
        """Returns a new SymbolTable holding the predefined names."""
        symbols = cls()
        for name, value, constant in cls.PREDEFINED:
            symbols.define_name(name, value, constant)
        return symbols

    def _find(self, name):
        for var in self.var_table:
            if var.name == name:
                return var
        return None

    def get_value(self, name):
        var = self._find(name)
        if var is None:
            raise UndefinedVariable(name)
        return var.value

    def set_value(self, name, value):
        var = self._find(name)
        if var is None:
            raise UndefinedVariable(name, writing=True)
        if var.constant:
            raise ConstantWriteError(name)
        var.value = value

    def is_declared(self, name):
        return self._find(name) is not None

    def define_name(self, name, value, constant=False):
        """Adds name to the table and returns value. A name can only be declared once."""
        if self.is_declared(name):
            raise DuplicateDeclaration(name)
        self.var_table.append(Variable(name, value, constant))
        return value

    def list(self):
        """Yields (name, value) pairs in declaration order."""
        for var in self.var_table:
            yield var.name, var.value

    def __len__(self):
        return len(self.var_table)