"""
RISClet Compiler Errors

Every failure the compiler reports is a CompileError. Errors are raised where
they are detected and abort the whole compilation unit; the driver prints them
with their source position.
"""

from typing import Optional, Tuple

from ast_nodes import UNKNOWN_POSITION


class CompileError(Exception):
    """Base exception for all compilation errors"""

    def __init__(self, message: str, position: Tuple[int, int] = UNKNOWN_POSITION):
        super().__init__(message)
        self.message = message
        self.position = position

    @property
    def line(self) -> int:
        return self.position[0]

    @property
    def column(self) -> int:
        return self.position[1]

    def format(self, path: Optional[str] = None) -> str:
        """Render as `path:line:column: error: message`."""
        prefix = path or "<source>"
        if self.position != UNKNOWN_POSITION:
            prefix = f"{prefix}:{self.line}:{self.column}"
        return f"{prefix}: error: {self.message}"

    def __str__(self) -> str:
        if self.position == UNKNOWN_POSITION:
            return self.message
        return f"Line {self.line}:{self.column} - {self.message}"


# Front end

class LexError(CompileError):
    """Character sequence that is not a token"""
    pass


class ParseError(CompileError):
    """Token sequence that is not a statement"""
    pass


# IR pipeline

class UnexpectedStatement(CompileError):
    """Statement shape outside declaration, assignment and single-argument call"""
    pass


class InvalidDataItem(CompileError):
    """Expression that cannot be used as an operand where one is required"""
    pass


class InvalidOperationType(CompileError):
    """Binary operator outside add, subtract, multiply and divide"""
    pass


class InvalidDataType(CompileError):
    """Declared type with no storage layout"""
    pass


class UndeclaredVariable(CompileError):
    """Read of or assignment to a name that was never declared"""
    pass


class ReservedName(CompileError):
    """Variable name that would clash with the entry label or a runtime symbol"""
    pass
