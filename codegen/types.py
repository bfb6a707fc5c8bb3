"""
Shared Types Module for the RISClet Code Generator

Vocabulary used by every pipeline stage:

- DataType: declared variable types and their data-section defaults
- DataItem: operands of the tuple IR (IntLiteral, StringLiteral,
  Identifier, TempReference)
- RegisterBank / RegisterID: symbolic registers of the lower IR
"""
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from ast_nodes import UNKNOWN_POSITION
from errors import InvalidDataType


# ============================================================================
# Data Types
# ============================================================================

class DataType(Enum):
    INT32 = "Int32"
    STRING = "String"

    def __str__(self):
        return self.value


def data_type_from_name(name: str, position: Tuple[int, int] = UNKNOWN_POSITION) -> DataType:
    """Resolve a declared type name (e.g. "Int32")."""
    for data_type in DataType:
        if data_type.value == name:
            return data_type
    raise InvalidDataType(f"Invalid data type '{name}'", position)


def default_value(data_type: DataType) -> str:
    """Initial data-section text for a variable with no folded initialiser."""
    if data_type == DataType.INT32:
        return "0"
    if data_type == DataType.STRING:
        return '""'
    raise InvalidDataType(f"Invalid data type {data_type!r}")


def quote_string(text: str) -> str:
    """Render text as an assembler string literal."""
    escaped = (text.replace("\\", "\\\\")
                   .replace('"', '\\"')
                   .replace("\n", "\\n")
                   .replace("\t", "\\t"))
    return f'"{escaped}"'


# ============================================================================
# Data Items
# ============================================================================

@dataclass(frozen=True)
class DataItem:
    """Base class for tuple-IR operands"""
    pass


@dataclass(frozen=True)
class IntLiteral(DataItem):
    value: int

    def __str__(self):
        return str(self.value)


@dataclass(frozen=True)
class StringLiteral(DataItem):
    value: str

    def __str__(self):
        return quote_string(self.value)


@dataclass(frozen=True)
class Identifier(DataItem):
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class TempReference(DataItem):
    """Result of a binary operation earlier in the same statement"""
    temp_id: int

    def __str__(self):
        return f"t{self.temp_id}"


# ============================================================================
# Registers
# ============================================================================

class RegisterBank(Enum):
    PARAMETER = "p"
    VARIABLE = "v"
    TEMP = "t"


@dataclass(frozen=True)
class RegisterID:
    """A register slot inside one bank; the emitter picks the physical register."""
    bank: RegisterBank
    index: int

    def __str__(self):
        return f"{self.bank.value}{self.index}"


def param_reg(index: int) -> RegisterID:
    return RegisterID(RegisterBank.PARAMETER, index)


def var_reg(index: int) -> RegisterID:
    return RegisterID(RegisterBank.VARIABLE, index)


def temp_reg(index: int) -> RegisterID:
    return RegisterID(RegisterBank.TEMP, index)
