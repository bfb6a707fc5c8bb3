"""
AArch64 Emitter Module for the RISClet Code Generator

Turns lower IR into GNU assembler text for AArch64 Linux.

Register banks map onto fixed, disjoint ranges of physical registers:

    Parameter  x0  - x7    AAPCS64 argument registers
    Variable   x9  - x14   caller-saved scratch, clear of x8 (syscall number)
    Temp       x15 - x17   expression results only

Variables are Int32, so values travel through the 32-bit w views and are
sign-extended when loaded; addresses always use the 64-bit x views.
"""
import re
from typing import Dict, List, Optional, Tuple

from ast_nodes import BinaryOp
from errors import InvalidDataType, InvalidOperationType

from codegen.lower_ir import (
    BinaryOperation, CopyRegister, LiteralLoad, LowerIRInstruction,
    LowerIRProgram, SubroutineCall, VariableLoad, VariableStore, VariableSlot,
)
from codegen.options import ENTRY_LABEL, CompilerOptions
from codegen.types import DataType, RegisterBank, RegisterID


INDENT = "    "

# bank -> (first physical register, number of registers)
REGISTER_BANKS: Dict[RegisterBank, Tuple[int, int]] = {
    RegisterBank.PARAMETER: (0, 8),
    RegisterBank.VARIABLE: (9, 6),
    RegisterBank.TEMP: (15, 3),
}

BINARY_MNEMONICS: Dict[BinaryOp, str] = {
    BinaryOp.ADD: "add",
    BinaryOp.SUBTRACT: "sub",
    BinaryOp.MULTIPLY: "mul",
    BinaryOp.DIVIDE: "sdiv",  # no unsigned values in the language
}

DATA_DIRECTIVES: Dict[DataType, str] = {
    DataType.INT32: ".word",
    DataType.STRING: ".ascii",
}

EXIT_SEQUENCE = [
    "mov x0, #0",
    "mov x8, #93",  # exit
    "svc #0",
]

# movz/movn reach any value whose significant bits fit in 16
MOV_IMMEDIATE_MIN = -(1 << 16)
MOV_IMMEDIATE_MAX = (1 << 16) - 1

# .word data is read with ldrsw
WORD_ALIGNMENT = 4


def physical_register(reg: RegisterID) -> int:
    """Physical register number for a bank slot."""
    base, count = REGISTER_BANKS[reg.bank]
    if not 0 <= reg.index < count:
        raise RuntimeError(f"Register {reg} is outside its bank ({count} registers)")
    return base + reg.index


def x(reg: RegisterID) -> str:
    return f"x{physical_register(reg)}"


def w(reg: RegisterID) -> str:
    return f"w{physical_register(reg)}"


def ascii_length(quoted: str) -> int:
    """Bytes an .ascii operand assembles to."""
    return len(re.sub(r"\\.", "_", quoted[1:-1]).encode("utf-8"))


class AArch64Emitter:
    """Generates assembly text from lower IR."""

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def emit(self, program: LowerIRProgram) -> str:
        lines: List[str] = []

        lines.extend(self.header())
        lines.append("")

        lines.append(".section .data")
        for asm in self.data_section(program.variables):
            lines.append(INDENT + asm)
        lines.append("")

        lines.append(".section .text")
        lines.append(f".global {ENTRY_LABEL}")
        lines.append(f"{ENTRY_LABEL}:")
        for instr in program.instructions:
            for asm in self.emit_instruction(instr):
                lines.append(INDENT + asm)
        lines.append("")

        for asm in EXIT_SEQUENCE:
            lines.append(INDENT + asm)

        return "\n".join(lines) + "\n"

    def header(self) -> List[str]:
        rule = "// " + "─" * 59
        return [rule, f"// {self.options.program_name} (Main Program)", rule]

    # ========================================================================
    # Data Section
    # ========================================================================

    def data_section(self, variables: Dict[str, VariableSlot]) -> List[str]:
        """Data lines in declaration order, realigning words after strings."""
        lines: List[str] = []
        offset = 0  # bytes emitted, modulo WORD_ALIGNMENT

        for name, slot in variables.items():
            line = self.data_line(name, slot)
            if slot.data_type == DataType.INT32:
                if offset:
                    lines.append(f".balign {WORD_ALIGNMENT}")
                    offset = 0
            else:
                offset = (offset + ascii_length(slot.default)) % WORD_ALIGNMENT
            lines.append(line)

        return lines

    def data_line(self, name: str, slot: VariableSlot) -> str:
        directive = DATA_DIRECTIVES.get(slot.data_type)
        if directive is None:
            raise InvalidDataType(f"Invalid data type {slot.data_type!r} for '{name}'")
        return f"{name}: {directive} {slot.default}"

    # ========================================================================
    # Text Section
    # ========================================================================

    def emit_instruction(self, instr: LowerIRInstruction) -> List[str]:
        if isinstance(instr, VariableLoad):
            return [
                f"ldr {x(instr.dest)}, ={instr.name}",
                f"ldrsw {x(instr.dest)}, [{x(instr.dest)}]",
            ]
        elif isinstance(instr, VariableStore):
            return [
                f"ldr {x(instr.address)}, ={instr.name}",
                f"str {w(instr.source)}, [{x(instr.address)}]",
            ]
        elif isinstance(instr, LiteralLoad):
            return [self.literal_load(instr)]
        elif isinstance(instr, CopyRegister):
            return [f"mov {x(instr.dest)}, {x(instr.src)}"]
        elif isinstance(instr, BinaryOperation):
            return [self.binary_operation(instr)]
        elif isinstance(instr, SubroutineCall):
            return [f"bl {instr.name}"]

        raise TypeError(f"Unknown lower IR instruction: {type(instr).__name__}")

    def literal_load(self, instr: LiteralLoad) -> str:
        if MOV_IMMEDIATE_MIN <= instr.value <= MOV_IMMEDIATE_MAX:
            return f"mov {w(instr.dest)}, #{instr.value}"
        # Literal pool
        return f"ldr {w(instr.dest)}, ={instr.value}"

    def binary_operation(self, instr: BinaryOperation) -> str:
        mnemonic = BINARY_MNEMONICS.get(instr.op)
        if mnemonic is None:
            raise InvalidOperationType(f"Invalid operation type {instr.op}")
        return f"{mnemonic} {w(instr.result)}, {w(instr.left)}, {w(instr.right)}"
