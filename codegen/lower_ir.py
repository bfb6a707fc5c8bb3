"""
Lower IR Module for the RISClet Code Generator

Turns tuple IR into register-indexed pseudo-instructions. Registers are named
by bank and slot (see codegen.types.RegisterID); nothing is allocated across
instructions, so every instruction starts again at slot 0 of each bank and
every variable is reloaded from its data symbol when it is needed.

Register use per tuple instruction:
- declaration/assignment: v0 holds the destination address, v1 the value
  (or the value is taken straight from the temp register)
- subroutine call: the argument goes to p0
- binary operation: operands load into v0, v1 in order, result goes to t<id>
"""
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional, Set

from ast_nodes import BinaryOp
from errors import InvalidDataItem, InvalidOperationType

from codegen.options import CompilerOptions
from codegen.tuple_ir import (
    IRBinaryOperation, IRInstruction, IRProgram, IRSubroutineCall,
    IRVariableAssignment, IRVariableDeclaration,
)
from codegen.types import (
    DataItem, DataType, Identifier, IntLiteral, RegisterID, StringLiteral,
    TempReference, default_value, param_reg, quote_string, temp_reg, var_reg,
)


# ============================================================================
# Instructions
# ============================================================================

@dataclass
class LowerIRInstruction:
    """Base class for lower-IR instructions"""
    pass


@dataclass
class SubroutineCall(LowerIRInstruction):
    # bl name
    name: str

    def __str__(self):
        return f"(CALL, {self.name})"


@dataclass
class BinaryOperation(LowerIRInstruction):
    # op result, left, right
    op: BinaryOp
    result: RegisterID
    left: RegisterID
    right: RegisterID

    def __str__(self):
        op = self.op.name if isinstance(self.op, BinaryOp) else str(self.op).upper()
        return f"({op}, {self.result}, {self.left}, {self.right})"


@dataclass
class CopyRegister(LowerIRInstruction):
    # mov dest, src
    dest: RegisterID
    src: RegisterID

    def __str__(self):
        return f"(COPY, {self.dest}, {self.src})"


@dataclass
class LiteralLoad(LowerIRInstruction):
    # mov dest, #value
    dest: RegisterID
    value: int

    def __str__(self):
        return f"(LOADLIT, {self.dest}, {self.value})"


@dataclass
class VariableLoad(LowerIRInstruction):
    # ldr dest, =name; ldr dest, [dest]
    name: str
    dest: RegisterID

    def __str__(self):
        return f"(LOADVAR, {self.name}, {self.dest})"


@dataclass
class VariableStore(LowerIRInstruction):
    # ldr address, =name; str source, [address]
    name: str
    address: RegisterID
    source: RegisterID

    def __str__(self):
        return f"(STOREVAR, {self.name}, {self.address}, {self.source})"


class VariableSlot(NamedTuple):
    data_type: DataType
    default: str


@dataclass
class LowerIRProgram:
    instructions: List[LowerIRInstruction] = field(default_factory=list)
    variables: Dict[str, VariableSlot] = field(default_factory=dict)

    def dump(self) -> str:
        lines = ["Lower IR:"]
        lines.extend(str(instr) for instr in self.instructions)
        lines.append("")
        lines.append("Variables:")
        lines.extend(f"{name}: {slot.data_type} = {slot.default}"
                     for name, slot in self.variables.items())
        return "\n".join(lines) + "\n"


# ============================================================================
# Builder
# ============================================================================

class LowerIRBuilder:
    """Generates lower IR from tuple IR."""

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()
        self.variables: Dict[str, VariableSlot] = {}
        self.declared: Set[str] = set()

    def build(self, program: IRProgram) -> LowerIRProgram:
        self.variables = {
            name: VariableSlot(data_type, default_value(data_type))
            for name, data_type in program.variables.items()
        }
        self.declared = set()
        instructions: List[LowerIRInstruction] = []

        for instr in program.instructions:
            instructions.extend(self.visit_instruction(instr))

        return LowerIRProgram(instructions, dict(self.variables))

    def visit_instruction(self, instr: IRInstruction) -> List[LowerIRInstruction]:
        if isinstance(instr, IRVariableDeclaration):
            return self.visit_declaration(instr)
        elif isinstance(instr, IRVariableAssignment):
            return self.visit_assignment(instr)
        elif isinstance(instr, IRSubroutineCall):
            return self.visit_subroutine_call(instr)
        elif isinstance(instr, IRBinaryOperation):
            return self.visit_binary_operation(instr)

        raise TypeError(f"Unknown tuple IR instruction: {type(instr).__name__}")

    # ========================================================================
    # Declarations and Assignments
    # ========================================================================

    def visit_declaration(self, decl: IRVariableDeclaration) -> List[LowerIRInstruction]:
        value = decl.value
        first = decl.name not in self.declared
        self.declared.add(decl.name)

        # Only a name's first declaration folds its literal into the data
        # section; later declarations store at runtime like an assignment.
        if first and isinstance(value, IntLiteral):
            self.fold_default(decl.name, decl.data_type, DataType.INT32, str(value.value))
            return []
        if first and isinstance(value, StringLiteral):
            self.fold_default(decl.name, decl.data_type, DataType.STRING, quote_string(value.value))
            return []

        return self.store_value(decl.name, value)

    def visit_assignment(self, assign: IRVariableAssignment) -> List[LowerIRInstruction]:
        return self.store_value(assign.name, assign.value)

    def store_value(self, name: str, value: Optional[DataItem]) -> List[LowerIRInstruction]:
        """Runtime store paths shared by declarations and assignments."""
        if value is None:
            # Already in the data section with its default
            return []
        if isinstance(value, IntLiteral):
            return [
                LiteralLoad(var_reg(1), value.value),
                VariableStore(name, var_reg(0), var_reg(1)),
            ]
        if isinstance(value, StringLiteral):
            raise InvalidDataItem(
                f"String literal cannot be stored into '{name}' at runtime; "
                "strings may only initialise a variable's first declaration")
        if isinstance(value, Identifier):
            return [
                VariableLoad(value.name, var_reg(1)),
                VariableStore(name, var_reg(0), var_reg(1)),
            ]
        if isinstance(value, TempReference):
            # The temp still holds the binary operation's result
            return [VariableStore(name, var_reg(0), temp_reg(value.temp_id))]

        raise InvalidDataItem(f"Invalid data item {value!r} for '{name}'")

    def fold_default(self, name: str, declared: DataType, literal_type: DataType, text: str) -> None:
        if name in self.variables:
            declared = self.variables[name].data_type
        if declared != literal_type:
            raise InvalidDataItem(
                f"Cannot initialise {declared} variable '{name}' with a {literal_type} literal")
        self.variables[name] = VariableSlot(declared, text)

    # ========================================================================
    # Calls and Operations
    # ========================================================================

    def visit_subroutine_call(self, call: IRSubroutineCall) -> List[LowerIRInstruction]:
        if len(call.args) != 1:
            raise InvalidDataItem(
                f"Subroutine '{call.name}' takes exactly one argument, got {len(call.args)}")
        return [
            self.load_value(call.args[0], param_reg(0)),
            SubroutineCall(self.options.resolve_subroutine(call.name)),
        ]

    def visit_binary_operation(self, op: IRBinaryOperation) -> List[LowerIRInstruction]:
        if not isinstance(op.op, BinaryOp):
            raise InvalidOperationType(f"Invalid operation type {op.op}")

        instructions: List[LowerIRInstruction] = []
        current_reg = 0

        operands = []
        for item in (op.left, op.right):
            if isinstance(item, TempReference):
                operands.append(temp_reg(item.temp_id))
            else:
                reg = var_reg(current_reg)
                instructions.append(self.load_value(item, reg))
                operands.append(reg)
                current_reg += 1

        left, right = operands
        instructions.append(BinaryOperation(op.op, temp_reg(op.temp_id), left, right))
        return instructions

    def load_value(self, item: DataItem, dest: RegisterID) -> LowerIRInstruction:
        """Load a literal or a variable's value into dest."""
        if isinstance(item, IntLiteral):
            return LiteralLoad(dest, item.value)
        if isinstance(item, Identifier):
            return VariableLoad(item.name, dest)

        raise InvalidDataItem(f"Cannot load {item} into a register; "
                              "only integer literals and variables are allowed here")
