"""
Tuple IR Module for the RISClet Code Generator

Turns AST statements into a flat three-address-style instruction list plus a
variable table. A declaration such as

    x: Int32 = y + 3;

cannot be a single instruction, so it is rewritten as

    (ADD, y, 3, t0)
    (DECLARE, x, Int32, t0)

where t0 names the intermediate result. Only one binary operation is allowed
per statement, so every statement starts again at t0.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import ast_nodes as ast
from ast_nodes import BinaryOp, position_of
from errors import InvalidDataItem, ReservedName, UnexpectedStatement, UndeclaredVariable

from codegen.options import CompilerOptions
from codegen.types import (
    DataItem, DataType, Identifier, IntLiteral, StringLiteral, TempReference,
    data_type_from_name,
)


# ============================================================================
# Instructions
# ============================================================================

@dataclass
class IRInstruction:
    """Base class for tuple-IR instructions"""
    pass


@dataclass
class IRVariableDeclaration(IRInstruction):
    name: str
    data_type: DataType
    value: Optional[DataItem] = None

    def __str__(self):
        if self.value is None:
            return f"(DECLARE, {self.name}, {self.data_type})"
        return f"(DECLARE, {self.name}, {self.data_type}, {self.value})"


@dataclass
class IRVariableAssignment(IRInstruction):
    name: str
    value: DataItem

    def __str__(self):
        return f"(ASSIGN, {self.name}, {self.value})"


@dataclass
class IRSubroutineCall(IRInstruction):
    name: str
    args: List[DataItem]

    def __str__(self):
        args = ", ".join(str(a) for a in self.args)
        return f"(CALL, {self.name}, {args})"


@dataclass
class IRBinaryOperation(IRInstruction):
    op: BinaryOp
    left: DataItem
    right: DataItem
    temp_id: int

    def __str__(self):
        op = self.op.name if isinstance(self.op, BinaryOp) else str(self.op).upper()
        return f"({op}, {self.left}, {self.right}, t{self.temp_id})"


@dataclass
class IRProgram:
    instructions: List[IRInstruction] = field(default_factory=list)
    variables: Dict[str, DataType] = field(default_factory=dict)

    def dump(self) -> str:
        lines = ["Tuple IR:"]
        lines.extend(str(instr) for instr in self.instructions)
        lines.append("")
        lines.append("Variables:")
        lines.extend(f"{name}: {data_type}" for name, data_type in self.variables.items())
        return "\n".join(lines) + "\n"


# ============================================================================
# Builder
# ============================================================================

class TupleIRBuilder:
    """Generates tuple IR from a RISClet AST."""

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()
        self.variables: Dict[str, DataType] = {}

    def build(self, program: ast.Program) -> IRProgram:
        """Convert every statement in order. The first error aborts the build."""
        self.variables = {}
        instructions: List[IRInstruction] = []

        for stmt in program.statements:
            instructions.extend(self.visit_statement(stmt))

        return IRProgram(instructions, dict(self.variables))

    def visit_statement(self, stmt) -> List[IRInstruction]:
        """Dispatch on statement kind."""
        if isinstance(stmt, ast.VarDecl):
            return self.visit_var_decl(stmt)
        elif isinstance(stmt, ast.Assignment):
            return self.visit_assignment(stmt)
        elif isinstance(stmt, ast.SubroutineCall):
            return self.visit_subroutine_call(stmt)

        raise UnexpectedStatement(
            "Unexpected statement in program; only variable declaration, "
            "assignment, and subroutine calling are allowed here",
            position_of(stmt))

    # ========================================================================
    # Statements
    # ========================================================================

    def visit_var_decl(self, decl: ast.VarDecl) -> List[IRInstruction]:
        data_type = data_type_from_name(decl.type_name, decl.position)

        # The name becomes a data label
        if decl.name in self.options.reserved_symbols():
            raise ReservedName(
                f"'{decl.name}' is reserved for the program entry or the runtime "
                "library and cannot name a variable",
                decl.position)

        # Redeclaration keeps the first type
        first = decl.name not in self.variables
        declared_type = self.variables.get(decl.name, data_type)

        if decl.initialiser is None:
            instructions = [IRVariableDeclaration(decl.name, data_type)]
        else:
            instructions, value = self.visit_value(decl.initialiser)
            self.check_literal(decl.name, declared_type, value, decl, static=first)
            instructions.append(IRVariableDeclaration(decl.name, data_type, value))

        if first:
            self.variables[decl.name] = data_type
        return instructions

    def visit_assignment(self, assign: ast.Assignment) -> List[IRInstruction]:
        self.check_declared(assign.name, assign)
        instructions, value = self.visit_value(assign.value)
        self.check_literal(assign.name, self.variables.get(assign.name), value, assign,
                           static=False)
        instructions.append(IRVariableAssignment(assign.name, value))
        return instructions

    def visit_subroutine_call(self, call: ast.SubroutineCall) -> List[IRInstruction]:
        if len(call.args) != 1:
            raise UnexpectedStatement(
                f"Subroutine '{call.name}' must be called with exactly one argument, "
                f"got {len(call.args)}",
                call.position)
        return [IRSubroutineCall(call.name, [self.to_operand(call.args[0])])]

    def visit_value(self, expr):
        """Lower the right-hand side of a declaration or assignment.

        Returns the instructions that compute it and the operand holding it.
        """
        temp_counter = 0

        if isinstance(expr, ast.BinaryExpr):
            left = self.to_operand(expr.left)
            right = self.to_operand(expr.right)
            temp = TempReference(temp_counter)
            return [IRBinaryOperation(expr.op, left, right, temp.temp_id)], temp

        return [], self.to_data_item(expr)

    def check_literal(self, name: str, declared: Optional[DataType], value: DataItem,
                      node, static: bool) -> None:
        """Reject a literal the lowered program could not store into name.

        Only a variable's first declaration folds its literal into the data
        section; every later store happens at runtime through a register,
        and strings have no register form.
        """
        if isinstance(value, StringLiteral):
            if not static:
                raise InvalidDataItem(
                    f"String literal cannot be stored into '{name}' at runtime; "
                    "strings may only initialise a variable's first declaration",
                    position_of(node))
            literal_type = DataType.STRING
        elif isinstance(value, IntLiteral):
            literal_type = DataType.INT32
        else:
            return

        if declared is not None and declared != literal_type:
            raise InvalidDataItem(
                f"Cannot store a {literal_type} literal into {declared} variable '{name}'",
                position_of(node))

    # ========================================================================
    # Operands
    # ========================================================================

    def to_operand(self, node) -> DataItem:
        """Convert a node that will be loaded into a register."""
        item = self.to_data_item(node)
        if isinstance(item, StringLiteral):
            raise InvalidDataItem(
                "String literal cannot be used as an operand; "
                "strings may only initialise a declaration",
                position_of(node))
        return item

    def to_data_item(self, node) -> DataItem:
        """Convert a literal or identifier node to an operand."""
        if isinstance(node, ast.IntLiteral):
            if not -(2 ** 31) <= node.value < 2 ** 31:
                raise InvalidDataItem(f"Integer literal {node.value} does not fit in Int32",
                                      node.position)
            return IntLiteral(node.value)
        elif isinstance(node, ast.StringLiteral):
            return StringLiteral(node.value)
        elif isinstance(node, ast.Identifier):
            self.check_declared(node.name, node)
            return Identifier(node.name)

        raise InvalidDataItem("Invalid data item: expected a literal or identifier",
                              position_of(node))

    def check_declared(self, name: str, node) -> None:
        if self.options.strict_declarations and name not in self.variables:
            raise UndeclaredVariable(
                f"Undeclared identifier '{name}': variable has not been declared",
                position_of(node))
