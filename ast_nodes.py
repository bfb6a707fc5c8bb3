"""
RISClet AST Node Definitions

AST for the flat RISClet statement language. A program is a sequence of
single-line statements; expressions are either a single atom or one binary
operation between two atoms.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from enum import Enum


UNKNOWN_POSITION = (-1, -1)


# ============================================================================
# Enums
# ============================================================================

class BinaryOp(Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"


# ============================================================================
# Base Node
# ============================================================================

@dataclass
class Node:
    """Base class for all nodes. line/column are 1-based, -1 when unknown."""

    @property
    def position(self) -> Tuple[int, int]:
        return (getattr(self, "line", -1), getattr(self, "column", -1))


def position_of(node) -> Tuple[int, int]:
    """Best-effort source position for any object handed to the compiler."""
    if isinstance(node, Node):
        return node.position
    return UNKNOWN_POSITION


# ============================================================================
# Expression Nodes
# ============================================================================

@dataclass
class Expr(Node):
    """Base class for expressions"""
    pass


@dataclass
class IntLiteral(Expr):
    value: int
    line: int = -1
    column: int = -1


@dataclass
class StringLiteral(Expr):
    value: str
    line: int = -1
    column: int = -1


@dataclass
class Identifier(Expr):
    name: str
    line: int = -1
    column: int = -1


@dataclass
class BinaryExpr(Expr):
    op: BinaryOp
    left: Expr
    right: Expr
    line: int = -1
    column: int = -1


# ============================================================================
# Statement Nodes
# ============================================================================

@dataclass
class Stmt(Node):
    """Base class for statements"""
    pass


@dataclass
class VarDecl(Stmt):
    """name: Type or name: Type = initialiser"""
    name: str
    type_name: str
    initialiser: Optional[Expr] = None
    line: int = -1
    column: int = -1


@dataclass
class Assignment(Stmt):
    """name = value"""
    name: str
    value: Expr
    line: int = -1
    column: int = -1


@dataclass
class SubroutineCall(Stmt):
    """name(arg, ...)"""
    name: str
    args: List[Expr] = field(default_factory=list)
    line: int = -1
    column: int = -1


@dataclass
class ExprStmt(Stmt):
    """A bare expression used as a statement (parsed, but never compiled)"""
    expr: Expr
    line: int = -1
    column: int = -1


# ============================================================================
# Program
# ============================================================================

@dataclass
class Program(Node):
    statements: List[Stmt] = field(default_factory=list)
