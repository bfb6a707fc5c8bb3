"""
RISClet AArch64 Code Generator Package

This package lowers a RISClet AST to AArch64 assembly text in three stages:

    codegen/
    ├── __init__.py      # CodeGenerator class (this file)
    ├── options.py       # CompilerOptions shared by all stages
    ├── types.py         # DataType, DataItem variants, RegisterID
    ├── tuple_ir.py      # AST -> tuple IR (named variables, temps)
    ├── lower_ir.py      # tuple IR -> register-indexed pseudo-instructions
    └── aarch64.py       # lower IR -> assembly text

Each stage consumes its whole input and returns a new program; no state is
shared between stages or between calls to generate().
"""
from typing import Optional

from ast_nodes import Program

from codegen.aarch64 import AArch64Emitter
from codegen.lower_ir import LowerIRBuilder, LowerIRProgram
from codegen.options import CompilerOptions
from codegen.tuple_ir import IRProgram, TupleIRBuilder


class CodeGenerator:
    """Generates AArch64 assembly from a RISClet AST"""

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

        # Stage outputs of the last generate() call, for --emit-* dumps
        self.tuple_ir: Optional[IRProgram] = None
        self.lower_ir: Optional[LowerIRProgram] = None

    def generate_tuple_ir(self, program: Program) -> IRProgram:
        self.tuple_ir = TupleIRBuilder(self.options).build(program)
        return self.tuple_ir

    def generate_lower_ir(self, tuple_ir: IRProgram) -> LowerIRProgram:
        self.lower_ir = LowerIRBuilder(self.options).build(tuple_ir)
        return self.lower_ir

    def emit(self, lower_ir: LowerIRProgram) -> str:
        return AArch64Emitter(self.options).emit(lower_ir)

    def generate(self, program: Program) -> str:
        """Run all three stages and return the assembly text."""
        self.tuple_ir = None
        self.lower_ir = None
        tuple_ir = self.generate_tuple_ir(program)
        lower_ir = self.generate_lower_ir(tuple_ir)
        return self.emit(lower_ir)


__all__ = ['CodeGenerator', 'CompilerOptions']
