#!/usr/bin/env python3
"""
RISClet Compiler

Usage:
    python riscletc.py <source_file> [-o output] [--emit-tokens] [--emit-ast]
                       [--emit-tuple-ir] [--emit-lower-ir]

Examples:
    python riscletc.py prog.risclet                  # Produces prog.s
    python riscletc.py prog.risclet -o out.s         # Produces out.s
    python riscletc.py prog.risclet --emit-tuple-ir  # Print tuple IR
    python riscletc.py prog.risclet --permissive     # Allow undeclared names
"""

import sys
import os
import argparse
from dataclasses import dataclass
from typing import List, Optional

from ast_builder import ASTBuilder
from ast_nodes import Program
from codegen import CodeGenerator, CompilerOptions
from codegen.lower_ir import LowerIRProgram
from codegen.tuple_ir import IRProgram
from errors import CompileError
from lexer import Token, tokenize


@dataclass
class CompilationResult:
    """Every stage's output for one source text."""
    tokens: List[Token]
    program: Program
    tuple_ir: IRProgram
    lower_ir: LowerIRProgram
    assembly: str


def read_source(source_path: str) -> str:
    """Read a source file with line endings normalised to \\n."""
    with open(source_path, 'r', encoding='utf-8', newline='') as f:
        source = f.read()
    return source.replace('\r\n', '\n').replace('\r', '\n')


def compile_source(source: str, options: Optional[CompilerOptions] = None) -> CompilationResult:
    """Compile source text to assembly in-process. Raises CompileError."""
    tokens = tokenize(source)
    program = ASTBuilder().build(tokens)
    codegen = CodeGenerator(options)
    assembly = codegen.generate(program)
    return CompilationResult(tokens, program, codegen.tuple_ir, codegen.lower_ir, assembly)


def print_ast(program: Program, indent=0):
    """Pretty print AST (for debugging)"""
    def p(msg):
        print("  " * indent + msg)

    p("Program")
    for stmt in program.statements:
        p(f"  {type(stmt).__name__}: {stmt}")


def default_output_path(source_path: str) -> str:
    return os.path.splitext(source_path)[0] + ".s"


def compile_risclet(source_path: str, output_path: str = None,
                    emit_tokens: bool = False, emit_ast: bool = False,
                    emit_tuple_ir: bool = False, emit_lower_ir: bool = False,
                    options: Optional[CompilerOptions] = None):
    """
    Compile a RISClet source file.

    Args:
        source_path: Path to the source file
        output_path: Assembly output path (default: source name with .s)
        emit_tokens: Print tokens instead of compiling
        emit_ast: Print AST instead of compiling
        emit_tuple_ir: Print tuple IR instead of compiling
        emit_lower_ir: Print lower IR instead of compiling
        options: Code generation options
    """
    if output_path is None:
        output_path = default_output_path(source_path)

    source = read_source(source_path)
    dumping = emit_tokens or emit_ast or emit_tuple_ir or emit_lower_ir

    if not dumping:
        print(f"Parsing {source_path}...")
    tokens = tokenize(source)
    if emit_tokens:
        print(" ".join(str(t) for t in tokens))
        return

    program = ASTBuilder().build(tokens)
    if emit_ast:
        print_ast(program)
        return

    codegen = CodeGenerator(options)

    if not dumping:
        print("Building tuple IR...")
    tuple_ir = codegen.generate_tuple_ir(program)
    if emit_tuple_ir:
        print(tuple_ir.dump(), end="")
        return

    if not dumping:
        print("Lowering to register IR...")
    lower_ir = codegen.generate_lower_ir(tuple_ir)
    if emit_lower_ir:
        print(lower_ir.dump(), end="")
        return

    print("Generating AArch64 assembly...")
    assembly = codegen.emit(lower_ir)

    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(assembly)
    print(f"Successfully compiled to {output_path}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="RISClet Compiler (AArch64)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s prog.risclet                  Compile to prog.s
  %(prog)s prog.risclet -o out.s         Compile to out.s
  %(prog)s prog.risclet --emit-tuple-ir  Print tuple IR
  %(prog)s prog.risclet --emit-lower-ir  Print lower IR
        """
    )

    parser.add_argument("source", help="Source file")
    parser.add_argument("-o", "--output", help="Output file (default: source with .s)")
    parser.add_argument("--emit-tokens", action="store_true",
                        help="Print tokens to stdout")
    parser.add_argument("--emit-ast", action="store_true",
                        help="Print AST to stdout")
    parser.add_argument("--emit-tuple-ir", action="store_true",
                        help="Print tuple IR to stdout")
    parser.add_argument("--emit-lower-ir", action="store_true",
                        help="Print lower IR to stdout")
    parser.add_argument("--permissive", action="store_true",
                        help="Allow use of undeclared variables")
    parser.add_argument("--program-name",
                        help="Name shown in the assembly header (default: output file name)")

    args = parser.parse_args(argv)

    output = args.output or default_output_path(args.source)
    options = CompilerOptions(
        strict_declarations=not args.permissive,
        program_name=args.program_name or os.path.basename(output),
    )

    try:
        compile_risclet(
            args.source,
            output,
            emit_tokens=args.emit_tokens,
            emit_ast=args.emit_ast,
            emit_tuple_ir=args.emit_tuple_ir,
            emit_lower_ir=args.emit_lower_ir,
            options=options,
        )
    except CompileError as e:
        print(e.format(args.source), file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Internal compiler error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(2)


if __name__ == "__main__":
    main()
