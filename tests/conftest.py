"""
Pytest configuration and fixtures for RISClet compiler tests.

Provides reusable fixtures for:
- Compiling RISClet programs in-process and inspecting every stage
- Running the riscletc command line and reading the generated assembly
- Checking compilation errors
"""

import pytest
import subprocess
import tempfile
import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from codegen import CompilerOptions
from riscletc import compile_source


class CompilerResult:
    """Result of running riscletc on a RISClet program."""

    def __init__(self, compile_success: bool, compile_output: str,
                 assembly: str = None, stdout: str = None):
        self.compile_success = compile_success
        self.compile_output = compile_output
        self.assembly = assembly
        self.stdout = stdout


def asm_lines(assembly: str):
    """Instruction and data lines of an assembly listing, indentation removed."""
    return [line.strip() for line in assembly.splitlines()
            if line.startswith("    ")]


@pytest.fixture
def compiler_root():
    """Path to compiler root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def compile_risclet(compiler_root):
    """
    Fixture that returns a function to run riscletc on RISClet source code.

    Usage:
        result = compile_risclet(source_code)
        assert result.compile_success
        assert "x: .word 3" in result.assembly
    """
    def _compile(source: str, *flags: str) -> CompilerResult:
        with tempfile.TemporaryDirectory() as tmpdir:
            source_path = os.path.join(tmpdir, "test.risclet")
            asm_path = os.path.join(tmpdir, "test.s")

            with open(source_path, 'w', encoding='utf-8') as f:
                f.write(source)

            riscletc = os.path.join(compiler_root, "riscletc.py")
            cmd = [sys.executable, riscletc, source_path, "-o", asm_path, *flags]

            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                cwd=compiler_root
            )

            compile_success = result.returncode == 0
            compile_output = result.stdout + result.stderr

            assembly = None
            if os.path.exists(asm_path):
                with open(asm_path, encoding='utf-8') as f:
                    assembly = f.read()

            return CompilerResult(compile_success, compile_output,
                                  assembly=assembly, stdout=result.stdout)

    return _compile


@pytest.fixture
def expect_compile_error(compile_risclet):
    """
    Fixture that verifies compilation fails with expected error.

    Usage:
        expect_compile_error(bad_code, "unexpected statement")
    """
    def _expect(source: str, error_substring: str = None):
        result = compile_risclet(source)
        assert not result.compile_success, \
            f"Expected compilation to fail but it succeeded.\nOutput: {result.compile_output}"
        assert result.assembly is None, "No assembly may be written for a failed compilation"
        if error_substring:
            assert error_substring.lower() in result.compile_output.lower(), \
                f"Expected error containing '{error_substring}' but got:\n{result.compile_output}"

    return _expect


@pytest.fixture
def compile_program():
    """
    Fixture that compiles source in-process and returns every stage's output.

    Usage:
        result = compile_program("x: Int32 = 3;")
        assert result.lower_ir.instructions == []
    """
    def _compile(source: str, **options):
        return compile_source(source, CompilerOptions(**options))

    return _compile


@pytest.fixture
def expect_asm(compile_program):
    """
    Fixture that compiles source and asserts the text section instructions.

    Usage:
        expect_asm("Output(3);", ["mov w0, #3", "bl print_int"])
    """
    def _expect(source: str, expected, **options):
        result = compile_program(source, **options)
        text = result.assembly.split("_start:", 1)[1]
        body = asm_lines(text)[:-3]  # drop the exit sequence
        assert body == expected, \
            f"Instruction mismatch:\nExpected: {expected!r}\nGot: {body!r}"

    return _expect
