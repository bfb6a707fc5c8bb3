"""
Tests for lowering tuple IR to register-indexed pseudo-instructions.
"""

import pytest

from ast_nodes import BinaryOp
from codegen.lower_ir import (
    BinaryOperation, LiteralLoad, LowerIRBuilder, SubroutineCall,
    VariableLoad, VariableStore,
)
from codegen.options import CompilerOptions
from codegen.tuple_ir import (
    IRBinaryOperation, IRProgram, IRSubroutineCall, IRVariableAssignment,
    IRVariableDeclaration,
)
from codegen.types import (
    DataType, Identifier, IntLiteral, RegisterBank, StringLiteral,
    TempReference, param_reg, temp_reg, var_reg,
)
from errors import InvalidDataItem, InvalidOperationType


def lower(instructions, variables=None, **options):
    program = IRProgram(list(instructions), dict(variables or {}))
    return LowerIRBuilder(CompilerOptions(**options)).build(program)


INT = DataType.INT32


class TestDeclarations:
    """Tests for lowering declarations."""

    def test_no_initialiser_emits_nothing(self):
        """Test bare declaration keeps the type default"""
        low = lower([IRVariableDeclaration("x", INT)], {"x": INT})
        assert low.instructions == []
        assert low.variables == {"x": (INT, "0")}

    def test_literal_folds_into_data(self):
        """Test literal initialiser becomes the data default"""
        low = lower([IRVariableDeclaration("x", INT, IntLiteral(3))], {"x": INT})
        assert low.instructions == []
        assert low.variables["x"] == (INT, "3")

    def test_negative_literal_folds_into_data(self):
        """Test negative literal becomes the data default"""
        low = lower([IRVariableDeclaration("x", INT, IntLiteral(-12))], {"x": INT})
        assert low.variables["x"].default == "-12"

    def test_identifier_initialiser(self):
        """Test identifier initialiser is loaded and stored"""
        low = lower([IRVariableDeclaration("y", INT, Identifier("x"))], {"x": INT, "y": INT})
        assert low.instructions == [
            VariableLoad("x", var_reg(1)),
            VariableStore("y", var_reg(0), var_reg(1)),
        ]

    def test_temp_initialiser_stores_without_reload(self):
        """Test temp initialiser is stored directly"""
        low = lower([
            IRBinaryOperation(BinaryOp.ADD, Identifier("x"), IntLiteral(2), 0),
            IRVariableDeclaration("y", INT, TempReference(0)),
        ], {"x": INT, "y": INT})
        assert low.instructions == [
            VariableLoad("x", var_reg(0)),
            LiteralLoad(var_reg(1), 2),
            BinaryOperation(BinaryOp.ADD, temp_reg(0), var_reg(0), var_reg(1)),
            VariableStore("y", var_reg(0), temp_reg(0)),
        ]

    def test_string_literal_folds_quoted(self):
        """Test string initialiser is quoted and escaped"""
        low = lower([IRVariableDeclaration("s", DataType.STRING, StringLiteral('say "hi"\n'))],
                    {"s": DataType.STRING})
        assert low.variables["s"] == (DataType.STRING, '"say \\"hi\\"\\n"')

    def test_string_default(self):
        """Test string default is the empty string"""
        low = lower([IRVariableDeclaration("s", DataType.STRING)], {"s": DataType.STRING})
        assert low.variables["s"] == (DataType.STRING, '""')

    def test_literal_type_mismatch(self):
        """Test literal of the wrong type is rejected"""
        with pytest.raises(InvalidDataItem):
            lower([IRVariableDeclaration("x", INT, StringLiteral("no"))], {"x": INT})

    def test_repeated_declaration_stores_at_runtime(self):
        """Test later declaration literal is a runtime store"""
        low = lower([
            IRVariableDeclaration("x", INT, IntLiteral(3)),
            IRSubroutineCall("Output", [Identifier("x")]),
            IRVariableDeclaration("x", INT, IntLiteral(5)),
        ], {"x": INT})
        assert low.variables["x"] == (INT, "3")
        assert low.instructions[-2:] == [
            LiteralLoad(var_reg(1), 5),
            VariableStore("x", var_reg(0), var_reg(1)),
        ]

    def test_literal_after_bare_declaration_stores_at_runtime(self):
        """Test literal on a second declaration after a bare one"""
        low = lower([
            IRVariableDeclaration("x", INT),
            IRVariableDeclaration("x", INT, IntLiteral(5)),
        ], {"x": INT})
        assert low.variables["x"].default == "0"
        assert len(low.instructions) == 2

    def test_repeated_string_declaration_rejected(self):
        """Test later declaration cannot store a string"""
        with pytest.raises(InvalidDataItem):
            lower([
                IRVariableDeclaration("s", DataType.STRING, StringLiteral("a")),
                IRVariableDeclaration("s", DataType.STRING, StringLiteral("b")),
            ], {"s": DataType.STRING})


class TestAssignments:
    """Tests for lowering assignments."""

    def test_literal_assignment_is_a_runtime_store(self):
        """Test literal assignment loads and stores"""
        low = lower([IRVariableAssignment("x", IntLiteral(3))], {"x": INT})
        assert low.instructions == [
            LiteralLoad(var_reg(1), 3),
            VariableStore("x", var_reg(0), var_reg(1)),
        ]
        assert low.variables["x"] == (INT, "0")

    def test_declaration_and_assignment_literals_differ(self):
        """Test declaration folds where assignment stores"""
        decl = lower([IRVariableDeclaration("x", INT, IntLiteral(3))], {"x": INT})
        assign = lower([IRVariableAssignment("x", IntLiteral(3))], {"x": INT})
        assert len(decl.instructions) == 0
        assert len(assign.instructions) == 2

    def test_identifier_assignment(self):
        """Test assignment from another variable"""
        low = lower([IRVariableAssignment("x", Identifier("y"))], {"x": INT, "y": INT})
        assert low.instructions == [
            VariableLoad("y", var_reg(1)),
            VariableStore("x", var_reg(0), var_reg(1)),
        ]

    def test_temp_assignment(self):
        """Test assignment of a temp result"""
        low = lower([IRVariableAssignment("x", TempReference(0))], {"x": INT})
        assert low.instructions == [VariableStore("x", var_reg(0), temp_reg(0))]

    def test_string_assignment_rejected(self):
        """Test string assignment is rejected"""
        with pytest.raises(InvalidDataItem):
            lower([IRVariableAssignment("s", StringLiteral("x"))], {"s": DataType.STRING})


class TestSubroutineCalls:
    """Tests for lowering calls."""

    def test_literal_argument(self):
        """Test literal argument goes to p0"""
        low = lower([IRSubroutineCall("Output", [IntLiteral(9)])])
        assert low.instructions == [
            LiteralLoad(param_reg(0), 9),
            SubroutineCall("print_int"),
        ]

    def test_identifier_argument(self):
        """Test variable argument is loaded into p0"""
        low = lower([IRSubroutineCall("Output", [Identifier("x")])], {"x": INT})
        assert low.instructions == [
            VariableLoad("x", param_reg(0)),
            SubroutineCall("print_int"),
        ]

    def test_user_routine_passes_through(self):
        """Test user routine name is kept"""
        low = lower([IRSubroutineCall("Blink", [IntLiteral(1)])])
        assert low.instructions[-1] == SubroutineCall("Blink")

    def test_custom_intrinsics(self):
        """Test intrinsic map from the options"""
        low = lower([IRSubroutineCall("Output", [IntLiteral(1)])],
                    intrinsics={"Output": "debug_out"})
        assert low.instructions[-1] == SubroutineCall("debug_out")

    def test_string_argument_rejected(self):
        """Test string argument is rejected"""
        with pytest.raises(InvalidDataItem):
            lower([IRSubroutineCall("Output", [StringLiteral("hi")])])


class TestBinaryOperations:
    """Tests for lowering binary operations."""

    @pytest.mark.parametrize("op", list(BinaryOp))
    def test_exactly_one_operation_with_fresh_registers(self, op):
        """Test one operation with distinct operand registers"""
        low = lower([IRBinaryOperation(op, Identifier("a"), Identifier("b"), 0)],
                    {"a": INT, "b": INT})
        ops = [i for i in low.instructions if isinstance(i, BinaryOperation)]
        assert len(ops) == 1
        assert ops[0].op == op
        assert ops[0].left != ops[0].right
        assert ops[0].result.bank == RegisterBank.TEMP

    def test_literal_operands(self):
        """Test literal operands are loaded in order"""
        low = lower([IRBinaryOperation(BinaryOp.SUBTRACT, IntLiteral(10), IntLiteral(4), 0)])
        assert low.instructions == [
            LiteralLoad(var_reg(0), 10),
            LiteralLoad(var_reg(1), 4),
            BinaryOperation(BinaryOp.SUBTRACT, temp_reg(0), var_reg(0), var_reg(1)),
        ]

    def test_temp_operand_is_not_reloaded(self):
        """Test temp operand is used in place"""
        low = lower([IRBinaryOperation(BinaryOp.MULTIPLY, TempReference(0), IntLiteral(3), 1)])
        assert low.instructions == [
            LiteralLoad(var_reg(0), 3),
            BinaryOperation(BinaryOp.MULTIPLY, temp_reg(1), temp_reg(0), var_reg(0)),
        ]

    def test_invalid_operation(self):
        """Test unknown operator is rejected"""
        with pytest.raises(InvalidOperationType):
            lower([IRBinaryOperation("Modulo", IntLiteral(1), IntLiteral(2), 0)])


class TestLowerDump:
    """Tests for the textual lower IR notation."""

    def test_dump(self):
        """Test lower IR text dump"""
        low = lower([
            IRVariableDeclaration("x", INT, IntLiteral(3)),
            IRSubroutineCall("Output", [Identifier("x")]),
        ], {"x": INT})
        assert low.dump() == (
            "Lower IR:\n"
            "(LOADVAR, x, p0)\n"
            "(CALL, print_int)\n"
            "\n"
            "Variables:\n"
            "x: Int32 = 3\n"
        )
