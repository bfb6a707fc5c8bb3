"""
RISClet AST Builder

Walks the token stream and constructs the AST. Statements are flat and end
with a semicolon, so the builder splits on ';' and recognises each statement
from its leading tokens rather than running a recursive descent.
"""

from typing import List, Tuple

from ast_nodes import *
from errors import ParseError
from lexer import Token, TokenType


INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

OPERATOR_TOKENS = {
    TokenType.PLUS: BinaryOp.ADD,
    TokenType.MINUS: BinaryOp.SUBTRACT,
    TokenType.MULTIPLY: BinaryOp.MULTIPLY,
    TokenType.DIVIDE: BinaryOp.DIVIDE,
}


class ASTBuilder:
    """Converts a token list to a RISClet AST"""

    def build(self, tokens: List[Token]) -> Program:
        """Build AST from the lexer's token list"""
        program = Program()
        current: List[Token] = []

        for token in tokens:
            if token.type == TokenType.EOF:
                break
            if token.type == TokenType.SEMICOLON:
                if not current:
                    raise ParseError("Empty statement", token.position)
                program.statements.append(self.visit_statement(current))
                current = []
            else:
                current.append(token)

        if current:
            last = current[-1]
            raise ParseError("Expected ';' at end of statement",
                             (last.line, last.column + len(last.lexeme)))

        return program

    # ========================================================================
    # Statements
    # ========================================================================

    def visit_statement(self, tokens: List[Token]) -> Stmt:
        """Visit one statement (semicolon excluded)"""
        first = tokens[0]
        line, column = first.position

        # name: Type [= expr]
        if (len(tokens) >= 3 and first.type == TokenType.IDENTIFIER
                and tokens[1].type == TokenType.COLON
                and tokens[2].type == TokenType.IDENTIFIER):
            if len(tokens) == 3:
                return VarDecl(first.lexeme, tokens[2].lexeme, None, line, column)
            if tokens[3].type != TokenType.ASSIGN:
                raise ParseError("Expected '=' after variable type", tokens[3].position)
            if len(tokens) == 4:
                raise ParseError("Missing initialiser after '='", tokens[3].position)
            initialiser = self.visit_expression(tokens[4:])
            return VarDecl(first.lexeme, tokens[2].lexeme, initialiser, line, column)

        # name = expr
        if (len(tokens) >= 2 and first.type == TokenType.IDENTIFIER
                and tokens[1].type == TokenType.ASSIGN):
            if len(tokens) == 2:
                raise ParseError("Missing value after '='", tokens[1].position)
            return Assignment(first.lexeme, self.visit_expression(tokens[2:]), line, column)

        # name(args)
        if (len(tokens) >= 3 and first.type == TokenType.IDENTIFIER
                and tokens[1].type == TokenType.LEFT_PAREN
                and tokens[-1].type == TokenType.RIGHT_PAREN):
            args = self.visit_arguments(tokens[2:-1], tokens[1])
            return SubroutineCall(first.lexeme, args, line, column)

        # Anything that still reads as an expression is kept so the IR stage
        # can reject it as a statement.
        try:
            expr = self.visit_expression(tokens)
        except ParseError as e:
            raise ParseError("Unrecognised statement structure", first.position) from e
        return ExprStmt(expr, line, column)

    def visit_arguments(self, tokens: List[Token], open_paren: Token) -> List[Expr]:
        """Visit a comma separated argument list (parentheses excluded)"""
        args: List[Expr] = []
        if not tokens:
            return args

        current: List[Token] = []
        for token in tokens:
            if token.type == TokenType.COMMA:
                if not current:
                    raise ParseError("Empty argument", token.position)
                args.append(self.visit_expression(current))
                current = []
            else:
                current.append(token)

        if not current:
            raise ParseError("Empty argument", tokens[-1].position)
        args.append(self.visit_expression(current))
        return args

    # ========================================================================
    # Expressions
    # ========================================================================

    def visit_expression(self, tokens: List[Token]) -> Expr:
        """Visit `atom` or `atom op atom`"""
        left, pos = self.visit_atom(tokens, 0)
        if pos == len(tokens):
            return left

        op_token = tokens[pos]
        op = OPERATOR_TOKENS.get(op_token.type)
        if op is None:
            raise ParseError(f"Invalid operator '{op_token.lexeme}'", op_token.position)
        if pos + 1 == len(tokens):
            raise ParseError(f"Missing right operand for '{op_token.lexeme}'", op_token.position)

        right, pos = self.visit_atom(tokens, pos + 1)
        if pos != len(tokens):
            raise ParseError("Only a single binary operation is allowed per expression",
                             tokens[pos].position)

        line, column = tokens[0].position
        return BinaryExpr(op, left, right, line, column)

    def visit_atom(self, tokens: List[Token], pos: int) -> Tuple[Expr, int]:
        """Visit an integer (optionally negated), string or identifier"""
        token = tokens[pos]
        line, column = token.position

        if token.type == TokenType.IDENTIFIER:
            return Identifier(token.lexeme, line, column), pos + 1

        if token.type == TokenType.STRING_LITERAL:
            return StringLiteral(token.lexeme, line, column), pos + 1

        if token.type == TokenType.INT_LITERAL:
            return IntLiteral(self._int_value(token.lexeme, token), line, column), pos + 1

        if (token.type == TokenType.MINUS and pos + 1 < len(tokens)
                and tokens[pos + 1].type == TokenType.INT_LITERAL):
            value = self._int_value("-" + tokens[pos + 1].lexeme, token)
            return IntLiteral(value, line, column), pos + 2

        raise ParseError(f"Expected a value, found '{token.lexeme}'", token.position)

    def _int_value(self, text: str, token: Token) -> int:
        value = int(text)
        if not INT32_MIN <= value <= INT32_MAX:
            raise ParseError(f"Integer literal {text} does not fit in Int32", token.position)
        return value
