"""
Tests for the RISClet lexer.
"""

import pytest

from errors import LexError
from lexer import Token, TokenType, tokenize


def types(source):
    return [t.type for t in tokenize(source)]


class TestTokenKinds:
    """Tests for recognising each token kind."""

    def test_declaration(self):
        """Test tokens of a declaration"""
        assert types("x: Int32 = 3;") == [
            TokenType.IDENTIFIER, TokenType.COLON, TokenType.IDENTIFIER,
            TokenType.ASSIGN, TokenType.INT_LITERAL, TokenType.SEMICOLON,
            TokenType.EOF,
        ]

    def test_operators(self):
        """Test tokens of each operator"""
        assert types("+ - * /") == [
            TokenType.PLUS, TokenType.MINUS, TokenType.MULTIPLY,
            TokenType.DIVIDE, TokenType.EOF,
        ]

    def test_call_punctuation(self):
        """Test tokens of a call with two arguments"""
        assert types("Output(a, 1);") == [
            TokenType.IDENTIFIER, TokenType.LEFT_PAREN, TokenType.IDENTIFIER,
            TokenType.COMMA, TokenType.INT_LITERAL, TokenType.RIGHT_PAREN,
            TokenType.SEMICOLON, TokenType.EOF,
        ]

    def test_identifier_with_digits_and_underscore(self):
        """Test identifier characters"""
        tokens = tokenize("_count2")
        assert tokens[0] == Token(TokenType.IDENTIFIER, "_count2", 1, 1)

    def test_empty_source_is_just_eof(self):
        """Test empty source"""
        assert types("") == [TokenType.EOF]


class TestStringLiterals:
    """Tests for string literal decoding."""

    def test_plain_string(self):
        """Test string without escapes"""
        assert tokenize('"hello"')[0].lexeme == "hello"

    def test_escapes(self):
        """Test every supported escape"""
        assert tokenize(r'"a\"b\\c\nd\te"')[0].lexeme == 'a"b\\c\nd\te'

    def test_unknown_escape(self):
        """Test error on unsupported escape"""
        with pytest.raises(LexError) as exc:
            tokenize(r'"bad\q"')
        assert "escape" in exc.value.message
        assert exc.value.position == (1, 5)

    def test_unterminated_string(self):
        """Test error on string without closing quote"""
        with pytest.raises(LexError) as exc:
            tokenize('x = "open')
        assert exc.value.position == (1, 5)


class TestPositions:
    """Tests for line/column tracking."""

    def test_columns_on_one_line(self):
        """Test token columns"""
        tokens = tokenize("ab = 12;")
        assert [(t.line, t.column) for t in tokens] == [
            (1, 1), (1, 4), (1, 6), (1, 8), (1, 9),
        ]

    def test_lines_and_comments(self):
        """Test line counting across comments"""
        source = "// header comment\nx: Int32;\n  y = x; // trailing\n"
        tokens = tokenize(source)
        assert tokens[0].position == (2, 1)
        y = [t for t in tokens if t.lexeme == "y"][0]
        assert y.position == (3, 3)

    def test_unexpected_character(self):
        """Test error on unknown character"""
        with pytest.raises(LexError) as exc:
            tokenize("x: Int32;\nx = 3 % 2;")
        assert exc.value.position == (2, 7)
        assert "'%'" in exc.value.message
