"""
RISClet Lexer

Turns source text into a flat list of tokens with 1-based line/column
positions. Whitespace and // comments are dropped.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import List

from errors import LexError


class TokenType(Enum):
    # Values and identifiers
    IDENTIFIER = auto()
    INT_LITERAL = auto()
    STRING_LITERAL = auto()

    # Operators
    ASSIGN = auto()
    PLUS = auto()
    MINUS = auto()
    MULTIPLY = auto()
    DIVIDE = auto()

    # Punctuation
    COLON = auto()
    SEMICOLON = auto()
    COMMA = auto()
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()

    EOF = auto()


@dataclass
class Token:
    type: TokenType
    lexeme: str
    line: int
    column: int

    @property
    def position(self):
        return (self.line, self.column)

    def __str__(self):
        if self.type in (TokenType.IDENTIFIER, TokenType.INT_LITERAL, TokenType.STRING_LITERAL):
            return f"{self.type.name}({self.lexeme})"
        return self.type.name


TOKEN_RE = re.compile(
    r"""
    (?P<WS>\s+)
  | (?P<COMMENT>//[^\n]*)
  | (?P<STRING_LITERAL>"(?:[^"\\\n]|\\.)*")
  | (?P<INT_LITERAL>\d+)
  | (?P<IDENTIFIER>[A-Za-z_]\w*)
  | (?P<ASSIGN>=)
  | (?P<PLUS>\+)
  | (?P<MINUS>-)
  | (?P<MULTIPLY>\*)
  | (?P<DIVIDE>/)
  | (?P<COLON>:)
  | (?P<SEMICOLON>;)
  | (?P<COMMA>,)
  | (?P<LEFT_PAREN>\()
  | (?P<RIGHT_PAREN>\))
    """,
    re.VERBOSE,
)

ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t"}


def unescape_string(body: str, line: int, column: int) -> str:
    """Decode the backslash escapes of a string literal body."""
    out = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\":
            esc = body[i + 1]
            if esc not in ESCAPES:
                # +1 for the opening quote
                raise LexError(f"Unknown escape sequence '\\{esc}'", (line, column + 1 + i))
            out.append(ESCAPES[esc])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def tokenize(source: str) -> List[Token]:
    """Tokenize source text. The returned list always ends with an EOF token."""
    tokens: List[Token] = []
    i = 0
    line = 1
    col = 1
    while i < len(source):
        m = TOKEN_RE.match(source, i)
        if not m:
            if source[i] == '"':
                raise LexError("Unterminated string literal", (line, col))
            raise LexError(f"Unexpected character {source[i]!r}", (line, col))
        kind = m.lastgroup
        text = m.group(kind)
        if kind in ("WS", "COMMENT"):
            newlines = text.count("\n")
            if newlines:
                line += newlines
                col = 1 + len(text) - (text.rfind("\n") + 1)
            else:
                col += len(text)
            i = m.end()
            continue
        if kind == "STRING_LITERAL":
            lexeme = unescape_string(text[1:-1], line, col)
        else:
            lexeme = text
        tokens.append(Token(TokenType[kind], lexeme, line, col))
        col += len(text)
        i = m.end()
    tokens.append(Token(TokenType.EOF, "", line, col))
    return tokens
