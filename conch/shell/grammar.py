"""
Grammar Module

Lexical tokens produced by the lexer and consumed by the parser.

Author: Conch Developers
Version: 1.0.0
"""

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    """Token kinds. Operator values are their fixed spellings."""
    WORD = "word"
    PIPE = "|"
    AND = "&&"
    OR = "||"
    SEMICOLON = ";"
    REDIRECT_OUT = ">"
    REDIRECT_APPEND = ">>"
    REDIRECT_IN = "<"
    BACKGROUND = "&"
    OPEN_PAREN = "("
    CLOSE_PAREN = ")"


# Operators taking a left operand and a single command on the right
BINARY_OPERATORS = frozenset({
    TokenType.PIPE,
    TokenType.AND,
    TokenType.OR,
    TokenType.SEMICOLON,
})

# Operators taking a left operand and a path on the right
REDIRECT_OPERATORS = frozenset({
    TokenType.REDIRECT_OUT,
    TokenType.REDIRECT_APPEND,
    TokenType.REDIRECT_IN,
})


@dataclass(frozen=True)
class Token:
    """
    A lexical unit.

    Literal words carry their text with quotes and escapes already
    resolved; operators carry only their type.
    """
    type: TokenType
    value: str = ""

    @classmethod
    def word(cls, value: str) -> 'Token':
        return cls(TokenType.WORD, value)

    @classmethod
    def operator(cls, token_type: TokenType) -> 'Token':
        if token_type is TokenType.WORD:
            raise ValueError("WORD is not an operator")
        return cls(token_type)

    @property
    def is_operator(self) -> bool:
        return self.type is not TokenType.WORD

    def __str__(self) -> str:
        if self.type is TokenType.WORD:
            return self.value
        return self.type.value

    def __repr__(self) -> str:
        if self.type is TokenType.WORD:
            return f"Token.word({self.value!r})"
        return f"Token.operator(TokenType.{self.type.name})"
