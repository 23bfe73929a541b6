"""
Lexer Module

Converts a command line into tokens.

Author: Conch Developers
Version: 1.0.0
"""

from typing import List

from .grammar import Token, TokenType
from conch.exceptions import LexError
from conch.logger import get_logger


# Operators that may be doubled: single form, doubled form
_DOUBLING_OPERATORS = {
    '|': (TokenType.PIPE, TokenType.OR),
    '&': (TokenType.BACKGROUND, TokenType.AND),
    '>': (TokenType.REDIRECT_OUT, TokenType.REDIRECT_APPEND),
}

_SINGLE_OPERATORS = {
    '<': TokenType.REDIRECT_IN,
    ';': TokenType.SEMICOLON,
    '(': TokenType.OPEN_PAREN,
    ')': TokenType.CLOSE_PAREN,
}

_WHITESPACE = (' ', '\t')


class Lexer:
    """
    Splits a command line into words and operators.

    Handles:
    - Whitespace separated words
    - Double and single quoted spans (an empty pair is an empty word)
    - Backslash escapes
    - Operators: | || & && > >> < ; ( )

    Example:
        >>> Lexer.lex('ls -l | grep "main file"')
        [Token.word('ls'), Token.word('-l'), Token.operator(TokenType.PIPE),
         Token.word('grep'), Token.word('main file')]
    """

    _logger = get_logger('lexer')

    @classmethod
    def lex(cls, line: str) -> List[Token]:
        """
        Tokenize a command line.

        Args:
            line: Command line string

        Returns:
            Ordered list of tokens

        Raises:
            LexError: If an operator character is repeated three times
        """
        tokens: List[Token] = []
        current = ""
        escape = False
        in_double_quotes = False
        in_single_quotes = False
        i = 0

        def flush() -> None:
            nonlocal current
            if current:
                tokens.append(Token.word(current))
                current = ""

        while i < len(line):
            char = line[i]
            i += 1
            quoted = in_double_quotes or in_single_quotes

            if escape:
                current += char
                escape = False
                continue

            if char == '\\':
                escape = True
                continue

            # Leaving a quote always emits a word, even an empty one
            if char == '"' and not in_single_quotes:
                in_double_quotes = not in_double_quotes
                if not in_double_quotes:
                    tokens.append(Token.word(current))
                    current = ""
                continue

            if char == "'" and not in_double_quotes:
                in_single_quotes = not in_single_quotes
                if not in_single_quotes:
                    tokens.append(Token.word(current))
                    current = ""
                continue

            if quoted:
                current += char
                continue

            if char in _WHITESPACE:
                flush()
                continue

            if char in _DOUBLING_OPERATORS:
                flush()
                single, double = _DOUBLING_OPERATORS[char]
                if i < len(line) and line[i] == char:
                    i += 1
                    if i < len(line) and line[i] == char:
                        raise LexError(char)
                    tokens.append(Token.operator(double))
                else:
                    tokens.append(Token.operator(single))
                continue

            if char in _SINGLE_OPERATORS:
                flush()
                tokens.append(Token.operator(_SINGLE_OPERATORS[char]))
                continue

            current += char

        # Unterminated quotes are accepted
        flush()

        cls._logger.debug(
            "lexed line",
            context={'tokens': len(tokens)}
        )
        return tokens


def lex(line: str) -> List[Token]:
    """Tokenize a command line. See Lexer.lex."""
    return Lexer.lex(line)
