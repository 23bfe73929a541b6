"""
Command Parser Module

Parses a token sequence into a syntax tree.

The parse is a single left-to-right reduction over an explicit stack of
completed subtrees: every operator pops its left operand, reads a
bounded right operand (one command, one group, or one path) and pushes
the combined node. There is no precedence between operator kinds, so
``a && b | c`` is ``Pipe(And(a, b), c)``.

Author: Conch Developers
Version: 1.0.0
"""

from typing import List, Tuple, Sequence as SequenceType

from .ast import (
    Node, Command, Pipe, And, Or, Sequence,
    RedirectOut, RedirectAppend, RedirectIn,
    Subshell, Background, Empty,
)
from .grammar import Token, TokenType
from conch.exceptions import ParseError
from conch.logger import get_logger


_BINARY_NODES = {
    TokenType.PIPE: Pipe,
    TokenType.AND: And,
    TokenType.OR: Or,
}

_REDIRECT_NODES = {
    TokenType.REDIRECT_OUT: RedirectOut,
    TokenType.REDIRECT_APPEND: RedirectAppend,
    TokenType.REDIRECT_IN: RedirectIn,
}


class Parser:
    """
    Builds a syntax tree from tokens.

    Example:
        >>> Parser.parse(Lexer.lex("ls -l | grep main"))
        Pipe(left=Command(...), right=Command(...))
    """

    _logger = get_logger('parser')

    @classmethod
    def parse(cls, tokens: SequenceType[Token]) -> Node:
        """
        Parse tokens into a syntax tree.

        Args:
            tokens: Tokens of one command line (or one group)

        Returns:
            Root node of the tree

        Raises:
            ParseError: If the tokens do not form a command
        """
        nodes: List[Node] = []
        i = 0

        while i < len(tokens):
            token = tokens[i]

            if token.type is TokenType.WORD or token.type is TokenType.OPEN_PAREN:
                # A new operand may only start when nothing is pending
                if nodes:
                    raise ParseError(token)
                node, i = cls._parse_operand(tokens, i, token)
                nodes.append(node)
                continue

            if token.type is TokenType.CLOSE_PAREN:
                raise ParseError(token)

            if not nodes:
                raise ParseError(token)
            left = nodes.pop()

            if token.type in _BINARY_NODES:
                right, i = cls._parse_operand(tokens, i + 1, token)
                nodes.append(_BINARY_NODES[token.type](left, right))

            elif token.type is TokenType.SEMICOLON:
                if i + 1 < len(tokens):
                    right, i = cls._parse_operand(tokens, i + 1, token)
                else:
                    right, i = Empty(), i + 1
                nodes.append(Sequence(left, right))

            elif token.type in _REDIRECT_NODES:
                if i + 1 >= len(tokens) or tokens[i + 1].is_operator:
                    raise ParseError(token)
                nodes.append(_REDIRECT_NODES[token.type](left, tokens[i + 1]))
                i += 2

            elif token.type is TokenType.BACKGROUND:
                nodes.append(Background(left))
                i += 1

            else:
                raise ParseError(token)

        if not nodes:
            raise ParseError()

        root = nodes.pop()
        cls._logger.debug("parsed line", context={'root': type(root).__name__})
        return root

    @classmethod
    def _parse_operand(
        cls,
        tokens: SequenceType[Token],
        start: int,
        operator: Token
    ) -> Tuple[Node, int]:
        """
        Parse one bounded operand starting at ``start``.

        An operand is a command (program plus the literal words directly
        after it) or a parenthesized group.

        Returns:
            The operand node and the index just past it
        """
        if start >= len(tokens):
            raise ParseError(operator)

        first = tokens[start]

        if first.type is TokenType.OPEN_PAREN:
            return cls._parse_group(tokens, start)

        if first.type is not TokenType.WORD:
            raise ParseError(first)

        return cls._parse_command(tokens, start)

    @staticmethod
    def _parse_command(
        tokens: SequenceType[Token],
        start: int
    ) -> Tuple[Command, int]:
        program = tokens[start]
        if not program.value:
            raise ParseError(program, message="empty program name")

        end = start + 1
        while end < len(tokens) and not tokens[end].is_operator:
            end += 1

        return Command(program, tuple(tokens[start + 1:end])), end

    @classmethod
    def _parse_group(
        cls,
        tokens: SequenceType[Token],
        start: int
    ) -> Tuple[Subshell, int]:
        """Parse ``( ... )`` starting at the opening token."""
        depth = 0

        for end in range(start, len(tokens)):
            token_type = tokens[end].type
            if token_type is TokenType.OPEN_PAREN:
                depth += 1
            elif token_type is TokenType.CLOSE_PAREN:
                depth -= 1
                if depth == 0:
                    break
        else:
            raise ParseError(tokens[start])

        inner = tokens[start + 1:end]
        if not inner:
            raise ParseError(tokens[end])

        return Subshell(cls.parse(inner)), end + 1


def parse(tokens: SequenceType[Token]) -> Node:
    """Parse tokens into a syntax tree. See Parser.parse."""
    return Parser.parse(tokens)
