"""
Syntax Exceptions

Exceptions raised while turning a command line into tokens and an AST.
Both abort the whole line before any process is spawned.

Author: Conch Developers
Version: 1.0.0
"""

from typing import Optional, Any, TYPE_CHECKING

from .base import ConchError

if TYPE_CHECKING:
    from conch.shell.grammar import Token


class SyntaxException(ConchError):
    """
    Base exception for lexical and structural errors.

    Attributes:
        message: Human-readable error description
        error_code: Numeric error code for programmatic handling
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code=error_code or 1000, context=context)


class LexError(SyntaxException):
    """
    Malformed operator sequence in the input text.

    Raised by the lexer when an operator character is repeated a third
    time (``|||``, ``&&&``, ``>>>``).

    Example:
        >>> raise LexError('|')
    """

    def __init__(self, char: str) -> None:
        super().__init__(
            message=f"parse error near `{char}`",
            error_code=1001,
        )
        self.char = char

    def __str__(self) -> str:
        return self.message


class ParseError(SyntaxException):
    """
    The token sequence does not form a command.

    Raised for an operator with no left operand, a missing right operand
    or redirection target, an unbalanced group marker, or an empty line.
    ``token`` is the offending token, or None when the line holds
    nothing to run. ``message`` replaces the default wording for cases
    where the token text alone says nothing (an empty program name).

    Example:
        >>> raise ParseError(Token.operator(TokenType.CLOSE_PAREN))
    """

    def __init__(
        self,
        token: Optional['Token'] = None,
        message: Optional[str] = None
    ) -> None:
        if message is None:
            if token is None:
                message = "no command given"
            else:
                message = f"parse error near `{token}`"
        super().__init__(message=message, error_code=1002)
        self.token = token

    def __str__(self) -> str:
        return self.message
