"""
Conch Exception Hierarchy

All custom exceptions inherit from ConchError.

Architecture:
    ConchError (Base)
    ├── SyntaxException
    │   ├── LexError
    │   └── ParseError
    ├── ExecException
    │   ├── SpawnError
    │   └── RedirectError
    └── ConfigValidationError

A non-zero exit status is not an exception; it is reported through
RunResult.
"""

from .base import (
    ConchError,
    ConfigValidationError,
)

from .syntax_exceptions import (
    SyntaxException,
    LexError,
    ParseError,
)

from .exec_exceptions import (
    ExecException,
    SpawnError,
    RedirectError,
)

__all__ = [
    "ConchError",
    "ConfigValidationError",
    # Syntax exceptions
    "SyntaxException",
    "LexError",
    "ParseError",
    # Execution exceptions
    "ExecException",
    "SpawnError",
    "RedirectError",
]
