"""
Execution Exceptions

Exceptions raised while materializing an AST as OS processes.
These abort the subtree being constructed and propagate straight up
through the executor.

Author: Conch Developers
Version: 1.0.0
"""

import os
from typing import Optional, Any

from .base import ConchError


class ExecException(ConchError):
    """
    Base exception for all execution errors.

    Attributes:
        message: Human-readable error description
        errno: OS error number of the underlying failure (if any)
        error_code: Numeric error code for programmatic handling
    """

    def __init__(
        self,
        message: str,
        errno: Optional[int] = None,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code=error_code or 2000, context=context)
        self.errno = errno

    @staticmethod
    def _describe(errno: Optional[int]) -> str:
        if errno is None:
            return "unknown error"
        return os.strerror(errno)


class SpawnError(ExecException):
    """
    A program could not be started.

    Common causes include:
    - Program not found on PATH
    - Permission denied
    - Invalid executable format

    Example:
        >>> raise SpawnError("no-such-program", errno=2)
    """

    def __init__(
        self,
        program: str,
        errno: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        ctx["program"] = program
        super().__init__(
            message=f"{program}: {self._describe(errno)}",
            errno=errno,
            error_code=2001,
            context=ctx
        )
        self.program = program

    def __str__(self) -> str:
        return self.message


class RedirectError(ExecException):
    """
    A redirection target could not be opened.

    The command the redirection applies to is not started.

    Example:
        >>> raise RedirectError("/root/out.txt", errno=13)
    """

    def __init__(
        self,
        path: str,
        errno: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        ctx["path"] = path
        super().__init__(
            message=f"{path}: {self._describe(errno)}",
            errno=errno,
            error_code=2002,
            context=ctx
        )
        self.path = path

    def __str__(self) -> str:
        return self.message
