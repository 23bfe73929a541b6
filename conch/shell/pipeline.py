"""
Pipeline Module

Runs one command line through the three interpreter stages:
text -> tokens -> syntax tree -> processes -> result.

Author: Conch Developers
Version: 1.0.0
"""

from typing import Optional

from .executor import Executor, RunResult
from .lexer import Lexer
from .parser import Parser
from conch.core.config_loader import ExecutorConfig


class Pipeline:
    """
    Lex, parse and execute command lines.

    Lex and parse errors are raised before any process is spawned, so a
    malformed line never runs partially.

    Example:
        >>> Pipeline().run("echo foo | cat > out.txt").success
        True
    """

    def __init__(self, config: Optional[ExecutorConfig] = None):
        self._executor = Executor(config)

    @property
    def executor(self) -> Executor:
        return self._executor

    def run(self, line: str) -> RunResult:
        """
        Run one command line.

        Raises:
            LexError: Malformed operator sequence
            ParseError: Line does not form a command
            SpawnError: A program could not be started
            RedirectError: A redirection target could not be opened
        """
        tokens = Lexer.lex(line)
        ast = Parser.parse(tokens)
        return self._executor.execute(ast)


def run(line: str) -> RunResult:
    """Run one command line with the current configuration."""
    return Pipeline().run(line)
