"""
Conch Shell Package

Lexer, parser, executor and the read-loop built on them.
"""

from .grammar import Token, TokenType
from .lexer import Lexer, lex
from .parser import Parser, parse
from .executor import Executor, RunResult, ResultKind
from .pipeline import Pipeline, run
from .shell import Shell, create_shell

__all__ = [
    'Token',
    'TokenType',
    'Lexer',
    'lex',
    'Parser',
    'parse',
    'Executor',
    'RunResult',
    'ResultKind',
    'Pipeline',
    'run',
    'Shell',
    'create_shell',
]
