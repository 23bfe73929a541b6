"""
Conch - a small command-line interpreter

Turns a line of shell-like text into OS processes connected by pipes,
redirections and the && || ; & ( ) operators.
"""

__version__ = "1.0.0"
__author__ = "Conch Developers"

from .shell.pipeline import Pipeline, run
from .shell.executor import RunResult, ResultKind
from .shell.shell import Shell, create_shell

__all__ = [
    'Pipeline',
    'run',
    'RunResult',
    'ResultKind',
    'Shell',
    'create_shell',
]
