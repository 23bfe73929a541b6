"""
AST Module

Syntax tree node types built by the parser and walked by the executor.
Nodes are immutable and compare structurally; a parent owns its
children outright.

Author: Conch Developers
Version: 1.0.0
"""

from dataclasses import dataclass
from typing import Tuple, Union

from .grammar import Token, TokenType


@dataclass(frozen=True)
class Command:
    """A program with its arguments."""
    program: Token
    args: Tuple[Token, ...] = ()

    def __post_init__(self):
        if self.program.type is not TokenType.WORD or not self.program.value:
            raise ValueError(f"Invalid program token: {self.program!r}")

    @property
    def argv(self) -> list[str]:
        return [self.program.value] + [arg.value for arg in self.args]


@dataclass(frozen=True)
class Pipe:
    """left | right"""
    left: 'Node'
    right: 'Node'


@dataclass(frozen=True)
class And:
    """left && right"""
    left: 'Node'
    right: 'Node'


@dataclass(frozen=True)
class Or:
    """left || right"""
    left: 'Node'
    right: 'Node'


@dataclass(frozen=True)
class Sequence:
    """left ; right  (right may be Empty)"""
    left: 'Node'
    right: 'Node'


@dataclass(frozen=True)
class RedirectOut:
    """left > target"""
    left: 'Node'
    target: Token


@dataclass(frozen=True)
class RedirectAppend:
    """left >> target"""
    left: 'Node'
    target: Token


@dataclass(frozen=True)
class RedirectIn:
    """left < source"""
    left: 'Node'
    source: Token


@dataclass(frozen=True)
class Subshell:
    """( inner )"""
    inner: 'Node'


@dataclass(frozen=True)
class Background:
    """inner &"""
    inner: 'Node'


@dataclass(frozen=True)
class Empty:
    """Nothing to run, as after a trailing ';'."""


Node = Union[
    Command, Pipe, And, Or, Sequence,
    RedirectOut, RedirectAppend, RedirectIn,
    Subshell, Background, Empty,
]


def walk(node: Node):
    """Yield every node of the tree, parents before children."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        if isinstance(current, (Pipe, And, Or, Sequence)):
            stack.append(current.right)
            stack.append(current.left)
        elif isinstance(current, (RedirectOut, RedirectAppend, RedirectIn)):
            stack.append(current.left)
        elif isinstance(current, (Subshell, Background)):
            stack.append(current.inner)
