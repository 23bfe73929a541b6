"""
Executor Module

Materializes a syntax tree as OS processes.

Every recursive step receives an explicit pair of stream overrides
(``stdin``, ``stdout``: file descriptors, or None for the inherited
streams). A node either hands the overrides it was given to its
children or opens new descriptors for its subtree; the executor closes
every descriptor it opened as soon as the children have inherited it.
Leaving a pipe write end open in this process would keep the reader
from ever seeing end of input.

Subtrees that wait between steps (``&&``, ``||``, ``;``) are driven by
a forked copy of this process wherever the caller must not wait: on
either side of a pipe, and under ``&``.

Author: Conch Developers
Version: 1.0.0
"""

import os
import subprocess
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, List, Union

from .ast import (
    Node, Command, Pipe, And, Or, Sequence,
    RedirectOut, RedirectAppend, RedirectIn,
    Subshell, Background, Empty, walk,
)
from conch.core.config_loader import ExecutorConfig, get_config
from conch.exceptions import ConchError, SpawnError, RedirectError
from conch.logger import get_logger


class ResultKind(Enum):
    """How a command line finished."""
    FOREGROUND = auto()
    """Waited on to completion."""

    BACKGROUND = auto()
    """Detached without waiting."""


@dataclass(frozen=True)
class RunResult:
    """
    Outcome of executing one command line.

    Attributes:
        kind: Foreground completion or background detachment
        exit_code: Exit code, or None if killed by a signal or detached
        signal: Signal number that killed the process, if any
    """
    kind: ResultKind
    exit_code: Optional[int] = None
    signal: Optional[int] = None

    @classmethod
    def from_returncode(cls, returncode: int) -> 'RunResult':
        """Build a foreground result from a Popen return code."""
        if returncode < 0:
            return cls(ResultKind.FOREGROUND, exit_code=None, signal=-returncode)
        return cls(ResultKind.FOREGROUND, exit_code=returncode)

    @classmethod
    def detached(cls) -> 'RunResult':
        return cls(ResultKind.BACKGROUND)

    @property
    def background(self) -> bool:
        return self.kind is ResultKind.BACKGROUND

    @property
    def success(self) -> bool:
        """True for exit code 0, and for a successful detachment."""
        if self.background:
            return True
        return self.exit_code == 0

    @property
    def status(self) -> int:
        """Shell-style status: exit code, or 128 + signal."""
        if self.background:
            return 0
        if self.exit_code is None:
            return 128 + (self.signal or 0)
        return self.exit_code


class ForkedJob:
    """
    A forked copy of this process driving one subtree.

    Offers the part of the ``subprocess.Popen`` interface the executor
    uses: ``pid``, ``returncode`` and ``wait()``.
    """

    def __init__(self, pid: int):
        self.pid = pid
        self.returncode: Optional[int] = None

    def wait(self) -> int:
        if self.returncode is None:
            _, status = os.waitpid(self.pid, 0)
            self.returncode = os.waitstatus_to_exitcode(status)
        return self.returncode


# Processes spawned for one subtree; the last one carries its status.
# An empty list means the subtree was detached.
Processes = List[Union[subprocess.Popen, ForkedJob]]


def _waits(node: Node) -> bool:
    """True if spawning ``node`` blocks on some of its own processes."""
    if isinstance(node, (And, Or)):
        return True
    if isinstance(node, Sequence):
        return not isinstance(node.right, Empty) or _waits(node.left)
    if isinstance(node, (RedirectOut, RedirectAppend, RedirectIn)):
        return _waits(node.left)
    if isinstance(node, Subshell):
        return _waits(node.inner)
    # Pipes fork their blocking sides; background never blocks
    return False


class Executor:
    """
    Process orchestrator.

    Holds configuration only: each ``execute`` call is independent and
    keeps no handle once it returns.

    Example:
        >>> executor = Executor()
        >>> executor.execute(Parser.parse(Lexer.lex("false || echo foo")))
        RunResult(kind=<ResultKind.FOREGROUND: 1>, exit_code=0, signal=None)
    """

    def __init__(self, config: Optional[ExecutorConfig] = None):
        self._config = config or get_config().executor
        self._logger = get_logger('executor')

    @property
    def config(self) -> ExecutorConfig:
        return self._config

    def execute(self, node: Node) -> RunResult:
        """
        Run a syntax tree and wait for its foreground part.

        Args:
            node: Root of the tree

        Returns:
            Foreground status, or a detachment marker

        Raises:
            SpawnError: If a program cannot be started
            RedirectError: If a redirection target cannot be opened
        """
        processes = self._spawn(node, None, None)

        if not processes:
            return RunResult.detached()

        last = self._wait_all(processes)
        result = RunResult.from_returncode(last.returncode)
        self._logger.debug(
            "line finished",
            pid=last.pid,
            context={'exit_code': result.exit_code, 'signal': result.signal}
        )
        return result

    def _spawn(
        self,
        node: Node,
        stdin: Optional[int],
        stdout: Optional[int],
        background: bool = False
    ) -> Processes:
        """Spawn the processes of ``node`` with the given stream overrides."""
        if isinstance(node, Command):
            return [self._spawn_command(node, stdin, stdout, background)]

        if isinstance(node, Pipe):
            return self._spawn_pipe(node, stdin, stdout, background)

        if isinstance(node, RedirectOut):
            flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
            fd = self._open(node.target.value, flags)
            try:
                return self._spawn(node.left, stdin, fd, background)
            finally:
                os.close(fd)

        if isinstance(node, RedirectAppend):
            flags = os.O_WRONLY | os.O_CREAT | os.O_APPEND
            fd = self._open(node.target.value, flags)
            try:
                return self._spawn(node.left, stdin, fd, background)
            finally:
                os.close(fd)

        if isinstance(node, RedirectIn):
            fd = self._open(node.source.value, os.O_RDONLY)
            try:
                return self._spawn(node.left, fd, stdout, background)
            finally:
                os.close(fd)

        if isinstance(node, And):
            left = self._spawn(node.left, stdin, stdout, background)
            if self._succeeded(left):
                return self._spawn(node.right, stdin, stdout, background)
            return left

        if isinstance(node, Or):
            left = self._spawn(node.left, stdin, stdout, background)
            if not self._succeeded(left):
                return self._spawn(node.right, stdin, stdout, background)
            return left

        if isinstance(node, Sequence):
            if isinstance(node.right, Empty):
                return self._spawn(node.left, stdin, stdout, background)
            self._wait_all(self._spawn(node.left, stdin, stdout, background))
            return self._spawn(node.right, stdin, stdout, background)

        if isinstance(node, Subshell):
            return self._spawn(node.inner, stdin, stdout, background)

        if isinstance(node, Background):
            self._detach(node.inner, stdin, stdout)
            return []

        if isinstance(node, Empty):
            raise ValueError("Empty node has nothing to run")

        raise TypeError(f"Unknown node type: {type(node).__name__}")

    def _spawn_command(
        self,
        node: Command,
        stdin: Optional[int],
        stdout: Optional[int],
        background: bool
    ) -> subprocess.Popen:
        argv = node.argv

        try:
            process = subprocess.Popen(
                argv,
                stdin=stdin,
                stdout=stdout,
                close_fds=self._config.close_fds,
                start_new_session=background and self._config.background_new_session,
            )
        except OSError as e:
            self._logger.debug(
                f"spawn failed: {e}",
                context={'program': argv[0]}
            )
            raise SpawnError(argv[0], errno=e.errno) from e

        self._logger.debug(
            "spawned",
            pid=process.pid,
            context={'argv': argv, 'background': background}
        )
        return process

    def _spawn_pipe(
        self,
        node: Pipe,
        stdin: Optional[int],
        stdout: Optional[int],
        background: bool
    ) -> Processes:
        read_fd, write_fd = os.pipe()

        try:
            left = self._spawn_side(node.left, stdin, write_fd, background)
        except BaseException:
            os.close(read_fd)
            raise
        finally:
            os.close(write_fd)

        try:
            right = self._spawn_side(node.right, read_fd, stdout, background)
        finally:
            os.close(read_fd)

        return left + right

    def _spawn_side(
        self,
        node: Node,
        stdin: Optional[int],
        stdout: Optional[int],
        background: bool
    ) -> Processes:
        """Spawn one side of a pipe without blocking on it."""
        if _waits(node):
            return [self._fork(node, stdin, stdout, background)]
        return self._spawn(node, stdin, stdout, background)

    def _open(self, path: str, flags: int) -> int:
        try:
            return os.open(path, flags, self._config.file_mode)
        except OSError as e:
            raise RedirectError(path, errno=e.errno) from e

    def _detach(
        self,
        inner: Node,
        stdin: Optional[int],
        stdout: Optional[int]
    ) -> None:
        """
        Start ``inner`` without waiting for it.

        Trees that only spawn are started right here, so their spawn
        errors still reach the caller. Trees with ``&&``, ``||`` or
        ``;`` wait between steps; a forked job orphaned to init drives
        them, so they outlive this process.
        """
        if not any(isinstance(n, (And, Or, Sequence)) for n in walk(inner)):
            processes = self._spawn(inner, stdin, stdout, background=True)
            self._logger.debug(
                "detached",
                context={'pids': [p.pid for p in processes]}
            )
            return

        job = self._fork(inner, stdin, stdout, background=True, detach=True)
        job.wait()
        self._logger.debug("detached", pid=job.pid)

    def _fork(
        self,
        node: Node,
        stdin: Optional[int],
        stdout: Optional[int],
        background: bool,
        detach: bool = False
    ) -> ForkedJob:
        """
        Drive ``node`` in a forked copy of this process.

        The job exits with the subtree's shell-style status. With
        ``detach`` the forked copy forks once more and exits at once,
        leaving the grandchild to run the subtree with no parent to
        wait for it.
        """
        pid = os.fork()
        if pid == 0:
            self._run_forked(node, stdin, stdout, background, detach)

        self._logger.debug(
            "forked",
            pid=pid,
            context={'background': background, 'detach': detach}
        )
        return ForkedJob(pid)

    def _run_forked(
        self,
        node: Node,
        stdin: Optional[int],
        stdout: Optional[int],
        background: bool,
        detach: bool
    ) -> None:
        """Body of a forked job; never returns."""
        status = 1
        try:
            if background and self._config.background_new_session:
                os.setsid()
            if detach and os.fork() != 0:
                os._exit(0)

            last = self._wait_all(self._spawn(node, stdin, stdout, background))
            status = RunResult.from_returncode(last.returncode).status if last else 0
        except ConchError as e:
            self._logger.error(f"job failed: {e}")
        except BaseException as e:
            self._logger.exception("job crashed", exc=e)
        finally:
            os._exit(status)

    def _wait_all(
        self,
        processes: Processes
    ) -> Optional[Union[subprocess.Popen, ForkedJob]]:
        """Wait for every process; return the last one."""
        for process in processes:
            process.wait()
            self._logger.debug(
                "reaped",
                pid=process.pid,
                context={'returncode': process.returncode}
            )
        return processes[-1] if processes else None

    def _succeeded(self, processes: Processes) -> bool:
        """Wait for a left operand; a detached one counts as success."""
        last = self._wait_all(processes)
        if last is None:
            return True
        return last.returncode == 0
