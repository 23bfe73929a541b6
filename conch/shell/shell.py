"""
Conch Shell Module

The interactive read-loop around the interpreter. It owns prompting,
reading and reporting; all parsing and execution happens in Pipeline.

Author: Conch Developers
Version: 1.0.0
"""

import sys
from typing import Optional, TextIO

from .executor import RunResult
from .pipeline import Pipeline
from conch.core.config_loader import ShellConfig, get_config
from conch.exceptions import ConchError
from conch.logger import get_logger


EXIT_ERROR = 1


class Shell:
    """
    Conch read-loop.

    Example:
        >>> shell = Shell()
        >>> shell.run()
    """

    def __init__(
        self,
        config: Optional[ShellConfig] = None,
        pipeline: Optional[Pipeline] = None,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None
    ):
        self._config = config or get_config().shell
        self._pipeline = pipeline or Pipeline()
        self._logger = get_logger('shell')
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._stderr = stderr or sys.stderr
        self._running = False
        self._last_status = 0

    @property
    def last_status(self) -> int:
        return self._last_status

    @property
    def running(self) -> bool:
        return self._running

    def run(self) -> int:
        """
        Run the interactive loop until EOF or ``exit``.

        Returns:
            Status of the last line run
        """
        self._running = True

        while self._running:
            self._write(self._stdout, self._config.prompt)

            try:
                line = self._stdin.readline()
            except KeyboardInterrupt:
                self._write(self._stdout, "^C\n")
                continue

            if not line:
                self._write(self._stdout, "\n")
                break

            if line.strip() == 'exit':
                break

            self.run_line(line)

            if self._config.exit_on_error and self._last_status != 0:
                break

        self._running = False
        return self._last_status

    def run_line(self, line: str) -> Optional[RunResult]:
        """
        Run one line and report its outcome.

        Blank lines and comments are skipped and return None, as do lines
        that fail with an error; the error is printed instead.
        """
        line = line.strip()

        if not line or line.startswith('#'):
            return None

        try:
            result = self._pipeline.run(line)
        except ConchError as e:
            self._logger.debug(f"line failed: {e!r}")
            self._write(self._stderr, f"conch: {e}\n")
            self._last_status = EXIT_ERROR
            return None

        self._last_status = result.status
        self._report(result)
        return result

    def run_script(self, script: str) -> int:
        """
        Run a script line by line.

        Returns:
            Status of the last line run
        """
        for line in script.splitlines():
            self.run_line(line)
            if self._config.exit_on_error and self._last_status != 0:
                break

        return self._last_status

    def stop(self) -> None:
        """Stop the loop after the current line."""
        self._running = False

    def _report(self, result: RunResult) -> None:
        if result.background:
            self._write(self._stderr, "[detached]\n")
        elif result.signal is not None:
            self._write(self._stderr, f"conch: terminated by signal {result.signal}\n")
        elif not result.success and self._config.report_nonzero_status:
            self._write(self._stderr, f"conch: exit status {result.exit_code}\n")

    @staticmethod
    def _write(stream: TextIO, text: str) -> None:
        stream.write(text)
        stream.flush()


def create_shell(config: Optional[ShellConfig] = None) -> Shell:
    """Factory function to create a shell."""
    return Shell(config)
