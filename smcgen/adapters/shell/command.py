"""
Shell command adapter — run external tools and capture their output.

This is the single place where smcgen starts child processes. Arguments
are passed as an argv list, never through a shell. Standard output is
drained on a background thread while the calling thread reads standard
error to EOF, so a child that fills one pipe cannot block on the other.
"""

from __future__ import annotations

import logging
import os
import subprocess
import threading
import time
from typing import IO

from smcgen.adapters.base import Invoker
from smcgen.core.errors import LookupToolUnavailableError, ToolNotFoundError
from smcgen.core.models.outcome import InvocationSpec, ProcessOutcome

logger = logging.getLogger(__name__)


def default_lookup_command() -> str:
    """Platform path-lookup command."""
    return "where" if os.name == "nt" else "which"


def _drain(stream: IO[str], sink: list[str]) -> None:
    sink.append(stream.read())


class ProcessInvoker(Invoker):
    """Synchronous process runner.

    Args:
        lookup_command: Executable used by ``command_exists``
            (default: ``which`` on POSIX, ``where`` on Windows).
    """

    def __init__(self, lookup_command: str | None = None):
        self._lookup_command = lookup_command or default_lookup_command()

    @property
    def name(self) -> str:
        return "shell"

    @property
    def lookup_command(self) -> str:
        return self._lookup_command

    def run(self, spec: InvocationSpec) -> ProcessOutcome:
        """Run an invocation to completion."""
        logger.debug("Executing: %s (cwd=%s)", spec.command_line, spec.working_dir)
        start = time.monotonic()

        try:
            proc = subprocess.Popen(
                spec.argv,
                cwd=spec.working_dir,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise ToolNotFoundError(spec.command, str(e)) from e

        stdout_chunks: list[str] = []
        assert proc.stdout is not None and proc.stderr is not None
        drain = threading.Thread(
            target=_drain, args=(proc.stdout, stdout_chunks), daemon=True,
        )
        drain.start()
        try:
            stderr = proc.stderr.read()
            drain.join()
            exit_code = proc.wait()
        finally:
            proc.stdout.close()
            proc.stderr.close()

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug("%s exited with %d after %dms", spec.command, exit_code, elapsed_ms)

        return ProcessOutcome(
            exit_code=exit_code,
            stdout="".join(stdout_chunks),
            stderr=stderr,
        )

    def execute(self, working_dir: str, command: str, args: list[str]) -> ProcessOutcome:
        return self.run(
            InvocationSpec(working_dir=str(working_dir), command=command, args=list(args))
        )

    def command_exists(self, name: str) -> bool:
        """Ask the platform lookup command whether ``name`` is on the path.

        Raises:
            LookupToolUnavailableError: The lookup command itself
                could not be started.
        """
        try:
            result = subprocess.run(
                [self._lookup_command, name],
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise LookupToolUnavailableError(self._lookup_command) from e

        found = result.returncode == 0
        logger.debug("Lookup %s: %s", name, "found" if found else "not found")
        return found
