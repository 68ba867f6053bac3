"""
Invocation and outcome models — the process execution contract.

An InvocationSpec describes one external process call. A ProcessOutcome
is what came back. A nonzero exit code is a normal outcome, not an
exception: callers decide what it means.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


def quote_args(args: list[str]) -> str:
    """Render arguments individually double-quoted, space separated."""
    return " ".join(f'"{a}"' for a in args)


class InvocationSpec(BaseModel):
    """One external process call: where, what, and with which arguments."""

    model_config = ConfigDict(frozen=True)

    working_dir: str
    command: str
    args: list[str] = Field(default_factory=list)

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args]

    @property
    def command_line(self) -> str:
        """Display form, used for logging only."""
        return f"{self.command} {quote_args(self.args)}".rstrip()


class ProcessOutcome(BaseModel):
    """Result of a completed external process.

    Created once per invocation and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        """Whether the process exited with status 0."""
        return self.exit_code == 0
