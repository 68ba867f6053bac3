"""
Exception hierarchy.

Tool-level problems (diagnostics, wrong artifact counts, cleanup
failures) are never raised: they travel through the generation sink.
Only the conditions below escape as exceptions.
"""

from __future__ import annotations


class SmcgenError(Exception):
    """Base class for every error raised by smcgen."""


class ConfigError(SmcgenError):
    """Raised when smcgen.yml is invalid or unreadable."""


class ProcessLaunchError(SmcgenError):
    """Raised when an external process cannot be started at all."""


class ToolNotFoundError(ProcessLaunchError):
    """The executable could not be located or started."""

    def __init__(self, command: str, reason: str = ""):
        self.command = command
        detail = f": {reason}" if reason else ""
        super().__init__(f"Cannot start '{command}'{detail}")


class LookupToolUnavailableError(ProcessLaunchError):
    """The platform path-lookup command (which/where) itself is missing."""

    def __init__(self, lookup_command: str):
        self.lookup_command = lookup_command
        super().__init__(f"path-lookup tool unavailable: '{lookup_command}' is not on path")


class WorkspaceError(SmcgenError):
    """Raised when the scratch workspace cannot be created."""
