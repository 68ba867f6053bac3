"""
Adapter base — the capability contracts between the pipeline and its host.

The pipeline never depends on a concrete host type. It talks to:

    - a GenerationSink: where generated code, errors and warnings go
    - a ProjectTree: the items nested under the input file
    - a ProjectReferences: the project's library references
    - an Invoker: runs external processes

Concrete adapters live in smcgen.adapters.shell (processes),
smcgen.adapters.project (file-backed project) and smcgen.adapters.mock
(in-memory test doubles).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path

from smcgen.core.models.outcome import ProcessOutcome


class GenerationSink(ABC):
    """Output and reporting channels supplied by the host."""

    @abstractmethod
    def append_output(self, line: str) -> None:
        """Append one line of generated code."""

    @abstractmethod
    def report_error(self, message: str, line: int | None = None) -> None:
        """Report an error, optionally at a 0-based input line."""

    @abstractmethod
    def report_warning(self, message: str) -> None:
        """Report a non-fatal warning."""


class ProjectItem(ABC):
    """One tracked item in the project tree."""

    @property
    @abstractmethod
    def name(self) -> str:
        """File name of the item (no directory)."""

    @abstractmethod
    def remove(self) -> None:
        """Drop the item from the tree and delete its backing file."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class ProjectTree(ABC):
    """The child items of the input file in the host project."""

    @abstractmethod
    def items(self) -> Iterable[ProjectItem]:
        """Enumerate current child items."""

    @abstractmethod
    def add_item(self, path: Path) -> None:
        """Start tracking an existing file as a child item."""


class ProjectReferences(ABC):
    """Library references held by the host project."""

    @abstractmethod
    def reference_names(self) -> list[str]:
        """Names of referenced libraries (no extension)."""

    @abstractmethod
    def add_reference(self, path: Path, copy_local: bool = True) -> None:
        """Add a reference to the library at ``path``."""


class Invoker(ABC):
    """Runs external processes synchronously."""

    @abstractmethod
    def execute(self, working_dir: str, command: str, args: list[str]) -> ProcessOutcome:
        """Run ``command`` to completion and capture its output.

        A nonzero exit is a normal outcome. Raises ProcessLaunchError
        only when the executable cannot be started.
        """

    @abstractmethod
    def command_exists(self, name: str) -> bool:
        """Whether ``name`` is resolvable on the execution path."""
