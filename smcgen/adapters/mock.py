"""
Mock adapters — in-memory test doubles for every host capability.

Used by the test suite and by embedders who want to drive the pipeline
without a real host project or real external tools. Every double keeps
a log of what it received.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

from smcgen.adapters.base import (
    GenerationSink,
    Invoker,
    ProjectItem,
    ProjectReferences,
    ProjectTree,
)
from smcgen.core.models.outcome import InvocationSpec, ProcessOutcome

Handler = Callable[[InvocationSpec], ProcessOutcome]


class RecordingSink(GenerationSink):
    """Collects generated lines, errors and warnings."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.errors: list[tuple[str, int | None]] = []
        self.warnings: list[str] = []

    @property
    def output(self) -> str:
        return "".join(f"{line}\n" for line in self.lines)

    def append_output(self, line: str) -> None:
        self.lines.append(line)

    def report_error(self, message: str, line: int | None = None) -> None:
        self.errors.append((message, line))

    def report_warning(self, message: str) -> None:
        self.warnings.append(message)


class MemoryItem(ProjectItem):
    def __init__(self, tree: MemoryProjectTree, path: Path):
        self._tree = tree
        self.path = path

    @property
    def name(self) -> str:
        return self.path.name

    def remove(self) -> None:
        self._tree._remove(self)
        self.path.unlink(missing_ok=True)


class MemoryProjectTree(ProjectTree):
    """Project tree held in a list. Counts every mutation."""

    def __init__(self, paths: Iterable[Path] = ()):
        self._items: list[MemoryItem] = [MemoryItem(self, Path(p)) for p in paths]
        self.add_count = 0
        self.remove_count = 0

    @property
    def names(self) -> set[str]:
        return {i.name for i in self._items}

    def items(self) -> list[MemoryItem]:
        return list(self._items)

    def add_item(self, path: Path) -> None:
        self._items.append(MemoryItem(self, Path(path)))
        self.add_count += 1

    def _remove(self, item: MemoryItem) -> None:
        self._items.remove(item)
        self.remove_count += 1


class MemoryReferences(ProjectReferences):
    def __init__(self, names: Iterable[str] = (), fail_with: Exception | None = None):
        self._names = list(names)
        self._fail_with = fail_with
        self.added: list[tuple[Path, bool]] = []

    def reference_names(self) -> list[str]:
        if self._fail_with is not None:
            raise self._fail_with
        return list(self._names)

    def add_reference(self, path: Path, copy_local: bool = True) -> None:
        self.added.append((Path(path), copy_local))
        self._names.append(Path(path).stem)


class MockInvoker(Invoker):
    """Scripted process runner.

    By default every command exits 0 with no output and no command is
    on the path. Register a handler per command name to simulate a
    tool, e.g. one that writes files into its working directory.
    """

    def __init__(self, available: Iterable[str] = ()):
        self._available = set(available)
        self._handlers: dict[str, Handler] = {}
        self._call_log: list[InvocationSpec] = []

    @property
    def call_log(self) -> list[InvocationSpec]:
        """Every invocation this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def calls_to(self, command: str) -> list[InvocationSpec]:
        return [c for c in self._call_log if c.command == command]

    def on(self, command: str, handler: Handler) -> None:
        """Set the handler for a command."""
        self._handlers[command] = handler

    def set_available(self, command: str, available: bool = True) -> None:
        if available:
            self._available.add(command)
        else:
            self._available.discard(command)

    def execute(self, working_dir: str, command: str, args: list[str]) -> ProcessOutcome:
        spec = InvocationSpec(working_dir=str(working_dir), command=command, args=list(args))
        self._call_log.append(spec)
        handler = self._handlers.get(command)
        if handler is None:
            return ProcessOutcome(exit_code=0)
        return handler(spec)

    def command_exists(self, name: str) -> bool:
        return name in self._available

    def reset(self) -> None:
        """Clear call log and handlers."""
        self._call_log.clear()
        self._handlers.clear()

