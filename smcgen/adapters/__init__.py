"""Adapters — host capabilities and external tool bindings.

Public re-exports for convenient access.
"""

from smcgen.adapters.base import (
    GenerationSink,
    Invoker,
    ProjectItem,
    ProjectReferences,
    ProjectTree,
)
from smcgen.adapters.mock import (
    MemoryProjectTree,
    MemoryReferences,
    MockInvoker,
    RecordingSink,
)
from smcgen.adapters.shell.command import ProcessInvoker

__all__ = [
    "GenerationSink",
    "Invoker",
    "MemoryProjectTree",
    "MemoryReferences",
    "MockInvoker",
    "ProcessInvoker",
    "ProjectItem",
    "ProjectReferences",
    "ProjectTree",
    "RecordingSink",
]
