"""
Workspace management — the scratch directory of one generation run.

A workspace is a temporary marker file plus a sibling directory named
``<marker>_dir``. Tools write their output into the directory; the
pipeline picks the artifacts up from there. Housekeeping failures are
reported as warnings and never abort the run.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from smcgen.adapters.base import GenerationSink
from smcgen.core.errors import WorkspaceError

logger = logging.getLogger(__name__)

WORKSPACE_SUFFIX = "_dir"


@dataclass(frozen=True)
class Workspace:
    marker: Path
    path: Path

    def __str__(self) -> str:
        return str(self.path)


def create_workspace(base_dir: Path | None = None) -> Workspace:
    """Create a uniquely named scratch directory.

    Raises:
        WorkspaceError: Neither the marker file nor the directory
            could be created.
    """
    try:
        fd, marker = tempfile.mkstemp(prefix="smcgen_", dir=base_dir)
        os.close(fd)
    except OSError as e:
        raise WorkspaceError(f"Cannot create temporary file: {e}") from e

    path = Path(marker + WORKSPACE_SUFFIX)
    try:
        path.mkdir()
    except OSError as e:
        Path(marker).unlink(missing_ok=True)
        raise WorkspaceError(f"Cannot create workspace {path}: {e}") from e

    logger.debug("Workspace created: %s", path)
    return Workspace(marker=Path(marker), path=path.resolve())


def list_artifacts(workspace: Workspace, pattern: str) -> set[str]:
    """Names of the files directly inside the workspace matching ``pattern``."""
    return {p.name for p in workspace.path.glob(pattern) if p.is_file()}


def resolve_single_artifact(
    workspace: Workspace, pattern: str, sink: GenerationSink,
) -> str | None:
    """The one file matching ``pattern``, or None after reporting an error.

    A tool that exits cleanly must leave exactly one such file behind.
    """
    names = list_artifacts(workspace, pattern)
    if not names:
        sink.report_error(f"no output produced ({pattern}) although the tool reported no error")
        return None
    if len(names) > 1:
        sink.report_error(f"ambiguous output, {len(names)} files match {pattern}")
        return None
    return names.pop()


def _delete_file(path: Path, sink: GenerationSink) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.debug("Delete failed: %s (%s)", path, e)
        sink.report_warning(f"Cannot delete {path}: {e}")


def clear_workspace(workspace: Workspace, sink: GenerationSink) -> None:
    """Delete every file directly inside the workspace (non-recursive)."""
    try:
        entries = list(workspace.path.iterdir())
    except OSError as e:
        sink.report_warning(f"Cannot list workspace {workspace.path}: {e}")
        return

    for entry in entries:
        if entry.is_dir() and not entry.is_symlink():
            continue
        _delete_file(entry, sink)


def destroy_workspace(workspace: Workspace, sink: GenerationSink) -> None:
    """Remove the directory tree and the marker file."""
    if workspace.path.exists():
        try:
            shutil.rmtree(workspace.path)
        except OSError as e:
            sink.report_warning(f"Cannot remove workspace {workspace.path}: {e}")
    _delete_file(workspace.marker, sink)
    logger.debug("Workspace destroyed: %s", workspace.path)


@contextmanager
def scoped_workspace(sink: GenerationSink, base_dir: Path | None = None) -> Iterator[Workspace]:
    """Acquire a workspace; clear and destroy it on every exit path."""
    workspace = create_workspace(base_dir)
    try:
        yield workspace
    finally:
        clear_workspace(workspace, sink)
        destroy_workspace(workspace, sink)
