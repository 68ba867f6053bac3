"""
Artifact reconciliation — keep the project tree in step with the disk.

After a run, the set of artifacts that should be tracked under the
input file is known. Reconciliation removes tracked items that are no
longer produced, adds produced files that are not yet tracked, and
leaves everything else alone. Running it twice is a no-op the second
time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from smcgen.adapters.base import GenerationSink, ProjectReferences, ProjectTree

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """What reconciliation did to the tree."""

    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    kept: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)

    def to_dict(self) -> dict:
        return {"added": self.added, "removed": self.removed, "kept": self.kept}


def reconcile_artifacts(
    tree: ProjectTree,
    directory: Path,
    desired: set[str] | frozenset[str],
    sink: GenerationSink | None = None,
) -> ReconcileResult:
    """Make the tree's items match ``desired`` by name.

    Args:
        tree: The input file's child items.
        directory: Where the desired files live on disk.
        desired: Artifact file names that should be tracked.
        sink: Receives a warning for each add/remove that fails.
    """
    result = ReconcileResult()
    present: set[str] = set()

    for item in list(tree.items()):
        if item.name in desired:
            present.add(item.name)
            result.kept.append(item.name)
            continue
        try:
            item.remove()
        except OSError as e:
            if sink is not None:
                sink.report_warning(f"Cannot remove project item {item.name}: {e}")
            continue
        result.removed.append(item.name)

    for name in sorted(desired - present):
        try:
            tree.add_item(directory / name)
        except OSError as e:
            if sink is not None:
                sink.report_warning(f"Cannot add project item {name}: {e}")
            continue
        result.added.append(name)

    if result.changed:
        logger.info("Reconciled %s: +%s -%s", directory, result.added, result.removed)
    return result


def ensure_reference(
    references: ProjectReferences,
    name: str,
    library_path: Path,
    sink: GenerationSink,
) -> bool:
    """Add a copy-local reference to the runtime library if it is missing.

    Any failure is downgraded to a warning: missing generated code is
    worse than a missing reference and must not be masked by it.

    Returns:
        True when a reference was added.
    """
    try:
        if not library_path.is_file():
            raise FileNotFoundError(f"Missing installed file: {library_path}")

        existing = {n.casefold() for n in references.reference_names() if n}
        if name.casefold() in existing:
            return False

        references.add_reference(library_path, copy_local=True)
        logger.info("Added reference %s -> %s", name, library_path)
        return True
    except Exception as e:
        sink.report_warning(f"Failed to add reference to {library_path.name}: {e}")
        return False
