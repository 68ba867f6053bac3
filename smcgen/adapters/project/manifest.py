"""
Manifest project — a JSON-file-backed host project.

Plays the part of the IDE project when smcgen runs from the command
line. Items nested under an input file are stored relative to the
manifest root; removing one also deletes its file. Changes are kept in
memory until ``save()``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from smcgen.adapters.base import ProjectItem, ProjectReferences, ProjectTree
from smcgen.core.models.manifest import ItemRecord, ProjectManifest, ReferenceRecord
from smcgen.core.persistence.manifest_file import load_manifest, save_manifest

logger = logging.getLogger(__name__)


class ManifestProject(ProjectReferences):
    """A project whose items and references live in a manifest file.

    Args:
        manifest_path: Location of the JSON manifest. Its grandparent
            (the directory holding ``.smcgen/``) is the project root.
    """

    def __init__(self, manifest_path: Path, root: Path | None = None):
        self.manifest_path = manifest_path.resolve()
        self.root = (root or self.manifest_path.parent.parent).resolve()
        self.manifest: ProjectManifest = load_manifest(self.manifest_path)

    def _rel(self, path: Path) -> str:
        return Path(os.path.relpath(path.resolve(), self.root)).as_posix()

    def _abs(self, rel: str) -> Path:
        return self.root / rel

    def tree_for(self, input_path: Path) -> ManifestTree:
        """The child items of one input file."""
        return ManifestTree(self, self._rel(input_path))

    def reference_names(self) -> list[str]:
        return [r.name for r in self.manifest.references]

    def add_reference(self, path: Path, copy_local: bool = True) -> None:
        self.manifest.references.append(
            ReferenceRecord(name=path.stem, path=str(path), copy_local=copy_local)
        )

    def save(self) -> None:
        save_manifest(self.manifest, self.manifest_path)


class ManifestItem(ProjectItem):
    def __init__(self, tree: ManifestTree, record: ItemRecord):
        self._tree = tree
        self.record = record

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def path(self) -> Path:
        return self._tree.project._abs(self.record.path)

    def remove(self) -> None:
        self._tree.records.remove(self.record)
        self.path.unlink(missing_ok=True)
        logger.debug("Removed item %s", self.record.path)


class ManifestTree(ProjectTree):
    def __init__(self, project: ManifestProject, key: str):
        self.project = project
        self.key = key

    @property
    def records(self) -> list[ItemRecord]:
        return self.project.manifest.items_for(self.key)

    def items(self) -> list[ManifestItem]:
        return [ManifestItem(self, r) for r in list(self.records)]

    def add_item(self, path: Path) -> None:
        if not path.is_file():
            raise FileNotFoundError(f"No such file: {path}")
        self.records.append(ItemRecord(name=path.name, path=self.project._rel(path)))
        logger.debug("Added item %s under %s", path.name, self.key)
