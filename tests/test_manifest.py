"""
Tests for the manifest-backed project and its persistence.
"""

import json
from pathlib import Path

import pytest

from smcgen.adapters.project.manifest import ManifestProject
from smcgen.core.models.manifest import ItemRecord, ProjectManifest
from smcgen.core.persistence.manifest_file import load_manifest, save_manifest
from smcgen.core.services.reconcile import reconcile_artifacts


class TestManifestFile:
    def test_save_and_load(self, tmp_path: Path):
        path = tmp_path / ".smcgen" / "project.json"
        manifest = ProjectManifest()
        manifest.items_for("Turnstile.sm").append(ItemRecord(name="Turnstile.dot", path="Turnstile.dot"))

        save_manifest(manifest, path)
        loaded = load_manifest(path)

        assert loaded.items["Turnstile.sm"][0].name == "Turnstile.dot"
        assert loaded.schema_version == 1

    def test_load_missing_returns_fresh(self, tmp_path: Path):
        manifest = load_manifest(tmp_path / "nope.json")
        assert manifest.items == {}
        assert manifest.references == []

    def test_load_corrupt_returns_fresh(self, tmp_path: Path):
        path = tmp_path / "project.json"
        path.write_text("{{{ not json")
        assert load_manifest(path).items == {}

    def test_save_is_atomic_and_readable(self, tmp_path: Path):
        path = tmp_path / "project.json"
        save_manifest(ProjectManifest(), path)
        assert json.loads(path.read_text())["schema_version"] == 1
        assert list(tmp_path.glob(".manifest_*.tmp")) == []


class TestManifestProject:
    def _project(self, root: Path) -> ManifestProject:
        return ManifestProject(root / ".smcgen" / "project.json")

    def test_root_is_manifest_grandparent(self, tmp_path: Path):
        assert self._project(tmp_path).root == tmp_path.resolve()

    def test_add_and_enumerate(self, tmp_path: Path):
        (tmp_path / "Turnstile.dot").write_text("digraph {}")
        project = self._project(tmp_path)
        tree = project.tree_for(tmp_path / "Turnstile.sm")

        tree.add_item(tmp_path / "Turnstile.dot")

        assert [i.name for i in tree.items()] == ["Turnstile.dot"]
        assert project.manifest.items["Turnstile.sm"][0].path == "Turnstile.dot"

    def test_add_missing_file_raises(self, tmp_path: Path):
        tree = self._project(tmp_path).tree_for(tmp_path / "Turnstile.sm")
        with pytest.raises(FileNotFoundError):
            tree.add_item(tmp_path / "missing.dot")

    def test_remove_deletes_backing_file(self, tmp_path: Path):
        dot = tmp_path / "Turnstile.dot"
        dot.write_text("digraph {}")
        project = self._project(tmp_path)
        tree = project.tree_for(tmp_path / "Turnstile.sm")
        tree.add_item(dot)

        tree.items()[0].remove()

        assert tree.items() == []
        assert not dot.exists()

    def test_items_are_per_input(self, tmp_path: Path):
        (tmp_path / "A.dot").write_text("")
        project = self._project(tmp_path)
        project.tree_for(tmp_path / "A.sm").add_item(tmp_path / "A.dot")
        assert project.tree_for(tmp_path / "B.sm").items() == []

    def test_persists_across_instances(self, tmp_path: Path):
        (tmp_path / "T.dot").write_text("")
        dll = tmp_path / "statemap.dll"
        project = self._project(tmp_path)
        project.tree_for(tmp_path / "T.sm").add_item(tmp_path / "T.dot")
        project.add_reference(dll)
        project.save()

        reopened = self._project(tmp_path)
        assert [i.name for i in reopened.tree_for(tmp_path / "T.sm").items()] == ["T.dot"]
        assert reopened.reference_names() == ["statemap"]
        assert reopened.manifest.references[0].copy_local is True

    def test_reconcile_through_manifest_is_idempotent(self, tmp_path: Path):
        for name in ("T.dot", "T.svg", "T.png"):
            (tmp_path / name).write_text("")
        project = self._project(tmp_path)
        tree = project.tree_for(tmp_path / "T.sm")
        tree.add_item(tmp_path / "T.png")

        first = reconcile_artifacts(tree, tmp_path, {"T.dot", "T.svg"})
        second = reconcile_artifacts(tree, tmp_path, {"T.dot", "T.svg"})

        assert first.removed == ["T.png"]
        assert sorted(first.added) == ["T.dot", "T.svg"]
        assert not second.changed
        assert {i.name for i in tree.items()} == {"T.dot", "T.svg"}
