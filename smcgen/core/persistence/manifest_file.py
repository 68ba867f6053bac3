"""
Manifest persistence — atomic read/write for ProjectManifest.

The manifest is stored as JSON (default .smcgen/project.json). Writes
are atomic (write to temp file, then rename) so an interrupted run
cannot leave a truncated manifest behind.
"""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

from smcgen.core.models.manifest import ProjectManifest

logger = logging.getLogger(__name__)


def load_manifest(path: Path) -> ProjectManifest:
    """Load the manifest from a JSON file.

    Returns:
        ProjectManifest. A missing or unreadable file yields a fresh one.
    """
    if not path.is_file():
        logger.info("No manifest at %s, starting fresh", path)
        return ProjectManifest()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        manifest = ProjectManifest.model_validate(data)
        logger.debug("Loaded manifest from %s (updated_at=%s)", path, manifest.updated_at)
        return manifest
    except json.JSONDecodeError as e:
        logger.warning("Corrupt manifest %s: %s, starting fresh", path, e)
        return ProjectManifest()
    except Exception as e:
        logger.warning("Cannot load manifest from %s: %s, starting fresh", path, e)
        return ProjectManifest()


def save_manifest(manifest: ProjectManifest, path: Path) -> None:
    """Save the manifest to a JSON file (atomic write)."""
    manifest.touch()
    path.parent.mkdir(parents=True, exist_ok=True)

    content = json.dumps(manifest.model_dump(mode="json"), indent=2, ensure_ascii=False) + "\n"

    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".manifest_", suffix=".tmp")
    tmp = Path(tmp_path)
    try:
        with open(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        tmp.replace(path)
        logger.debug("Manifest saved to %s", path)
    except Exception:
        tmp.unlink(missing_ok=True)
        logger.error("Failed to save manifest to %s", path)
        raise
