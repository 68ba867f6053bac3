"""
ProjectManifest — the file-backed stand-in for a host project.

The manifest records which generated artifacts are tracked as items
nested under each input file, and which libraries the project
references. Serialized to .smcgen/project.json next to the inputs.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class ItemRecord(BaseModel):
    """A tracked project item (a file nested under an input)."""

    name: str
    path: str


class ReferenceRecord(BaseModel):
    """A library reference held by the project."""

    name: str
    path: str
    copy_local: bool = True


class ProjectManifest(BaseModel):
    """Root manifest document."""

    schema_version: int = 1
    updated_at: str = Field(default_factory=_now_iso)

    # input file (relative to the manifest root) -> nested items
    items: dict[str, list[ItemRecord]] = Field(default_factory=dict)
    references: list[ReferenceRecord] = Field(default_factory=list)

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = _now_iso()

    def items_for(self, key: str) -> list[ItemRecord]:
        """Item list for an input, created on first access."""
        return self.items.setdefault(key, [])
