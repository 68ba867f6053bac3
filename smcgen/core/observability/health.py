"""
Installation health — can the pipeline run here, and how much of it?

The compiler archive and the JVM are required; without them nothing
is generated. The renderer and the runtime library are optional: their
absence narrows what a run produces but is not a failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from smcgen.adapters.base import Invoker
from smcgen.core.config.loader import InstallPaths, Settings
from smcgen.core.errors import LookupToolUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class ComponentHealth:
    """Health of a single component."""

    name: str
    status: str = "unknown"  # healthy, degraded, unhealthy, unknown
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status,
            "message": self.message,
            "details": self.details,
        }


@dataclass
class SystemHealth:
    """Aggregate health of the installation."""

    status: str = "healthy"
    timestamp: str = ""
    components: list[ComponentHealth] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.timestamp:
            self.timestamp = datetime.now(UTC).isoformat()

    def add(self, component: ComponentHealth) -> None:
        self.components.append(component)
        statuses = {c.status for c in self.components}
        if "unhealthy" in statuses:
            self.status = "unhealthy"
        elif "degraded" in statuses:
            self.status = "degraded"
        elif statuses == {"healthy"}:
            self.status = "healthy"
        else:
            self.status = "unknown"

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "timestamp": self.timestamp,
            "components": [c.to_dict() for c in self.components],
        }


def check_file(name: str, path: Path, required: bool) -> ComponentHealth:
    if path.is_file():
        return ComponentHealth(name=name, status="healthy", message=str(path))
    return ComponentHealth(
        name=name,
        status="unhealthy" if required else "degraded",
        message=f"Missing installed file: {path}",
    )


def check_command(name: str, command: str, invoker: Invoker, required: bool) -> ComponentHealth:
    try:
        found = invoker.command_exists(command)
    except LookupToolUnavailableError as e:
        return ComponentHealth(name=name, status="unknown", message=str(e))

    if found:
        return ComponentHealth(name=name, status="healthy", message=f"'{command}' on path")
    return ComponentHealth(
        name=name,
        status="unhealthy" if required else "degraded",
        message=f"'{command}' not on path" + ("" if required else " (images will not be rendered)"),
    )


def check_installation(settings: Settings, paths: InstallPaths, invoker: Invoker) -> SystemHealth:
    """Run all checks and return aggregate status."""
    health = SystemHealth()
    health.add(check_file("compiler", paths.compiler_jar, required=True))
    health.add(check_command("java", settings.compiler.java, invoker, required=True))
    health.add(check_command("renderer", settings.renderer.command, invoker, required=False))
    health.add(check_file("runtime_library", paths.runtime_library, required=False))
    logger.debug("Installation health: %s", health.status)
    return health
