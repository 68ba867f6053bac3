"""
Configuration loader — reads smcgen.yml into typed settings.

The file is optional: with no smcgen.yml anywhere above the input
file, every setting takes its default. When present, the YAML is
validated against the Pydantic schema below.

Install paths are resolved once, at startup, into an ``InstallPaths``
value that is passed explicitly into the pipeline.

Precedence for the install root:
    SMCGEN_INSTALL_ROOT env var  >  install_root in smcgen.yml  >  package dir
"""

from __future__ import annotations

import codecs
import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from smcgen.core.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE = "smcgen.yml"
INSTALL_ROOT_ENV = "SMCGEN_INSTALL_ROOT"

# Bundled tools live next to the package unless configured otherwise
_PACKAGE_DIR = Path(__file__).resolve().parents[2]


class CompilerSettings(BaseModel):
    """The SMC compiler archive and the JVM used to run it."""

    model_config = ConfigDict(extra="forbid")

    jar: str = "smc/Smc.jar"
    java: str = "java"


class RuntimeLibrarySettings(BaseModel):
    """Support library the generated code links against."""

    model_config = ConfigDict(extra="forbid")

    path: str = "smc/lib/Release/NoTrace/statemap.dll"
    reference_name: str = "statemap"


class SourceSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    default_args: list[str] = Field(default_factory=lambda: ["-csharp", "-reflect", "-generic"])
    # None = derive from the target-language flag in the arguments
    extension: str | None = None
    # Generated files are read with undecodable bytes replaced
    encoding: str = "utf-8"

    @field_validator("encoding")
    @classmethod
    def _known_codec(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"unknown encoding: {v}") from e
        return v


class GraphSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    default_args: list[str] = Field(default_factory=lambda: ["-graph", "-glevel", "0"])
    extension: str = "*.dot"


class RendererSettings(BaseModel):
    """Graphviz (or compatible) renderer. Optional at runtime."""

    model_config = ConfigDict(extra="forbid")

    command: str = "dot"
    default_args: list[str] = Field(default_factory=lambda: ["-Tsvg"])


class Settings(BaseModel):
    """Root configuration — loaded from smcgen.yml."""

    model_config = ConfigDict(extra="forbid")

    install_root: str | None = None
    lookup_command: str | None = None
    manifest: str = ".smcgen/project.json"

    compiler: CompilerSettings = Field(default_factory=CompilerSettings)
    runtime_library: RuntimeLibrarySettings = Field(default_factory=RuntimeLibrarySettings)
    source: SourceSettings = Field(default_factory=SourceSettings)
    graph: GraphSettings = Field(default_factory=GraphSettings)
    renderer: RendererSettings = Field(default_factory=RendererSettings)


class InstallPaths(BaseModel):
    """Installed dependencies, resolved from the install root."""

    model_config = ConfigDict(frozen=True)

    root: Path
    compiler_jar: Path
    runtime_library: Path


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for smcgen.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to smcgen.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_settings(path: Path | None = None, start_dir: Path | None = None) -> tuple[Settings, Path | None]:
    """Load and validate configuration.

    Args:
        path: Explicit path to smcgen.yml. If None, searches upward
            from ``start_dir``.
        start_dir: Where the upward search begins (default: cwd).

    Returns:
        (settings, config_path). config_path is None when defaults
        were used.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None:
        path = find_config_file(start_dir)
        if path is None:
            logger.debug("No %s found, using defaults", CONFIG_FILE)
            return Settings(), None
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    return settings, path.resolve()


def resolve_install_paths(settings: Settings, config_path: Path | None = None) -> InstallPaths:
    """Compute the install root and the fixed-relative tool paths.

    A relative ``install_root`` in smcgen.yml is taken relative to the
    file's directory.
    """
    env_root = os.environ.get(INSTALL_ROOT_ENV)
    if env_root:
        root = Path(env_root)
    elif settings.install_root:
        root = Path(settings.install_root)
        if not root.is_absolute() and config_path is not None:
            root = config_path.parent / root
    else:
        root = _PACKAGE_DIR

    root = root.resolve()
    paths = InstallPaths(
        root=root,
        compiler_jar=root / settings.compiler.jar,
        runtime_library=root / settings.runtime_library.path,
    )
    logger.debug("Install root: %s", paths.root)
    return paths
